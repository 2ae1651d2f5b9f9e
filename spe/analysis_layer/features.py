"""
Per-account feature ratios shared by the spectral embedder and the heatmap aggregator.
"""

from typing import Callable, Dict, Optional

from spe.data_layer.models import Account, Scenario

SERVICE_STOP_TIME = "service_stop_time"
SERVICE_WINDOW_START = "service_window_start"
SERVICE_WINDOW_DURATION = "service_window_duration"
PINNED_ACCOUNTS = "pinned_accounts"
AGENTS_AVAILABLE = "agents_available"
AGENT_START_LOCATIONS = "agent_start_locations"

# Flat embedding layout
CHANNEL_ORDER = [
    SERVICE_STOP_TIME,
    SERVICE_WINDOW_START,
    SERVICE_WINDOW_DURATION,
    PINNED_ACCOUNTS,
    AGENTS_AVAILABLE,
    AGENT_START_LOCATIONS,
]

SERVICE_MINUTES_SCALE = 200.0
MINUTES_PER_DAY = 1440.0


def clamp(x: float, lo: float, hi: float) -> float:
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def normalize(x: float, lo: float, hi: float) -> float:
    """Map x from [lo, hi] onto [0, 1], clamping out-of-range inputs."""
    if hi <= lo:
        return 0.0
    return clamp((x - lo) / (hi - lo), 0.0, 1.0)


def overshoot_amplitude(ratio: float, overshoot: float) -> float:
    """Expand a unit ratio so superposed signals can exceed unit scale before renormalization."""
    return clamp(ratio * (1.0 + overshoot), 0.0, 1.0 + overshoot)


def agents_available_ratio(account: Account, scenario: Scenario) -> float:
    ratio = account.agents_available_ratio
    if ratio <= 0:
        ratio = len(scenario.agents) / scenario.effective_max_agents()
    return clamp(ratio, 0.0, 1.0)


ACCOUNT_FEATURES: Dict[str, Callable[[Account, Scenario], float]] = {
    SERVICE_STOP_TIME: lambda acc, sc: clamp(
        acc.estimated_service_minutes / SERVICE_MINUTES_SCALE, 0.0, 1.0
    ),
    SERVICE_WINDOW_START: lambda acc, sc: clamp(
        acc.service_window_start_min / MINUTES_PER_DAY, 0.0, 1.0
    ),
    SERVICE_WINDOW_DURATION: lambda acc, sc: clamp(
        acc.service_window_duration_min / MINUTES_PER_DAY, 0.0, 1.0
    ),
    PINNED_ACCOUNTS: lambda acc, sc: 1.0 if acc.is_pinned else 0.0,
    AGENTS_AVAILABLE: agents_available_ratio,
}


def feature_ratio(account: Account, feature: str, scenario: Scenario) -> Optional[float]:
    """Clamped [0, 1] ratio of an account attribute, or None for an unknown feature."""
    fn = ACCOUNT_FEATURES.get(feature)
    if fn is None:
        return None
    return fn(account, scenario)


def service_seconds(account: Account) -> float:
    """Service time in seconds, capped at SERVICE_MINUTES_SCALE minutes."""
    return clamp(account.estimated_service_minutes / SERVICE_MINUTES_SCALE, 0.0, 1.0) * SERVICE_MINUTES_SCALE * 60.0
