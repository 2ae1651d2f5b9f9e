"""
Multi-resolution spectral embedding of a scheduling scenario.

Each account contributes, for every active day of the cycle, a sum of sinusoids
(one per spatial resolution level) whose phase couples its location with the
day of the cycle and whose amplitude encodes one attribute. Contributions
interfere additively within a channel; channels are L2-normalized afterwards so
that scenarios compare by cosine similarity irrespective of entity count.
"""

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from config import get_settings
from config.settings import EmbeddingSettings
from spe.analysis_layer.features import (
    AGENT_START_LOCATIONS,
    CHANNEL_ORDER,
    feature_ratio,
    normalize,
    overshoot_amplitude,
)
from spe.data_layer.models import EmbeddingParams, Scenario
from spe.data_layer.schedule import default_cycle_start, expand_schedule

REFERENCE_LEVEL = 5

ACCOUNT_CHANNELS = [name for name in CHANNEL_ORDER if name != AGENT_START_LOCATIONS]


@dataclass
class ResolvedParams:
    """EmbeddingParams with every zero/empty field replaced by its configured default."""

    dims: Dict[str, int]
    h3_levels: List[int]
    cycle_days: int


@dataclass
class EmbeddingResult:
    embedding: List[float]
    components: Dict[str, List[float]]
    offsets: Dict[str, Tuple[int, int]]
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["offsets"] = {name: list(span) for name, span in self.offsets.items()}
        return data


def phase_shift(lat_norm: float, lng_norm: float, day: int, cycle_days: int) -> float:
    """Oscillation offset combining spatial position and day of cycle."""
    phi_space = (lat_norm - 0.5) * math.pi + (lng_norm - 0.5) * math.pi
    phi_day = 2 * math.pi * day / max(1, cycle_days)
    return phi_space + phi_day


def frequency_for_level(base_frequency: float, level: int) -> float:
    """Level 5 is the reference scale; each level away halves/doubles the frequency."""
    return base_frequency / math.pow(2, level - REFERENCE_LEVEL)


def superimpose(
    vec: np.ndarray,
    amplitude: float,
    base_frequency: float,
    levels: Sequence[int],
    phase: float,
) -> None:
    """Add amplitude * sin(2*pi*f(L)*i/N + phase) into vec for every level, in place."""
    n = len(vec)
    if n == 0 or amplitude == 0:
        return
    positions = np.arange(n, dtype=np.float64) / n
    for level in levels:
        f = frequency_for_level(base_frequency, level)
        vec += amplitude * np.sin(2 * math.pi * f * positions + phase)


def l2_normalize(vec: np.ndarray) -> np.ndarray:
    """Scale to unit length in place; a zero vector is left unchanged."""
    norm = float(np.sqrt(np.dot(vec, vec)))
    if norm > 0:
        vec /= norm
    return vec


class SpectralEmbedder:
    """
    Builds the six-channel scenario embedding.

    Channel order: service_stop_time, service_window_start, service_window_duration,
    pinned_accounts, agents_available, agent_start_locations.
    """

    def __init__(
        self,
        settings: Optional[EmbeddingSettings] = None,
        cycle_start: Optional[datetime] = None,
    ):
        self.settings = settings or get_settings().embedding
        self.cycle_start = cycle_start or default_cycle_start(self.settings.cycle_start)

    def resolve_params(self, params: EmbeddingParams) -> ResolvedParams:
        s = self.settings
        dims = {}
        for name in CHANNEL_ORDER:
            requested = getattr(params, f"res_{name}")
            dims[name] = requested if requested > 0 else getattr(s, f"res_{name}")
        return ResolvedParams(
            dims=dims,
            h3_levels=list(params.h3_levels) or list(s.h3_levels),
            cycle_days=params.cycle_days if params.cycle_days > 0 else s.cycle_days,
        )

    def embed(self, scenario: Scenario) -> EmbeddingResult:
        p = self.resolve_params(scenario.params)
        overshoot = self.settings.overshoot
        base_freq = self.settings.base_frequency

        channels = {name: np.zeros(p.dims[name], dtype=np.float64) for name in CHANNEL_ORDER}

        # Agents contribute once each, at day 0
        agent_amp = overshoot_amplitude(1.0, overshoot)
        for agent in scenario.agents:
            phi = phase_shift(
                normalize(agent.lat, -90, 90), normalize(agent.lng, -180, 180), 0, p.cycle_days
            )
            superimpose(channels[AGENT_START_LOCATIONS], agent_amp, base_freq, p.h3_levels, phi)

        for account in scenario.accounts:
            lat_n = normalize(account.lat, -90, 90)
            lng_n = normalize(account.lng, -180, 180)
            active_days = expand_schedule(account.schedule, p.cycle_days, self.cycle_start)
            if not active_days:
                continue

            amplitudes = {
                name: overshoot_amplitude(feature_ratio(account, name, scenario), overshoot)
                for name in ACCOUNT_CHANNELS
            }
            for day in sorted(active_days):
                phi = phase_shift(lat_n, lng_n, day, p.cycle_days)
                for name in ACCOUNT_CHANNELS:
                    superimpose(channels[name], amplitudes[name], base_freq, p.h3_levels, phi)

        for vec in channels.values():
            l2_normalize(vec)

        embedding: List[float] = []
        components: Dict[str, List[float]] = {}
        offsets: Dict[str, Tuple[int, int]] = {}
        for name in CHANNEL_ORDER:
            values = channels[name].tolist()
            start = len(embedding)
            embedding.extend(values)
            offsets[name] = (start, len(embedding))
            components[name] = values

        meta = {
            "h3_levels": p.h3_levels,
            "cycle_days": p.cycle_days,
            "order": list(CHANNEL_ORDER),
            "dims": dict(p.dims),
        }
        return EmbeddingResult(embedding=embedding, components=components, offsets=offsets, meta=meta)
