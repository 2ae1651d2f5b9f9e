"""
Scenario document model.
Parsed straight from request payloads; immutable once handed to a component.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Document(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Schedule(_Document):
    """Recurrence definition: a tag (WEEKLY, BIWEEKLY_AC, ...) or a raw RRULE."""

    type: str = ""
    anchor: str = "MON"
    rrule: str = ""


class Agent(_Document):
    """A mobile field agent (one vehicle in the simulation)."""

    id: str = ""
    name: str = ""
    lat: float = 0.0
    lng: float = 0.0
    schedule: Optional[Schedule] = None  # parsed, not consulted


class Account(_Document):
    """A recurring service account."""

    id: str = ""
    name: str = ""
    lat: float = 0.0
    lng: float = 0.0
    estimated_service_minutes: float = 0.0
    service_window_start_min: float = 0.0
    service_window_duration_min: float = 0.0
    pinned_agent_id: str = ""
    agents_available_ratio: float = 0.0  # <= 0 means derive from fleet size
    schedule: Schedule = Field(default_factory=Schedule)

    @property
    def is_pinned(self) -> bool:
        return bool(self.pinned_agent_id.strip())


class Globals(_Document):
    """Fleet-wide limits. Informational only."""

    max_agents: int = 0
    max_work_minutes_per_week: float = 0.0
    max_work_minutes_per_day: float = 0.0
    max_travel_minutes_per_day: float = 0.0


class EmbeddingParams(_Document):
    """Per-request embedding overrides. Zero/empty fields fall back to settings."""

    res_service_stop_time: int = 0
    res_service_window_start: int = 0
    res_service_window_duration: int = 0
    res_pinned_accounts: int = 0
    res_agents_available: int = 0
    res_agent_start_locations: int = 0
    h3_levels: List[int] = Field(default_factory=list)
    cycle_days: int = 0


class Scenario(_Document):
    """A complete scheduling scenario."""

    name: str = ""
    agents: List[Agent] = Field(default_factory=list)
    accounts: List[Account] = Field(default_factory=list)
    globals: Globals = Field(default_factory=Globals)
    params: EmbeddingParams = Field(default_factory=EmbeddingParams)

    def effective_max_agents(self) -> int:
        """Fleet cap used for the agents-available ratio."""
        if self.globals.max_agents > 0:
            return self.globals.max_agents
        return max(1, len(self.agents))
