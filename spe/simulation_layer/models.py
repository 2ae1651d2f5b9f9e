"""
Shared data models for the simulation layer.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class OptimizerJob:
    """A stop to visit: one active account."""

    id: int
    service: int  # seconds
    location: List[float]  # [lng, lat]
    time_windows: Optional[List[List[int]]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "service": self.service, "location": self.location}
        if self.time_windows:
            data["time_windows"] = self.time_windows
        return data


@dataclass
class OptimizerVehicle:
    """One agent; starts and ends at its home location."""

    id: int
    start: List[float]  # [lng, lat]
    end: List[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OptimizerProblem:
    """VROOM-style jobs/vehicles request."""

    jobs: List[OptimizerJob] = field(default_factory=list)
    vehicles: List[OptimizerVehicle] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobs": [job.to_dict() for job in self.jobs],
            "vehicles": [vehicle.to_dict() for vehicle in self.vehicles],
        }


@dataclass
class SimStats:
    """Outcome of one greedy simulation day."""

    driving_sec_per_rep: List[float]
    service_sec_per_rep: List[float]
    reps_used_per_day: List[int]
    unassigned_stops: int
    total_travel_sec: float
    total_service_sec: float
    total_idle_sec: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SimulationResult:
    optimizer_input: OptimizerProblem
    optimizer_output: Optional[Dict[str, Any]]
    stats: SimStats
    vector: List[float]
