"""
Greedy nearest-vehicle routing simulation.

Vehicles start at agent locations. Accounts active on the requested day are taken
in input order and each goes to whichever vehicle is currently nearest; that
vehicle then moves to the account. There is no backtracking, so the input order
determines the outcome.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from config import get_settings
from config.settings import SimulationSettings
from spe.analysis_layer.features import service_seconds
from spe.data_layer.models import Account, Scenario
from spe.data_layer.schedule import active_accounts, resolve_cycle_days
from spe.simulation_layer.models import (
    OptimizerJob,
    OptimizerProblem,
    OptimizerVehicle,
    SimStats,
)

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


@dataclass
class _Vehicle:
    lat: float
    lng: float
    driving_sec: float = 0.0
    service_sec: float = 0.0


class RouteSimulator:
    """Runs the greedy assignment and builds the external optimizer request."""

    def __init__(
        self,
        settings: Optional[SimulationSettings] = None,
        cycle_start: Optional[datetime] = None,
    ):
        self.settings = settings or get_settings().simulation
        self.cycle_start = cycle_start

    def _travel_seconds(self, km: float) -> float:
        return km / self.settings.average_speed_kmh * 3600.0

    def active_accounts(self, scenario: Scenario, day: int) -> List[Account]:
        cycle = resolve_cycle_days(scenario)
        return active_accounts(scenario, day, cycle, self.cycle_start)

    def build_optimizer_input(self, scenario: Scenario, day: int) -> OptimizerProblem:
        """Jobs are the active accounts, vehicles the agents (start == end)."""
        problem = OptimizerProblem()
        for i, agent in enumerate(scenario.agents, start=1):
            home = [agent.lng, agent.lat]
            problem.vehicles.append(OptimizerVehicle(id=i, start=home, end=list(home)))

        for i, account in enumerate(self.active_accounts(scenario, day), start=1):
            job = OptimizerJob(
                id=i,
                service=int(service_seconds(account)),
                location=[account.lng, account.lat],
            )
            start = int(account.service_window_start_min) * 60
            end = int(account.service_window_start_min + account.service_window_duration_min) * 60
            if end > start:
                job.time_windows = [[start, end]]
            problem.jobs.append(job)
        return problem

    def simulate(self, scenario: Scenario, day: int) -> SimStats:
        """
        Assign every account active on `day` to the nearest vehicle.

        Returns:
            Per-vehicle driving/service seconds, fleet size, unassigned stops and totals.
        """
        vehicles = [_Vehicle(lat=agent.lat, lng=agent.lng) for agent in scenario.agents]
        stops = self.active_accounts(scenario, day)

        assigned = 0
        if vehicles:
            for account in stops:
                best, best_km = 0, math.inf
                for i, vehicle in enumerate(vehicles):
                    km = haversine_km(vehicle.lat, vehicle.lng, account.lat, account.lng)
                    if km < best_km:
                        best, best_km = i, km
                vehicle = vehicles[best]
                vehicle.driving_sec += self._travel_seconds(best_km)
                vehicle.service_sec += service_seconds(account)
                vehicle.lat, vehicle.lng = account.lat, account.lng
                assigned += 1

        driving = [v.driving_sec for v in vehicles]
        service = [v.service_sec for v in vehicles]
        return SimStats(
            driving_sec_per_rep=driving,
            service_sec_per_rep=service,
            reps_used_per_day=[len(vehicles)],
            unassigned_stops=max(0, len(stops) - assigned),
            total_travel_sec=sum(driving),
            total_service_sec=sum(service),
            total_idle_sec=0.0,
        )
