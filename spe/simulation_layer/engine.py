"""
Simulation engine: optional external optimization plus the greedy baseline,
reduced to a fixed-width feature vector.
"""

import logging
from typing import Optional

from config import get_settings
from config.settings import Settings
from spe.data_layer.models import Scenario
from spe.errors import OptimizerUnavailable
from spe.simulation_layer.feature_vector import stats_to_vector
from spe.simulation_layer.models import SimulationResult
from spe.simulation_layer.optimizer import RouteOptimizer, build_optimizer
from spe.simulation_layer.route_simulator import RouteSimulator

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Runs one simulated day.
    The optimizer is optional; its absence or failure never fails the run.
    """

    def __init__(
        self,
        simulator: Optional[RouteSimulator] = None,
        optimizer: Optional[RouteOptimizer] = None,
        optimizer_timeout: Optional[float] = None,
    ):
        self.simulator = simulator or RouteSimulator()
        self.optimizer = optimizer
        self.optimizer_timeout = optimizer_timeout

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SimulationEngine":
        settings = settings or get_settings()
        return cls(
            simulator=RouteSimulator(settings.simulation),
            optimizer=build_optimizer(settings.optimizer),
            optimizer_timeout=settings.optimizer.timeout_s,
        )

    def run(self, scenario: Scenario, day: int) -> SimulationResult:
        problem = self.simulator.build_optimizer_input(scenario, day)

        optimizer_output = None
        if self.optimizer is not None:
            try:
                optimizer_output = self.optimizer.optimize(problem, timeout=self.optimizer_timeout)
            except OptimizerUnavailable as exc:
                logger.warning("Optimizer unavailable, returning greedy stats only: %s", exc)
        else:
            logger.debug("No optimizer configured")

        stats = self.simulator.simulate(scenario, day)
        logger.info(
            "Simulated day %d: %d stops, %d vehicles, %d unassigned",
            day, len(problem.jobs), stats.reps_used_per_day[0], stats.unassigned_stops,
        )
        return SimulationResult(
            optimizer_input=problem,
            optimizer_output=optimizer_output,
            stats=stats,
            vector=stats_to_vector(stats),
        )
