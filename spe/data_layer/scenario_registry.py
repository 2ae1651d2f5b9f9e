"""
In-memory scenario registry keyed by scenario name.
"""

import threading
from typing import Dict, List, Optional

from spe.data_layer.models import Scenario


class ScenarioRegistry:
    """Name -> Scenario map guarded by a single lock."""

    def __init__(self):
        self._scenarios: Dict[str, Scenario] = {}
        self._lock = threading.Lock()

    def register(self, scenario: Scenario) -> str:
        """Store a scenario under its name; blank names become an unused `scenario-<n>`."""
        with self._lock:
            name = scenario.name.strip()
            if not name:
                n = len(self._scenarios) + 1
                while f"scenario-{n}" in self._scenarios:
                    n += 1
                name = f"scenario-{n}"
                scenario = scenario.model_copy(update={"name": name})
            self._scenarios[name] = scenario
        return name

    def get(self, name: str) -> Optional[Scenario]:
        with self._lock:
            return self._scenarios.get(name)

    def list(self) -> List[Scenario]:
        with self._lock:
            return list(self._scenarios.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._scenarios)


_registry_instance: Optional[ScenarioRegistry] = None


def get_scenario_registry() -> ScenarioRegistry:
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = ScenarioRegistry()
    return _registry_instance


def reset_scenario_registry() -> None:
    global _registry_instance
    _registry_instance = None
