import sys
from datetime import datetime, timezone
from pathlib import Path

# Ensure package import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from config import reset_settings
from spe.data_layer.models import Account, Agent, Scenario, Schedule
from spe.data_layer.scenario_registry import reset_scenario_registry
from spe.data_layer.vector_store import VectorStore, reset_vector_store

# 2024-01-01 is a Monday
CYCLE_START = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Fresh settings, registry and store for every test."""
    reset_settings()
    reset_scenario_registry()
    reset_vector_store()
    yield
    reset_vector_store()
    reset_scenario_registry()
    reset_settings()


@pytest.fixture
def cycle_start():
    return CYCLE_START


@pytest.fixture
def scenario() -> Scenario:
    return Scenario(
        name="london-north",
        agents=[
            Agent(id="a1", name="North", lat=51.60, lng=-0.10),
            Agent(id="a2", name="South", lat=51.40, lng=-0.10),
        ],
        accounts=[
            Account(
                id="c1",
                name="Camden",
                lat=51.59,
                lng=-0.10,
                estimated_service_minutes=30,
                service_window_start_min=480,
                service_window_duration_min=240,
                schedule=Schedule(type="WEEKLY", anchor="MON"),
            ),
            Account(
                id="c2",
                name="Croydon",
                lat=51.41,
                lng=-0.10,
                estimated_service_minutes=60,
                pinned_agent_id="a2",
                schedule=Schedule(type="WEEKLY", anchor="MON"),
            ),
            Account(
                id="c3",
                name="Barnet",
                lat=51.62,
                lng=-0.10,
                estimated_service_minutes=45,
                schedule=Schedule(type="BIWEEKLY_BD", anchor="TUE"),
            ),
        ],
    )


@pytest.fixture
def store(tmp_path):
    vector_store = VectorStore(str(tmp_path / "spe.db"))
    yield vector_store
    vector_store.close()
