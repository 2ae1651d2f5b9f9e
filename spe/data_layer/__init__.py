"""
Data Layer - Scenario model, schedule expansion and persistence.

Provides:
- Scenario, Agent, Account, Schedule: request document model
- expand_schedule: recurrence expansion over the planning cycle
- VectorStore: SQLite scenario/embedding store with similarity search
- ScenarioRegistry: in-memory scenario registry
"""

from spe.data_layer.models import (
    Account,
    Agent,
    EmbeddingParams,
    Globals,
    Scenario,
    Schedule,
)
from spe.data_layer.schedule import active_accounts, expand_schedule, weekday_index
from spe.data_layer.scenario_registry import ScenarioRegistry, get_scenario_registry
from spe.data_layer.vector_store import (
    SearchHit,
    VectorStore,
    get_vector_store,
    reset_vector_store,
)

__all__ = [
    # Scenario document
    "Account",
    "Agent",
    "EmbeddingParams",
    "Globals",
    "Scenario",
    "Schedule",
    # Schedules
    "active_accounts",
    "expand_schedule",
    "weekday_index",
    # Persistence
    "ScenarioRegistry",
    "get_scenario_registry",
    "SearchHit",
    "VectorStore",
    "get_vector_store",
    "reset_vector_store",
]
