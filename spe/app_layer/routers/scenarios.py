"""
Scenario registry and persistence endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from spe.app_layer.dependencies import get_registry, get_store
from spe.app_layer.schemas import SavedScenarioSummary, ScenarioIdResponse
from spe.data_layer.models import Scenario
from spe.data_layer.scenario_registry import ScenarioRegistry
from spe.data_layer.vector_store import VectorStore

router = APIRouter()


@router.get("", response_model=List[Scenario])
def list_registered_scenarios(registry: ScenarioRegistry = Depends(get_registry)):
    """List scenarios held in the in-memory registry."""
    return registry.list()


@router.post("", response_model=ScenarioIdResponse, status_code=201)
def register_scenario(scenario: Scenario, registry: ScenarioRegistry = Depends(get_registry)):
    """Register a scenario in memory under its name."""
    return ScenarioIdResponse(id=registry.register(scenario))


@router.post("/save", response_model=ScenarioIdResponse, status_code=201)
def save_scenario(scenario: Scenario, store: VectorStore = Depends(get_store)):
    """Persist a scenario document."""
    return ScenarioIdResponse(id=store.save_scenario(scenario))


@router.get("/saved", response_model=List[SavedScenarioSummary])
def list_saved_scenarios(store: VectorStore = Depends(get_store)):
    return store.list_scenarios()


@router.get("/saved/{scenario_id}", response_model=Scenario)
def get_saved_scenario(scenario_id: str, store: VectorStore = Depends(get_store)):
    scenario = store.get_scenario(scenario_id)
    if scenario is None:
        raise HTTPException(status_code=404, detail=f"scenario {scenario_id} not found")
    return scenario
