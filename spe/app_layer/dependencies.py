"""
FastAPI dependency injection providers.
"""

from functools import lru_cache

from fastapi import Depends

from config import Settings, get_settings
from spe.analysis_layer.spectral_embedding import SpectralEmbedder
from spe.data_layer.scenario_registry import ScenarioRegistry, get_scenario_registry
from spe.data_layer.vector_store import VectorStore, get_vector_store
from spe.simulation_layer.engine import SimulationEngine


@lru_cache
def get_cached_settings() -> Settings:
    return get_settings()


def get_store() -> VectorStore:
    return get_vector_store()


def get_registry() -> ScenarioRegistry:
    return get_scenario_registry()


def get_embedder(settings: Settings = Depends(get_cached_settings)) -> SpectralEmbedder:
    return SpectralEmbedder(settings.embedding)


def get_simulation_engine(settings: Settings = Depends(get_cached_settings)) -> SimulationEngine:
    return SimulationEngine.from_settings(settings)
