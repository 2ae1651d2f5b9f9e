"""
Pydantic models for API request/response.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from spe.data_layer.models import Scenario


class ScenarioIdResponse(BaseModel):
    id: str


class SavedScenarioSummary(BaseModel):
    id: str
    name: Optional[str] = None
    created_at: str


class EmbeddingResponse(BaseModel):
    embedding: List[float]
    components: Dict[str, List[float]]
    offsets: Dict[str, List[int]]
    meta: Dict[str, Any]


class IndexRequest(BaseModel):
    scenario_id: str = ""
    vector: List[float]


class IndexResponse(BaseModel):
    embedding_id: str


class SearchRequest(BaseModel):
    vector: List[float]
    k: int = 0


class SearchHitResponse(BaseModel):
    ref: str
    distance: float


class SearchResponse(BaseModel):
    hits: List[SearchHitResponse]


class HeatmapRequest(BaseModel):
    scenario: Scenario
    feature: str
    day: int = 0
    h3_level: Optional[int] = Field(default=None, description="Defaults to SIM_H3_RESOLUTION")


class HeatCellResponse(BaseModel):
    h3: str
    lat: float
    lng: float
    value: float


class HeatmapResponse(BaseModel):
    cells: List[HeatCellResponse]


class SimulateRequest(BaseModel):
    scenario: Scenario
    day: int = 0


class SimStatsResponse(BaseModel):
    driving_sec_per_rep: List[float]
    service_sec_per_rep: List[float]
    reps_used_per_day: List[int]
    unassigned_stops: int
    total_travel_sec: float
    total_service_sec: float
    total_idle_sec: float


class SimulateResponse(BaseModel):
    vroom_input: Dict[str, Any]
    vroom_output: Optional[Dict[str, Any]] = None
    stats: SimStatsResponse
    vector: List[float]


class ViewState(BaseModel):
    latitude: float
    longitude: float
    zoom: float


class ConfigResponse(BaseModel):
    mapboxToken: str
    initialViewState: ViewState
    ui: Dict[str, bool]
    defaults: Dict[str, int]
    h3Levels: List[int]
    cycleDays: int
    baseFrequency: float
