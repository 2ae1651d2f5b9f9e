"""
Per-feature H3 heatmap endpoint.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from config import Settings
from spe.analysis_layer.heatmap import aggregate_heatmap
from spe.app_layer.dependencies import get_cached_settings
from spe.app_layer.schemas import HeatmapRequest, HeatmapResponse

router = APIRouter()


@router.post("", response_model=HeatmapResponse)
def build_heatmap(request: HeatmapRequest, settings: Settings = Depends(get_cached_settings)):
    h3_level = request.h3_level if request.h3_level is not None else settings.simulation.h3_resolution
    cells = aggregate_heatmap(
        request.scenario,
        request.feature,
        request.day,
        h3_level,
        cycle_days=settings.embedding.cycle_days,
    )
    return {"cells": [asdict(cell) for cell in cells]}
