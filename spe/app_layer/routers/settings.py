"""
UI bootstrap configuration endpoint.
"""

from fastapi import APIRouter, Depends

from config import Settings
from spe.analysis_layer.features import CHANNEL_ORDER
from spe.app_layer.dependencies import get_cached_settings
from spe.app_layer.schemas import ConfigResponse, ViewState

router = APIRouter()


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@router.get("", response_model=ConfigResponse)
def get_config(settings: Settings = Depends(get_cached_settings)):
    embedding = settings.embedding
    return ConfigResponse(
        mapboxToken=settings.map.mapbox_token,
        initialViewState=ViewState(
            latitude=settings.map.latitude,
            longitude=settings.map.longitude,
            zoom=settings.map.zoom,
        ),
        ui={
            "embeddingTab": settings.ui.enable_embedding_tab,
            "spectralTab": settings.ui.enable_spectral_tab,
            "heatmapTab": settings.ui.enable_heatmap_tab,
        },
        defaults={_camel(f"res_{name}"): getattr(embedding, f"res_{name}") for name in CHANNEL_ORDER},
        h3Levels=embedding.h3_levels,
        cycleDays=embedding.cycle_days,
        baseFrequency=embedding.base_frequency,
    )
