"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_settings
from config.logging_setup import setup_logging
from spe import __version__
from spe.app_layer.routers import embedding, heatmap, scenarios, settings, simulation
from spe.data_layer.vector_store import reset_vector_store
from spe.errors import StorageUnavailable, ValidationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("SPE server starting (version %s)", __version__)
    yield
    reset_vector_store()


app = FastAPI(
    title="SPE: Scenario Spectral Embedding API",
    description="Field-service scenario embeddings, similarity search, heatmaps and routing simulation",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().server.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
    logger.error("Storage unavailable on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


app.include_router(settings.router, prefix="/api/v1/config", tags=["config"])
app.include_router(scenarios.router, prefix="/api/v1/scenarios", tags=["scenarios"])
app.include_router(embedding.router, prefix="/api/v1/embedding", tags=["embedding"])
app.include_router(heatmap.router, prefix="/api/v1/heatmap", tags=["heatmap"])
app.include_router(
    simulation.router, prefix="/api/v1/simulation", tags=["simulation"]
)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
