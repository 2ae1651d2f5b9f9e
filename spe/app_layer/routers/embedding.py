"""
Embedding synthesis, indexing and similarity search endpoints.
"""

from fastapi import APIRouter, Depends

from spe.analysis_layer.spectral_embedding import SpectralEmbedder
from spe.app_layer.dependencies import get_embedder, get_store
from spe.app_layer.schemas import (
    EmbeddingResponse,
    IndexRequest,
    IndexResponse,
    SearchHitResponse,
    SearchRequest,
    SearchResponse,
)
from spe.data_layer.models import Scenario
from spe.data_layer.vector_store import VectorStore

router = APIRouter()


@router.post("", response_model=EmbeddingResponse)
def embed_scenario(scenario: Scenario, embedder: SpectralEmbedder = Depends(get_embedder)):
    """Build the six-channel spectral embedding of a scenario."""
    return embedder.embed(scenario).to_dict()


@router.post("/index", response_model=IndexResponse)
def index_embedding(request: IndexRequest, store: VectorStore = Depends(get_store)):
    """Persist a vector and insert it into its dimensionality-specific index."""
    return IndexResponse(embedding_id=store.add_embedding(request.scenario_id, request.vector))


@router.post("/search", response_model=SearchResponse)
def search_embeddings(request: SearchRequest, store: VectorStore = Depends(get_store)):
    """k nearest stored embeddings by cosine distance."""
    hits = store.search(request.vector, request.k)
    return SearchResponse(hits=[SearchHitResponse(ref=h.ref, distance=h.distance) for h in hits])
