"""
Analysis Layer - spectral embedding synthesis and heatmap aggregation.
"""

from spe.analysis_layer.heatmap import HeatCell, aggregate_heatmap
from spe.analysis_layer.spectral_embedding import EmbeddingResult, SpectralEmbedder

__all__ = ["HeatCell", "aggregate_heatmap", "EmbeddingResult", "SpectralEmbedder"]
