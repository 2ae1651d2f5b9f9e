"""
SPE: scenario spectral embedding, similarity search, heatmaps and routing simulation
for field-service scheduling scenarios.
"""

__version__ = "0.3.0"
