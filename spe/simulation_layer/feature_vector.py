"""
Fixed-width reduction of simulation outcomes.

Per-vehicle distributions of arbitrary fleet size are summarized as
[min, max, mean, p50, p75, p95] so outcomes of different fleets can be compared,
stored and searched like any other embedding.
"""

from typing import List, Sequence

import pandas as pd

from spe.simulation_layer.models import SimStats

SUMMARY_FIELDS = ["min", "max", "mean", "p50", "p75", "p95"]
PERCENTILES = [0.5, 0.75, 0.95]

STATS_VECTOR_LENGTH = 4 * len(SUMMARY_FIELDS) + 4


def summarize(values: Sequence[float]) -> List[float]:
    """
    Six-number summary using linear-interpolation percentiles.

    An empty distribution reduces to six zeros.
    """
    if len(values) == 0:
        return [0.0] * len(SUMMARY_FIELDS)
    series = pd.Series(values, dtype="float64").sort_values(ignore_index=True)
    quantiles = series.quantile(PERCENTILES, interpolation="linear")
    return [
        float(series.iloc[0]),
        float(series.iloc[-1]),
        float(series.mean()),
        *(float(q) for q in quantiles),
    ]


def stats_to_vector(stats: SimStats) -> List[float]:
    """Driving, service, reps-used and unassigned summaries followed by the four totals."""
    vector: List[float] = []
    vector.extend(summarize(stats.driving_sec_per_rep))
    vector.extend(summarize(stats.service_sec_per_rep))
    vector.extend(summarize([float(x) for x in stats.reps_used_per_day]))
    vector.extend(summarize([float(stats.unassigned_stops)]))
    vector.extend([
        stats.total_travel_sec,
        stats.total_service_sec,
        stats.total_idle_sec,
        float(stats.unassigned_stops),
    ])
    return vector
