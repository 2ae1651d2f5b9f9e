"""
H3 heatmap aggregation of a single account feature on a single cycle day.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

import h3

from spe.analysis_layer.features import ACCOUNT_FEATURES, feature_ratio
from spe.data_layer.models import Scenario
from spe.data_layer.schedule import active_accounts, resolve_cycle_days
from spe.errors import ValidationError

MIN_H3_RESOLUTION = 0
MAX_H3_RESOLUTION = 15


@dataclass
class HeatCell:
    """One non-empty H3 cell with its accumulated feature value."""

    h3: str
    lat: float
    lng: float
    value: float


def aggregate_heatmap(
    scenario: Scenario,
    feature: str,
    day: int,
    h3_level: int,
    cycle_days: Optional[int] = None,
    cycle_start: Optional[datetime] = None,
) -> List[HeatCell]:
    """
    Sum the raw clamped feature ratio of every account active on `day` per H3 cell.

    Args:
        scenario: Scenario to aggregate.
        feature: Account feature name (see ACCOUNT_FEATURES).
        day: Cycle day offset.
        h3_level: H3 resolution of the output cells.
        cycle_days: Cycle length; defaults to scenario params, then settings.

    Returns:
        Cells sorted by H3 index. Unknown features yield an empty list.
    """
    if not MIN_H3_RESOLUTION <= h3_level <= MAX_H3_RESOLUTION:
        raise ValidationError(
            f"h3_level must be in [{MIN_H3_RESOLUTION}, {MAX_H3_RESOLUTION}], got {h3_level}"
        )
    if feature not in ACCOUNT_FEATURES:
        return []

    cycle = resolve_cycle_days(scenario, cycle_days)
    totals: Dict[str, float] = defaultdict(float)
    for account in active_accounts(scenario, day, cycle, cycle_start):
        cell = h3.latlng_to_cell(account.lat, account.lng, h3_level)
        totals[cell] += feature_ratio(account, feature, scenario)

    cells = []
    for cell in sorted(totals):
        lat, lng = h3.cell_to_latlng(cell)
        cells.append(HeatCell(h3=cell, lat=lat, lng=lng, value=totals[cell]))
    return cells
