import h3
import pytest

from spe.analysis_layer.heatmap import aggregate_heatmap
from spe.data_layer.models import Account, Agent, Globals, Scenario, Schedule
from spe.errors import ValidationError

WEEKLY_MON = Schedule(type="WEEKLY", anchor="MON")


def _scenario():
    return Scenario(
        agents=[Agent(id="a1"), Agent(id="a2")],
        globals=Globals(max_agents=4),
        accounts=[
            Account(id="x1", lat=40.7128, lng=-74.0060, estimated_service_minutes=50, schedule=WEEKLY_MON),
            Account(id="x2", lat=40.7128, lng=-74.0060, estimated_service_minutes=100, schedule=WEEKLY_MON),
            Account(id="y1", lat=34.0522, lng=-118.2437, estimated_service_minutes=400, schedule=WEEKLY_MON),
            Account(
                id="z1",
                lat=41.8781,
                lng=-87.6298,
                estimated_service_minutes=20,
                schedule=Schedule(type="WEEKLY", anchor="TUE"),
            ),
        ],
    )


def test_values_sum_within_a_cell():
    cells = aggregate_heatmap(_scenario(), "service_stop_time", 0, 9, cycle_days=28)
    by_cell = {c.h3: c.value for c in cells}

    ny = h3.latlng_to_cell(40.7128, -74.0060, 9)
    la = h3.latlng_to_cell(34.0522, -118.2437, 9)
    assert set(by_cell) == {ny, la}
    assert by_cell[ny] == pytest.approx(0.25 + 0.5)
    # ratios are clamped before summing
    assert by_cell[la] == pytest.approx(1.0)


def test_cells_are_sorted_and_centered():
    cells = aggregate_heatmap(_scenario(), "service_stop_time", 0, 7, cycle_days=28)
    assert [c.h3 for c in cells] == sorted(c.h3 for c in cells)
    for cell in cells:
        assert (cell.lat, cell.lng) == pytest.approx(h3.cell_to_latlng(cell.h3))


def test_only_accounts_active_on_day():
    cells = aggregate_heatmap(_scenario(), "service_stop_time", 1, 9, cycle_days=28)
    assert len(cells) == 1
    assert cells[0].value == pytest.approx(0.1)
    assert aggregate_heatmap(_scenario(), "service_stop_time", 2, 9, cycle_days=28) == []


def test_agents_available_uses_fleet_cap():
    cells = aggregate_heatmap(_scenario(), "agents_available", 1, 9, cycle_days=28)
    assert cells[0].value == pytest.approx(0.5)


def test_unknown_feature_is_empty():
    assert aggregate_heatmap(_scenario(), "customer_mood", 0, 9) == []


@pytest.mark.parametrize("level", [-1, 16])
def test_invalid_resolution_is_rejected(level):
    with pytest.raises(ValidationError):
        aggregate_heatmap(_scenario(), "service_stop_time", 0, level)
