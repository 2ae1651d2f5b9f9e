import pytest

from config.settings import SimulationSettings
from spe.data_layer.models import Account, Agent, Scenario, Schedule
from spe.simulation_layer.route_simulator import RouteSimulator, haversine_km

WEEKLY_MON = Schedule(type="WEEKLY", anchor="MON")


@pytest.fixture
def simulator():
    return RouteSimulator(SimulationSettings(average_speed_kmh=60.0))


def test_haversine_known_distance():
    # London -> Paris
    assert haversine_km(51.5074, -0.1278, 48.8566, 2.3522) == pytest.approx(343.5, abs=1.0)
    assert haversine_km(10.0, 10.0, 10.0, 10.0) == 0.0


def test_greedy_assigns_nearest_vehicle(simulator, scenario):
    stats = simulator.simulate(scenario, 0)

    # c1 -> north vehicle, c2 -> south vehicle; c3 is inactive on Monday
    north_km = haversine_km(51.60, -0.10, 51.59, -0.10)
    south_km = haversine_km(51.40, -0.10, 51.41, -0.10)
    assert stats.driving_sec_per_rep == pytest.approx([north_km * 60, south_km * 60])
    assert stats.service_sec_per_rep == pytest.approx([30 * 60, 60 * 60])
    assert stats.reps_used_per_day == [2]
    assert stats.unassigned_stops == 0
    assert stats.total_travel_sec == pytest.approx(sum(stats.driving_sec_per_rep))
    assert stats.total_service_sec == pytest.approx(5400)
    assert stats.total_idle_sec == 0.0


def test_vehicle_moves_with_each_stop(simulator):
    scenario = Scenario(
        agents=[Agent(lat=0.0, lng=0.0), Agent(lat=0.0, lng=2.0)],
        accounts=[
            Account(id="first", lat=0.0, lng=0.9, schedule=WEEKLY_MON),
            # nearer to vehicle 0 only after it has moved
            Account(id="second", lat=0.0, lng=1.4, schedule=WEEKLY_MON),
        ],
    )
    stats = simulator.simulate(scenario, 0)
    assert stats.reps_used_per_day == [2]
    expected_km = haversine_km(0, 0, 0, 0.9) + haversine_km(0, 0.9, 0, 1.4)
    assert stats.driving_sec_per_rep == pytest.approx([expected_km * 60, 0.0])


def test_ties_go_to_lowest_vehicle_index(simulator):
    scenario = Scenario(
        agents=[Agent(lat=0.0, lng=-1.0), Agent(lat=0.0, lng=1.0)],
        accounts=[Account(lat=0.0, lng=0.0, estimated_service_minutes=10, schedule=WEEKLY_MON)],
    )
    stats = simulator.simulate(scenario, 0)
    assert stats.service_sec_per_rep == [600.0, 0.0]
    assert stats.reps_used_per_day == [2]


def test_no_agents_leaves_everything_unassigned(simulator, scenario):
    stats = simulator.simulate(scenario.model_copy(update={"agents": []}), 0)
    assert stats.unassigned_stops == 2
    assert stats.driving_sec_per_rep == []
    assert stats.reps_used_per_day == [0]


def test_service_time_is_capped(simulator):
    scenario = Scenario(
        agents=[Agent()],
        accounts=[Account(estimated_service_minutes=500, schedule=WEEKLY_MON)],
    )
    assert simulator.simulate(scenario, 0).total_service_sec == pytest.approx(200 * 60)


def test_optimizer_input_layout(simulator, scenario):
    problem = simulator.build_optimizer_input(scenario, 0).to_dict()
    assert problem["vehicles"] == [
        {"id": 1, "start": [-0.10, 51.60], "end": [-0.10, 51.60]},
        {"id": 2, "start": [-0.10, 51.40], "end": [-0.10, 51.40]},
    ]
    assert problem["jobs"][0] == {
        "id": 1,
        "service": 1800,
        "location": [-0.10, 51.59],
        "time_windows": [[28800, 43200]],
    }
    # zero-length window is omitted
    assert "time_windows" not in problem["jobs"][1]
    assert len(problem["jobs"]) == 2


def test_reps_used_reports_fleet_size(simulator):
    scenario = Scenario(
        agents=[Agent(lat=0.0, lng=0.0), Agent(lat=5.0, lng=5.0), Agent(lat=-5.0, lng=-5.0)],
        accounts=[Account(lat=0.1, lng=0.1, schedule=WEEKLY_MON)],
    )
    assert simulator.simulate(scenario, 0).reps_used_per_day == [3]
    # no active stops on Tuesday, the fleet is still reported
    assert simulator.simulate(scenario, 1).reps_used_per_day == [3]
