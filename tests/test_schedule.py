import pytest

from spe.data_layer.models import Account, Scenario, Schedule
from spe.data_layer.schedule import (
    active_accounts,
    default_cycle_start,
    expand_rrule,
    expand_schedule,
    is_active_on,
    weekday_index,
)


def test_weekday_index_defaults_to_monday():
    assert weekday_index("WED") == 2
    assert weekday_index("sunday") == 6
    assert weekday_index("") == 0
    assert weekday_index("XYZ") == 0


def test_weekly_monday_in_four_week_cycle():
    days = expand_schedule(Schedule(type="WEEKLY", anchor="MON"), 28)
    assert days == {0, 7, 14, 21}


def test_weekly_truncates_at_cycle_end():
    days = expand_schedule(Schedule(type="WEEKLY", anchor="FRI"), 10)
    assert days == {4}


def test_biweekly_weeks():
    assert expand_schedule(Schedule(type="BIWEEKLY_AC", anchor="WED"), 28) == {2, 16}
    assert expand_schedule(Schedule(type="BIWEEKLY_BD", anchor="WED"), 28) == {9, 23}


def test_monthly_week_is_clamped():
    assert expand_schedule(Schedule(type="MONTHLY_1", anchor="MON"), 28) == {0}
    assert expand_schedule(Schedule(type="MONTHLY_3", anchor="THU"), 28) == {17}
    assert expand_schedule(Schedule(type="MONTHLY_9", anchor="MON"), 28) == {21}
    assert expand_schedule(Schedule(type="MONTHLY_-1", anchor="MON"), 28) == {0}


def test_tag_is_case_insensitive():
    assert expand_schedule(Schedule(type="weekly", anchor="tue"), 14) == {1, 8}


def test_unknown_tag_yields_nothing():
    assert expand_schedule(Schedule(type="QUARTERLY", anchor="MON"), 28) == set()


def test_missing_schedule_or_empty_cycle():
    assert expand_schedule(None, 28) == set()
    assert expand_schedule(Schedule(type="WEEKLY"), 0) == set()


def test_rrule_field_used_when_tag_blank(cycle_start):
    schedule = Schedule(type="", rrule="FREQ=WEEKLY;BYDAY=MO")
    assert expand_schedule(schedule, 28, cycle_start) == {0, 7, 14, 21}


def test_rrule_in_tag_position(cycle_start):
    schedule = Schedule(type="RRULE:FREQ=WEEKLY;INTERVAL=2;BYDAY=WE")
    assert expand_schedule(schedule, 28, cycle_start) == {2, 16}


def test_rrule_daily_count(cycle_start):
    assert expand_rrule("FREQ=DAILY;COUNT=3", 28, cycle_start) == {0, 1, 2}


def test_invalid_rrule_degrades_to_empty(cycle_start):
    assert expand_rrule("FREQ=SOMETIMES", 28, cycle_start) == set()
    assert expand_schedule(Schedule(rrule="not a rule"), 28, cycle_start) == set()


def test_is_active_on():
    schedule = Schedule(type="WEEKLY", anchor="MON")
    assert is_active_on(schedule, 7, 28)
    assert not is_active_on(schedule, 8, 28)


def test_active_accounts_preserves_input_order():
    scenario = Scenario(
        accounts=[
            Account(id="z", schedule=Schedule(type="WEEKLY", anchor="MON")),
            Account(id="y", schedule=Schedule(type="WEEKLY", anchor="TUE")),
            Account(id="x", schedule=Schedule(type="WEEKLY", anchor="MON")),
        ]
    )
    assert [a.id for a in active_accounts(scenario, 0, 28)] == ["z", "x"]


@pytest.mark.parametrize("rule", ["FREQ=DAILY;INTERVAL=0", "FREQ=WEEKLY;INTERVAL=-2;BYDAY=MO"])
def test_non_positive_interval_degrades_to_empty(rule, cycle_start):
    assert expand_rrule(rule, 28, cycle_start) == set()
    assert expand_schedule(Schedule(type=rule), 28, cycle_start) == set()


def test_rule_without_cycle_start_uses_fixed_epoch(cycle_start):
    assert default_cycle_start() == cycle_start
    assert expand_rrule("FREQ=MONTHLY;BYMONTHDAY=1", 28) == {0}
    assert expand_schedule(Schedule(rrule="FREQ=WEEKLY;BYDAY=WE"), 14) == {2, 9}
