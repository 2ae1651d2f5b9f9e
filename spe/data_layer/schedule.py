"""
Recurrence expansion.
Resolves an account schedule into the set of active day offsets within a planning cycle.

Tag rules (day 0 is a Monday):
- WEEKLY: every anchor weekday
- BIWEEKLY_AC / BIWEEKLY_BD: anchor weekday in weeks 0,2 / 1,3
- MONTHLY_<n>: anchor weekday inside week clamp(n-1, 0, 3)
- raw RRULE: evaluated by dateutil over [cycle_start, cycle_start + cycle_days)
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Iterator, List, Optional, Set

from dateutil.rrule import rrulestr

from config import get_settings
from spe.data_layer.models import Account, Scenario, Schedule
from spe.errors import RecurrenceParseError

logger = logging.getLogger(__name__)

WEEKDAYS = ["MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN"]

_MONTHLY_RE = re.compile(r"^MONTHLY_(-?\d+)")
_INTERVAL_RE = re.compile(r"INTERVAL=([-+]?\d+)", re.IGNORECASE)

# day 0 when no cycle start is configured
CYCLE_EPOCH = date(2024, 1, 1)

BIWEEKLY_WEEKS = {
    "BIWEEKLY_AC": {0, 2},
    "BIWEEKLY_BD": {1, 3},
}


def weekday_index(anchor: Optional[str]) -> int:
    """Map an anchor weekday to 0 (Mon) .. 6 (Sun). Unrecognised anchors map to Mon."""
    key = (anchor or "").strip().upper()[:3]
    if key in WEEKDAYS:
        return WEEKDAYS.index(key)
    return 0


def default_cycle_start(cycle_start: Optional[date] = None) -> datetime:
    """UTC midnight of cycle day 0: the given date, else the configured one, else CYCLE_EPOCH."""
    if cycle_start is None:
        cycle_start = get_settings().embedding.cycle_start or CYCLE_EPOCH
    return datetime.combine(cycle_start, time(0, 0), tzinfo=timezone.utc)


def resolve_cycle_days(scenario: Scenario, default: Optional[int] = None) -> int:
    if scenario.params.cycle_days > 0:
        return scenario.params.cycle_days
    if default is not None and default > 0:
        return default
    return get_settings().embedding.cycle_days


def _looks_like_rule(text: str) -> bool:
    upper = text.upper()
    return upper.startswith("RRULE:") or upper.startswith("DTSTART") or "FREQ=" in upper


def parse_rrule(rule_string: str, dtstart: datetime):
    """Parse an RFC 5545 rule into a dateutil rruleset."""
    for match in _INTERVAL_RE.finditer(rule_string):
        if int(match.group(1)) <= 0:
            raise RecurrenceParseError(f"invalid recurrence rule {rule_string!r}: INTERVAL must be positive")
    try:
        return rrulestr(rule_string, dtstart=dtstart, forceset=True)
    except (ValueError, TypeError) as exc:
        raise RecurrenceParseError(f"invalid recurrence rule {rule_string!r}: {exc}") from exc


def _bounded(rule, start: datetime, end: datetime) -> Iterator[datetime]:
    """Occurrences in [start, end]; stops at the first one that does not advance."""
    previous = None
    for occurrence in rule.xafter(start, inc=True):
        if occurrence > end or (previous is not None and occurrence <= previous):
            break
        previous = occurrence
        yield occurrence


def _occurrences(rule, start: datetime, end: datetime) -> List[datetime]:
    try:
        return list(_bounded(rule, start, end))
    except TypeError:
        # rule carries a naive DTSTART of its own
        return list(_bounded(rule, start.replace(tzinfo=None), end.replace(tzinfo=None)))


def _day_offsets(occurrences: Iterable[datetime], start: datetime, cycle_days: int) -> Set[int]:
    days = set()
    for occurrence in occurrences:
        origin = start if occurrence.tzinfo is not None else start.replace(tzinfo=None)
        offset = int((occurrence - origin).total_seconds() // 86400)
        if 0 <= offset < cycle_days:
            days.add(offset)
    return days


def expand_rrule(
    rule_string: str, cycle_days: int, cycle_start: Optional[datetime] = None
) -> Set[int]:
    """Expand a raw rule over the cycle window. Parse failures degrade to an empty set."""
    start = cycle_start or default_cycle_start()
    end = start + timedelta(days=cycle_days)
    try:
        rule = parse_rrule(rule_string, start)
        occurrences = _occurrences(rule, start, end)
    except RecurrenceParseError as exc:
        logger.warning("RRULE expansion skipped: %s", exc)
        return set()
    return _day_offsets(occurrences, start, cycle_days)


def expand_schedule(
    schedule: Optional[Schedule],
    cycle_days: int,
    cycle_start: Optional[datetime] = None,
) -> Set[int]:
    """
    Resolve a schedule into active day offsets in [0, cycle_days).

    Args:
        schedule: Recurrence definition (None yields no days).
        cycle_days: Planning cycle length.
        cycle_start: Instant of day 0 used for raw rules.

    Returns:
        Unordered set of day offsets; empty for unknown tags.
    """
    if schedule is None or cycle_days <= 0:
        return set()

    tag = schedule.type.strip().upper()
    if not tag:
        rule = schedule.rrule.strip()
        return expand_rrule(rule, cycle_days, cycle_start) if rule else set()
    if _looks_like_rule(tag):
        return expand_rrule(schedule.type.strip(), cycle_days, cycle_start)

    anchor = weekday_index(schedule.anchor)
    if tag == "WEEKLY":
        weeks = None
    elif tag in BIWEEKLY_WEEKS:
        weeks = BIWEEKLY_WEEKS[tag]
    elif tag.startswith("MONTHLY_"):
        match = _MONTHLY_RE.match(tag)
        n = int(match.group(1)) if match else 0
        weeks = {min(max(n - 1, 0), 3)}
    else:
        logger.debug("Unsupported recurrence tag %r", schedule.type)
        return set()

    return {
        day for day in range(cycle_days)
        if day % 7 == anchor and (weeks is None or day // 7 in weeks)
    }


def is_active_on(
    schedule: Optional[Schedule],
    day: int,
    cycle_days: int,
    cycle_start: Optional[datetime] = None,
) -> bool:
    return day in expand_schedule(schedule, cycle_days, cycle_start)


def active_accounts(
    scenario: Scenario,
    day: int,
    cycle_days: int,
    cycle_start: Optional[datetime] = None,
) -> List[Account]:
    """Accounts active on `day`, in input order."""
    return [
        account for account in scenario.accounts
        if is_active_on(account.schedule, day, cycle_days, cycle_start)
    ]
