"""Recurrence predicate: is a habit due on a given calendar day?"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Iterator, Protocol

from ..models.enums import RecurrencePattern
from ..models.habit import parse_weekdays

WEEKDAYS = frozenset({1, 2, 3, 4, 5})
WEEKEND = frozenset({6, 7})


class Schedulable(Protocol):
    """The habit fields the predicate reads."""

    recurrence_pattern: Any
    start_date: date
    end_date: date | None


def to_day(value: date | datetime) -> date:
    """Strip any time-of-day component, keeping the calendar day."""

    if isinstance(value, datetime):
        return value.date()
    return value


def _custom_weekdays(habit: Schedulable) -> frozenset[int]:
    days = getattr(habit, "custom_weekdays", None)
    if days is None:
        days = parse_weekdays(getattr(habit, "custom_days", ""))
    return frozenset(days)


def is_due(habit: Schedulable, day: date | datetime) -> bool:
    """Return True when ``habit`` should be performed on ``day``.

    Only calendar days are compared. Unknown recurrence patterns are never
    due, which keeps streak walks total instead of raising mid-scan.
    """

    target = to_day(day)
    if target < to_day(habit.start_date):
        return False
    if habit.end_date is not None and target > to_day(habit.end_date):
        return False

    pattern = RecurrencePattern.parse(habit.recurrence_pattern)
    if pattern is None:
        return False

    weekday = target.isoweekday()
    if pattern is RecurrencePattern.EVERYDAY:
        return True
    if pattern is RecurrencePattern.WEEKDAYS:
        return weekday in WEEKDAYS
    if pattern is RecurrencePattern.WEEKENDS:
        return weekday in WEEKEND
    if pattern is RecurrencePattern.CUSTOM:
        return weekday in _custom_weekdays(habit)
    return pattern.weekday == weekday


def iter_due_days(habit: Schedulable, start: date | datetime, end: date | datetime) -> Iterator[date]:
    """Yield every due day between ``start`` and ``end`` inclusive."""

    cursor = to_day(start)
    last = to_day(end)
    while cursor <= last:
        if is_due(habit, cursor):
            yield cursor
        cursor += timedelta(days=1)


__all__ = ["Schedulable", "is_due", "iter_due_days", "to_day"]
