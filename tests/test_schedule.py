"""Tests for the recurrence predicate."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from habitledger.models import RecurrencePattern, format_weekdays, parse_weekdays
from habitledger.services.schedule import is_due, iter_due_days, to_day
from helpers import MONDAY, day


def _habit(pattern, start=MONDAY, end=None, custom=()):
    return SimpleNamespace(
        recurrence_pattern=pattern,
        start_date=start,
        end_date=end,
        custom_weekdays=frozenset(custom),
    )


WEEK = [MONDAY + timedelta(days=i) for i in range(7)]


class TestPatterns:
    """Each recurrence pattern evaluated over one Monday-to-Sunday week."""

    @pytest.mark.parametrize(
        ("pattern", "expected"),
        [
            (RecurrencePattern.EVERYDAY, [True] * 7),
            (RecurrencePattern.WEEKDAYS, [True] * 5 + [False] * 2),
            (RecurrencePattern.WEEKENDS, [False] * 5 + [True] * 2),
            (RecurrencePattern.WEDNESDAY, [False, False, True, False, False, False, False]),
            (RecurrencePattern.SUNDAY, [False] * 6 + [True]),
        ],
    )
    def test_week(self, pattern, expected):
        habit = _habit(pattern)
        assert [is_due(habit, d) for d in WEEK] == expected

    def test_custom_days(self):
        habit = _habit(RecurrencePattern.CUSTOM, custom=(1, 3, 6))
        assert [d.isoweekday() for d in WEEK if is_due(habit, d)] == [1, 3, 6]

    def test_custom_without_days_is_never_due(self):
        habit = _habit(RecurrencePattern.CUSTOM)
        assert not any(is_due(habit, d) for d in WEEK)

    def test_custom_days_read_from_storage_form(self):
        habit = SimpleNamespace(
            recurrence_pattern="custom", start_date=MONDAY, end_date=None, custom_days="2,4"
        )
        assert [d.isoweekday() for d in WEEK if is_due(habit, d)] == [2, 4]

    def test_legacy_spelling_is_recognized(self):
        assert is_due(_habit("Weekdays"), day(2))
        assert not is_due(_habit("Weekdays"), day(6))

    @pytest.mark.parametrize("pattern", ["fortnightly", "", None, 42])
    def test_unknown_pattern_fails_closed(self, pattern):
        habit = _habit(pattern)
        assert not any(is_due(habit, d) for d in WEEK)


class TestWindow:
    """Start and end dates bound the due days."""

    def test_day_before_start_is_not_due(self):
        habit = _habit(RecurrencePattern.EVERYDAY, start=day(3))
        assert not is_due(habit, day(3) - timedelta(days=1))
        assert is_due(habit, day(3))

    def test_day_after_end_is_not_due(self):
        habit = _habit(RecurrencePattern.EVERYDAY, end=day(5))
        assert is_due(habit, day(5))
        assert not is_due(habit, day(5) + timedelta(days=1))

    def test_time_of_day_is_ignored(self):
        habit = _habit(RecurrencePattern.EVERYDAY, start=datetime(2024, 1, 3, 18, 30))
        assert is_due(habit, datetime(2024, 1, 3, 0, 1))
        assert is_due(habit, day(3))
        assert not is_due(habit, datetime(2024, 1, 2, 23, 59))

    def test_end_date_with_time_compares_by_day(self):
        habit = _habit(RecurrencePattern.EVERYDAY, end=datetime(2024, 1, 5, 0, 0))
        assert is_due(habit, datetime(2024, 1, 5, 23, 0))


def test_predicate_is_deterministic():
    habit = _habit(RecurrencePattern.WEEKENDS)
    for d in WEEK:
        assert is_due(habit, d) == is_due(habit, d)


def test_iter_due_days_over_two_weeks():
    habit = _habit(RecurrencePattern.WEEKDAYS)
    days = list(iter_due_days(habit, day(1), day(14)))
    assert len(days) == 10
    assert days[0] == day(1)
    assert days[-1] == day(12)


def test_to_day_strips_time():
    assert to_day(datetime(2024, 1, 2, 15, 45)) == date(2024, 1, 2)
    assert to_day(date(2024, 1, 2)) == date(2024, 1, 2)


def test_weekday_storage_helpers():
    assert parse_weekdays("1, 3,x,9,3") == frozenset({1, 3})
    assert parse_weekdays(None) == frozenset()
    assert format_weekdays([3, 1, 3, 8]) == "1,3"


def test_recurrence_pattern_parse():
    assert RecurrencePattern.parse("Weekdays") is RecurrencePattern.WEEKDAYS
    assert RecurrencePattern.parse(RecurrencePattern.MONDAY) is RecurrencePattern.MONDAY
    assert RecurrencePattern.parse("fortnightly") is None
    assert RecurrencePattern.parse(None) is None
    assert RecurrencePattern.FRIDAY.weekday == 5
    assert RecurrencePattern.WEEKDAYS.weekday is None
