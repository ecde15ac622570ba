"""Lifetime aggregates, calendars and exports for habits."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable

from ..domain.repositories import CompletionRepository, HabitRepository
from ..logging_config import get_logger
from ..models.completion import HabitCompletion
from ..models.enums import CompletionStatus
from .schedule import Schedulable, is_due, to_day
from .streaks import StreakCalculator, statuses_by_day

logger = get_logger("services.stats")


@dataclass(frozen=True)
class ActualCounts:
    """Due-day tallies from a habit's start through today."""

    completed: int = 0
    missed: int = 0
    scheduled: int = 0
    skipped: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class CompletionStats:
    """Per-habit report combining counts and streaks."""

    habit_id: int
    completed: int
    missed: int
    scheduled: int
    skipped: int
    current_streak: int
    longest_streak: int
    completion_rate: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OverallStats:
    """Ledger-wide totals across every habit."""

    total_entries: int
    completed_count: int
    missed_count: int
    skipped_count: int
    habits_tracked: int
    overall_completion_rate: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def percentage(part: int, whole: int) -> float:
    """Return ``part / whole * 100`` or 0.0 when ``whole`` is zero."""

    if whole <= 0:
        return 0.0
    return part / whole * 100


def count_actual(
    habit: Schedulable, records: Iterable[HabitCompletion], today: date
) -> ActualCounts:
    """Classify every due day from the habit's start to ``today`` inclusive.

    Past due days without a record count as implicit misses; today without a
    record is still open and counts neither way.
    """

    statuses = statuses_by_day(records)
    completed = missed = scheduled = skipped = 0
    cursor = to_day(habit.start_date)
    while cursor <= today:
        if is_due(habit, cursor):
            scheduled += 1
            status = statuses.get(cursor)
            if status is CompletionStatus.COMPLETED:
                completed += 1
            elif status is CompletionStatus.MISSED:
                missed += 1
            elif status is CompletionStatus.SKIPPED:
                skipped += 1
            elif cursor < today:
                missed += 1
        cursor += timedelta(days=1)
    return ActualCounts(completed=completed, missed=missed, scheduled=scheduled, skipped=skipped)


def group_by_period(records: Iterable[HabitCompletion], fmt: str, key: str) -> list[dict[str, Any]]:
    """Bucket rows by ``strftime(fmt)`` of their date, newest bucket first."""

    buckets: dict[str, dict[str, Any]] = OrderedDict()
    for record in sorted(records, key=lambda r: r.completion_date, reverse=True):
        label = record.completion_date.strftime(fmt)
        bucket = buckets.setdefault(label, {key: label, "total_days": 0, "completed_days": 0})
        bucket["total_days"] += 1
        if record.is_completed:
            bucket["completed_days"] += 1
    return list(buckets.values())


class StatisticsEngine:
    """Aggregate statistics built on the ledger and the streak calculator."""

    def __init__(
        self,
        habits: HabitRepository,
        completions: CompletionRepository,
        streaks: StreakCalculator,
    ):
        self.habits = habits
        self.completions = completions
        self.streaks = streaks

    def _today(self) -> date:
        return self.streaks.clock().date()

    def actual_counts(self, habit_id: int) -> ActualCounts:
        """Completed, missed and scheduled due days from start through today."""

        habit = self.streaks.require_habit(habit_id)
        today = self._today()
        start = to_day(habit.start_date)
        if start > today:
            return ActualCounts()
        records = self.completions.get_range(habit_id, start, today)
        return count_actual(habit, records, today)

    def completion_stats(self, habit_id: int) -> CompletionStats:
        """Counts, current and longest streak, and the completion rate."""

        habit = self.streaks.require_habit(habit_id)
        counts = self.actual_counts(habit_id)
        current = self.streaks.streak_for(habit, self._today())
        longest = self.streaks.longest_streak(habit_id)
        return CompletionStats(
            habit_id=habit_id,
            completed=counts.completed,
            missed=counts.missed,
            scheduled=counts.scheduled,
            skipped=counts.skipped,
            current_streak=current,
            longest_streak=longest,
            completion_rate=percentage(counts.completed, counts.scheduled),
        )

    def overall_stats(self) -> OverallStats:
        """Totals over every ledger row regardless of habit or schedule."""

        counts = self.completions.count_by_status()
        total = sum(counts.values())
        completed = counts.get(CompletionStatus.COMPLETED, 0)
        return OverallStats(
            total_entries=total,
            completed_count=completed,
            missed_count=counts.get(CompletionStatus.MISSED, 0),
            skipped_count=counts.get(CompletionStatus.SKIPPED, 0),
            habits_tracked=len(self.completions.distinct_habit_ids()),
            overall_completion_rate=percentage(completed, total),
        )

    def current_streaks_for_all_habits(self) -> dict[int, int]:
        """Current streak for every habit that has ledger rows."""

        today = self._today()
        streaks: dict[int, int] = {}
        for habit_id in self.completions.distinct_habit_ids():
            habit = self.habits.get_by_id(habit_id)
            if habit is None:
                logger.warning("Ledger rows reference a missing habit", extra={"habit_id": habit_id})
                continue
            streaks[habit_id] = self.streaks.streak_for(habit, today)
        return streaks

    def max_current_streak(self) -> int:
        return max(self.current_streaks_for_all_habits().values(), default=0)

    def completion_calendar(
        self, habit_id: int, start: date | datetime, end: date | datetime
    ) -> list[dict[str, Any]]:
        """Rows between ``start`` and ``end`` as plain dicts, oldest first."""

        self.streaks.require_habit(habit_id)
        records = self.completions.get_range(habit_id, to_day(start), to_day(end))
        return [
            {
                "completion_date": r.completion_date,
                "status": CompletionStatus.parse(r.status),
                "streak_count": r.streak_count,
                "notes": r.notes,
            }
            for r in records
        ]

    def weekly_stats(self, habit_id: int, weeks_back: int) -> list[dict[str, Any]]:
        """Per-week totals since ``weeks_back`` weeks ago, newest first.

        Rows dated after today are included.
        """

        self.streaks.require_habit(habit_id)
        start = self._today() - timedelta(days=weeks_back * 7)
        records = self.completions.get_range(habit_id, start, date.max)
        return group_by_period(records, "%Y-%W", "week")

    def monthly_stats(self, habit_id: int, months_back: int) -> list[dict[str, Any]]:
        """Per-month totals since the first day of the month ``months_back`` ago."""

        self.streaks.require_habit(habit_id)
        today = self._today()
        month_index = today.year * 12 + (today.month - 1) - months_back
        start = date(month_index // 12, month_index % 12 + 1, 1)
        records = self.completions.get_range(habit_id, start, date.max)
        return group_by_period(records, "%Y-%m", "month")

    def export_habit_data(self, habit_id: int) -> dict[str, Any]:
        """JSON-ready dump of a habit and all of its ledger rows."""

        habit = self.streaks.require_habit(habit_id)
        return {
            "habit": habit.model_dump(mode="json", exclude={"completions"}),
            "completions": [r.to_dict() for r in self.completions.list_for_habit(habit_id)],
        }


__all__ = [
    "ActualCounts",
    "CompletionStats",
    "OverallStats",
    "StatisticsEngine",
    "count_actual",
    "group_by_period",
    "percentage",
]
