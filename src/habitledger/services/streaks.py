"""Streak calculations over the completion ledger.

Two different measures live here:

* the *current* streak walks backward from a reference day and only looks at
  days the habit is due, tolerating today's still-open grace window;
* the *longest* streak (and the bulk snapshot replay) scan the raw ledger
  rows in date order without consulting the recurrence rule.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, Mapping, Optional

from ..domain.repositories import CompletionRepository, HabitRepository
from ..errors import HabitNotFoundError
from ..logging_config import get_logger
from ..models.completion import HabitCompletion
from ..models.enums import CompletionStatus
from ..models.habit import Habit
from .schedule import Schedulable, is_due, to_day

logger = get_logger("services.streaks")

DEFAULT_GRACE_PERIOD = timedelta(hours=24)
MAX_LOOKBACK_DAYS = 365

Clock = Callable[[], datetime]


def _grace_expired(habit: Schedulable, day: date, now: datetime, grace_period: timedelta) -> bool:
    scheduled_time = getattr(habit, "scheduled_time", None) or time.min
    scheduled = datetime.combine(day, scheduled_time)
    if now.tzinfo is not None and scheduled.tzinfo is None:
        scheduled = scheduled.replace(tzinfo=now.tzinfo)
    return now >= scheduled + grace_period


def walk_current_streak(
    habit: Schedulable,
    statuses: Mapping[date, CompletionStatus],
    as_of: date | datetime,
    *,
    today: date,
    now: datetime,
    grace_period: timedelta = DEFAULT_GRACE_PERIOD,
    max_days: int = MAX_LOOKBACK_DAYS,
) -> int:
    """Count consecutive completed due days ending at ``as_of``.

    ``statuses`` maps calendar days to the recorded outcome. A due day with no
    record breaks the streak unless it is today and ``now`` is still inside
    the grace period that follows the habit's scheduled time.
    """

    as_of = to_day(as_of)
    start = to_day(habit.start_date)
    streak = 0
    check = as_of

    for _ in range(max_days):
        if check < start:
            break

        if is_due(habit, check):
            status = statuses.get(check)
            if status is CompletionStatus.COMPLETED:
                streak += 1
            elif status is CompletionStatus.MISSED:
                break
            elif status is None:
                if check > as_of or check > today:
                    pass  # not yet happened
                elif check == today:
                    if _grace_expired(habit, check, now, grace_period):
                        break
                else:
                    break
            # skipped days neither count nor break

        check -= timedelta(days=1)

    return streak


def running_streaks(statuses: Iterable[CompletionStatus]) -> list[int]:
    """Running streak value after each status, in the order given.

    Completed increments, missed resets to zero, skipped carries the value.
    """

    values: list[int] = []
    run = 0
    for status in statuses:
        if status is CompletionStatus.COMPLETED:
            run += 1
        elif status is CompletionStatus.MISSED:
            run = 0
        values.append(run)
    return values


def longest_run(statuses: Iterable[CompletionStatus]) -> int:
    """Longest run of completions, with misses resetting and skips ignored."""

    return max(running_streaks(statuses), default=0)


def statuses_by_day(records: Iterable[HabitCompletion]) -> dict[date, CompletionStatus]:
    """Index ledger rows by calendar day."""

    return {to_day(r.completion_date): CompletionStatus.parse(r.status) for r in records}


class StreakCalculator:
    """Computes streaks for stored habits using the ledger repository."""

    def __init__(
        self,
        habits: HabitRepository,
        completions: CompletionRepository,
        *,
        clock: Clock = datetime.now,
        grace_period: timedelta = DEFAULT_GRACE_PERIOD,
        max_lookback_days: int = MAX_LOOKBACK_DAYS,
    ):
        self.habits = habits
        self.completions = completions
        self.clock = clock
        self.grace_period = grace_period
        self.max_lookback_days = max_lookback_days

    def require_habit(self, habit_id: int) -> Habit:
        habit = self.habits.get_by_id(habit_id)
        if habit is None:
            logger.warning("Habit lookup failed", extra={"habit_id": habit_id})
            raise HabitNotFoundError(habit_id)
        return habit

    def current_streak(self, habit_id: int, as_of: date | datetime | None = None) -> int:
        """Current streak of ``habit_id`` as of ``as_of`` (default: today)."""

        habit = self.require_habit(habit_id)
        return self.streak_for(habit, as_of)

    def streak_for(
        self,
        habit: Habit,
        as_of: date | datetime | None = None,
        *,
        store: Optional[CompletionRepository] = None,
        overrides: Optional[Mapping[date, CompletionStatus]] = None,
    ) -> int:
        """Walk the ledger for an already-loaded habit.

        ``store`` lets callers read through a transaction-bound repository;
        ``overrides`` layers hypothetical outcomes on top of stored rows.
        """

        now = self.clock()
        today = now.date()
        as_of_day = to_day(as_of) if as_of is not None else today
        if self.max_lookback_days <= 0:
            return 0

        window_start = as_of_day - timedelta(days=self.max_lookback_days - 1)
        records = (store or self.completions).get_range(habit.id, window_start, as_of_day)
        statuses = statuses_by_day(records)
        if overrides:
            statuses.update(overrides)

        streak = walk_current_streak(
            habit,
            statuses,
            as_of_day,
            today=today,
            now=now,
            grace_period=self.grace_period,
            max_days=self.max_lookback_days,
        )
        logger.debug(
            "Current streak computed",
            extra={"habit_id": habit.id, "as_of": as_of_day.isoformat(), "streak": streak},
        )
        return streak

    def longest_streak(self, habit_id: int) -> int:
        """Longest completed run over every stored row of the habit."""

        self.require_habit(habit_id)
        records = self.completions.list_for_habit(habit_id)
        return longest_run(CompletionStatus.parse(r.status) for r in records)


__all__ = [
    "DEFAULT_GRACE_PERIOD",
    "MAX_LOOKBACK_DAYS",
    "StreakCalculator",
    "longest_run",
    "running_streaks",
    "statuses_by_day",
    "walk_current_streak",
]
