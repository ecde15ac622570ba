"""Completion ledger: per-day outcomes with upsert-by-day semantics."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ..domain.repositories import CompletionRepository, HabitRepository
from ..errors import CompletionNotFoundError
from ..logging_config import get_logger
from ..models.completion import HabitCompletion
from ..models.enums import CompletionStatus
from .schedule import is_due, to_day
from .streaks import StreakCalculator

logger = get_logger("services.ledger")


class CompletionLedger:
    """Marks habits completed, missed or skipped, one record per habit per day.

    Read-modify-write operations run inside a single repository transaction so
    a failure leaves neither a half-written snapshot nor a duplicate row.
    """

    def __init__(
        self,
        habits: HabitRepository,
        completions: CompletionRepository,
        streaks: StreakCalculator,
    ):
        self.habits = habits
        self.completions = completions
        self.streaks = streaks

    @property
    def clock(self):
        return self.streaks.clock

    # Marking
    def mark_completed(
        self, habit_id: int, day: date | datetime, notes: Optional[str] = None
    ) -> HabitCompletion:
        """Record ``day`` as completed and snapshot the streak it achieves."""

        habit = self.streaks.require_habit(habit_id)
        day = to_day(day)
        if not is_due(habit, day):
            logger.info(
                "Marking a day the habit is not due",
                extra={"habit_id": habit_id, "day": day.isoformat()},
            )

        now = self.clock()
        with self.completions.transaction() as store:
            streak = self.streaks.streak_for(
                habit, day, store=store, overrides={day: CompletionStatus.COMPLETED}
            )
            existing = store.get_by_habit_and_date(habit_id, day)
            if existing is not None:
                existing.status = CompletionStatus.COMPLETED
                existing.completed_at = now
                existing.streak_count = streak
                existing.notes = notes
                record = store.update(existing)
            else:
                record = store.insert(
                    HabitCompletion(
                        habit_id=habit_id,
                        completion_date=day,
                        completed_at=now,
                        status=CompletionStatus.COMPLETED,
                        streak_count=streak,
                        notes=notes,
                        created_at=now,
                        updated_at=now,
                    )
                )

        logger.info(
            "Habit marked completed",
            extra={"habit_id": habit_id, "day": day.isoformat(), "streak": streak},
        )
        return record

    def mark_missed(
        self, habit_id: int, day: date | datetime, notes: Optional[str] = None
    ) -> HabitCompletion:
        """Record ``day`` as missed; the snapshot is always zero."""

        record = self._upsert_inert(habit_id, to_day(day), CompletionStatus.MISSED, notes)
        logger.info(
            "Habit marked missed",
            extra={"habit_id": habit_id, "day": record.completion_date.isoformat()},
        )
        return record

    def mark_skipped(
        self, habit_id: int, day: date | datetime, notes: Optional[str] = None
    ) -> HabitCompletion:
        """Record ``day`` as skipped; the snapshot carries the previous streak."""

        record = self._upsert_inert(habit_id, to_day(day), CompletionStatus.SKIPPED, notes)
        logger.info(
            "Habit marked skipped",
            extra={"habit_id": habit_id, "day": record.completion_date.isoformat()},
        )
        return record

    def _upsert_inert(
        self, habit_id: int, day: date, status: CompletionStatus, notes: Optional[str]
    ) -> HabitCompletion:
        habit = self.streaks.require_habit(habit_id)
        now = self.clock()
        with self.completions.transaction() as store:
            if status is CompletionStatus.SKIPPED:
                snapshot = self.streaks.streak_for(
                    habit, day, store=store, overrides={day: CompletionStatus.SKIPPED}
                )
            else:
                snapshot = 0

            existing = store.get_by_habit_and_date(habit_id, day)
            if existing is not None:
                existing.status = status
                existing.completed_at = None
                existing.streak_count = snapshot
                existing.notes = notes
                return store.update(existing)
            return store.insert(
                HabitCompletion(
                    habit_id=habit_id,
                    completion_date=day,
                    completed_at=None,
                    status=status,
                    streak_count=snapshot,
                    notes=notes,
                    created_at=now,
                    updated_at=now,
                )
            )

    # Record edits
    def set_status(self, completion_id: int, status: CompletionStatus | str) -> HabitCompletion:
        """Change the status of an existing record in place."""

        status = CompletionStatus.parse(status)
        with self.completions.transaction() as store:
            record = store.get_by_id(completion_id)
            if record is None:
                raise CompletionNotFoundError(completion_id)
            record.status = status
            if status is CompletionStatus.COMPLETED:
                record.completed_at = self.clock()
            else:
                record.completed_at = None
                record.streak_count = 0
            return store.update(record)

    def update_notes(self, completion_id: int, notes: Optional[str]) -> HabitCompletion:
        """Replace the notes of an existing record."""

        with self.completions.transaction() as store:
            record = store.get_by_id(completion_id)
            if record is None:
                raise CompletionNotFoundError(completion_id)
            record.notes = notes
            return store.update(record)

    def delete_completion(self, completion_id: int) -> None:
        """Delete a record by id."""

        if not self.completions.delete(completion_id):
            raise CompletionNotFoundError(completion_id)
        logger.info("Completion deleted", extra={"completion_id": completion_id})

    def undo(self, habit_id: int, day: date | datetime) -> bool:
        """Remove whatever was recorded for ``day``; return whether a row existed."""

        day = to_day(day)
        with self.completions.transaction() as store:
            record = store.get_by_habit_and_date(habit_id, day)
            if record is None or record.id is None:
                return False
            store.delete(record.id)
        logger.info("Completion undone", extra={"habit_id": habit_id, "day": day.isoformat()})
        return True

    # Reads
    def get_by_id(self, completion_id: int) -> Optional[HabitCompletion]:
        return self.completions.get_by_id(completion_id)

    def get_by_habit_and_date(self, habit_id: int, day: date | datetime) -> Optional[HabitCompletion]:
        return self.completions.get_by_habit_and_date(habit_id, to_day(day))

    def get_range(
        self, habit_id: int, start: date | datetime, end: date | datetime
    ) -> list[HabitCompletion]:
        return self.completions.get_range(habit_id, to_day(start), to_day(end))

    def list_for_habit(self, habit_id: int) -> list[HabitCompletion]:
        return self.completions.list_for_habit(habit_id)

    def completed_on(self, day: date | datetime) -> list[HabitCompletion]:
        return self.completions.list_for_date(to_day(day), CompletionStatus.COMPLETED)

    def missed_on(self, day: date | datetime) -> list[HabitCompletion]:
        return self.completions.list_for_date(to_day(day), CompletionStatus.MISSED)

    def is_completed_on(self, habit_id: int, day: date | datetime) -> bool:
        record = self.get_by_habit_and_date(habit_id, day)
        return record is not None and record.is_completed

    def is_missed_on(self, habit_id: int, day: date | datetime) -> bool:
        record = self.get_by_habit_and_date(habit_id, day)
        return record is not None and record.is_missed

    # Deletes
    def delete_by_habit(self, habit_id: int) -> int:
        removed = self.completions.delete_by_habit(habit_id)
        logger.info("Completions deleted for habit", extra={"habit_id": habit_id, "count": removed})
        return removed

    def delete_older_than(self, day: date | datetime) -> int:
        cutoff = to_day(day)
        removed = self.completions.delete_older_than(cutoff)
        logger.info(
            "Old completions deleted", extra={"cutoff": cutoff.isoformat(), "count": removed}
        )
        return removed

    def cleanup_old_data(self, days_to_keep: int = 365) -> int:
        """Drop records older than ``days_to_keep`` days before today."""

        if days_to_keep < 0:
            raise ValueError("days_to_keep must not be negative")
        cutoff = self.clock().date() - timedelta(days=days_to_keep)
        return self.delete_older_than(cutoff)
