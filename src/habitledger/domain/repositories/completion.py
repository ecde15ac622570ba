"""Completion ledger storage protocol."""

from __future__ import annotations

from datetime import date
from typing import ContextManager, Optional, Protocol

from ...models.completion import HabitCompletion
from ...models.enums import CompletionStatus


class CompletionRepository(Protocol):
    """Keyed store of completion records, unique per (habit_id, completion_date)."""

    def transaction(self) -> ContextManager["CompletionRepository"]:
        """Yield a repository whose calls share one all-or-nothing transaction."""
        ...

    def get_by_id(self, completion_id: int) -> Optional[HabitCompletion]:
        """Retrieve a record by ID."""
        ...

    def get_by_habit_and_date(
        self, habit_id: int, completion_date: date
    ) -> Optional[HabitCompletion]:
        """Retrieve the record for one habit on one day."""
        ...

    def get_range(self, habit_id: int, start_date: date, end_date: date) -> list[HabitCompletion]:
        """Records for a habit within inclusive date bounds, oldest first."""
        ...

    def list_for_habit(self, habit_id: int) -> list[HabitCompletion]:
        """All records for a habit, oldest first."""
        ...

    def list_for_date(
        self, completion_date: date, status: Optional[CompletionStatus] = None
    ) -> list[HabitCompletion]:
        """Records across habits on one day, optionally filtered by status."""
        ...

    def insert(self, completion: HabitCompletion) -> HabitCompletion:
        """Insert a new record."""
        ...

    def update(self, completion: HabitCompletion) -> HabitCompletion:
        """Persist changes to an existing record."""
        ...

    def delete(self, completion_id: int) -> bool:
        """Delete a record by ID; return whether it existed."""
        ...

    def delete_by_habit(self, habit_id: int) -> int:
        """Delete every record of a habit; return the number removed."""
        ...

    def delete_older_than(self, cutoff: date) -> int:
        """Delete records dated strictly before ``cutoff``."""
        ...

    def distinct_habit_ids(self) -> list[int]:
        """Habit ids that have at least one record."""
        ...

    def count_by_status(self, habit_id: Optional[int] = None) -> dict[CompletionStatus, int]:
        """Row counts per status, for one habit or the whole ledger."""
        ...
