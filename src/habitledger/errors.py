"""Exceptions raised by the completion and streak engine."""

from __future__ import annotations


class HabitLedgerError(Exception):
    """Base class for engine errors."""


class HabitNotFoundError(HabitLedgerError, LookupError):
    """Raised when an operation references a habit id that does not exist."""

    def __init__(self, habit_id: int):
        super().__init__(f"Habit {habit_id} not found")
        self.habit_id = habit_id


class CompletionNotFoundError(HabitLedgerError, LookupError):
    """Raised when a completion record id does not exist."""

    def __init__(self, completion_id: int):
        super().__init__(f"Completion {completion_id} not found")
        self.completion_id = completion_id


__all__ = ["CompletionNotFoundError", "HabitLedgerError", "HabitNotFoundError"]
