"""SQLModel table exports."""

from .completion import HabitCompletion
from .enums import CompletionStatus, RecurrencePattern
from .habit import Habit, format_weekdays, parse_weekdays

__all__ = [
    "CompletionStatus",
    "Habit",
    "HabitCompletion",
    "RecurrencePattern",
    "format_weekdays",
    "parse_weekdays",
]
