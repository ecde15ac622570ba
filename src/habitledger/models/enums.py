"""Closed enumerations for recurrence rules and completion outcomes."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class RecurrencePattern(str, Enum):
    """How often a habit comes due."""

    EVERYDAY = "everyday"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> Optional["RecurrencePattern"]:
        """Return the matching pattern or ``None`` for anything unrecognized.

        Accepts members, values and names in any case, so legacy spellings such
        as ``"Weekdays"`` resolve too.
        """

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def weekday(self) -> Optional[int]:
        """ISO weekday (1=Monday) for single-day patterns, else ``None``."""

        return _SINGLE_DAY.get(self)


_SINGLE_DAY = {
    RecurrencePattern.MONDAY: 1,
    RecurrencePattern.TUESDAY: 2,
    RecurrencePattern.WEDNESDAY: 3,
    RecurrencePattern.THURSDAY: 4,
    RecurrencePattern.FRIDAY: 5,
    RecurrencePattern.SATURDAY: 6,
    RecurrencePattern.SUNDAY: 7,
}


class CompletionStatus(str, Enum):
    """Outcome recorded for a habit on one calendar day."""

    COMPLETED = "completed"
    MISSED = "missed"
    SKIPPED = "skipped"

    @classmethod
    def parse(cls, value: Any) -> "CompletionStatus":
        """Coerce a member or its value/name; raise ``ValueError`` otherwise."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Invalid completion status: {value!r}")


__all__ = ["CompletionStatus", "RecurrencePattern"]
