"""Habit definitions read by the completion engine."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import TYPE_CHECKING, ClassVar, Iterable, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .enums import RecurrencePattern

if TYPE_CHECKING:  # pragma: no cover
    from .completion import HabitCompletion


def parse_weekdays(raw: Optional[str]) -> frozenset[int]:
    """Parse the stored ``"1,3,5"`` form, dropping anything that is not 1..7."""

    if not raw:
        return frozenset()
    days: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if not part.isdigit():
            continue
        value = int(part)
        if 1 <= value <= 7:
            days.add(value)
    return frozenset(days)


def format_weekdays(days: Iterable[int]) -> str:
    """Serialize weekday numbers for storage, sorted and de-duplicated."""

    return ",".join(str(d) for d in sorted({int(d) for d in days if 1 <= int(d) <= 7}))


class Habit(SQLModel, table=True):
    """A recurring habit with an active window and a daily scheduled time."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    description: str = Field(default="", max_length=255)
    recurrence_pattern: RecurrencePattern = Field(
        default=RecurrencePattern.EVERYDAY, nullable=False
    )
    custom_days: str = Field(default="", max_length=32)
    start_date: date = Field(nullable=False)
    end_date: Optional[date] = Field(default=None)
    scheduled_time: time = Field(default=time(7, 30), nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=datetime.now, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.now, nullable=False)

    completions: list["HabitCompletion"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitCompletion",
            back_populates="habit",
            cascade="all, delete-orphan",
            passive_deletes=True,
        ),
    )

    @property
    def custom_weekdays(self) -> frozenset[int]:
        """ISO weekday numbers used when the pattern is ``custom``."""
        return parse_weekdays(self.custom_days)
