"""Per-day completion outcomes recorded against a habit."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .enums import CompletionStatus

if TYPE_CHECKING:  # pragma: no cover
    from .habit import Habit


class HabitCompletion(SQLModel, table=True):
    """One ledger row: the outcome of a habit on a calendar day.

    ``streak_count`` is a snapshot taken when the row was written; it is not
    re-derived on read.
    """

    __tablename__: ClassVar[str] = "habit_completion"
    __table_args__ = (
        UniqueConstraint("habit_id", "completion_date", name="uq_habit_completion_day"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True, ondelete="CASCADE")
    completion_date: date = Field(nullable=False, index=True)
    completed_at: Optional[datetime] = Field(default=None)
    status: CompletionStatus = Field(default=CompletionStatus.COMPLETED, nullable=False, index=True)
    streak_count: int = Field(default=0, nullable=False)
    notes: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=datetime.now, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.now, nullable=False)

    habit: "Habit" = Relationship(
        back_populates="completions",
        sa_relationship=relationship("Habit", back_populates="completions"),
    )

    @property
    def is_completed(self) -> bool:
        return self.status == CompletionStatus.COMPLETED

    @property
    def is_missed(self) -> bool:
        return self.status == CompletionStatus.MISSED

    @property
    def is_skipped(self) -> bool:
        return self.status == CompletionStatus.SKIPPED

    def to_dict(self) -> dict[str, object]:
        """JSON-ready representation; dates become ISO strings here only."""

        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "completion_date": self.completion_date.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "status": self.status.value,
            "streak_count": self.streak_count,
            "notes": self.notes,
        }
