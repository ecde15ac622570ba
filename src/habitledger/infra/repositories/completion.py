"""SQLModel implementation of the completion ledger store."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, Optional

from sqlalchemy import func
from sqlmodel import select

from ...errors import CompletionNotFoundError
from ...models.completion import HabitCompletion
from ...models.enums import CompletionStatus
from ..database import SessionFactory, bound_session_factory


class SQLModelCompletionRepository:
    """SQLModel-based completion repository.

    Writes flush instead of committing; the session factory commits when its
    scope closes, so calls made through :meth:`transaction` land together.
    """

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @contextmanager
    def transaction(self) -> Iterator["SQLModelCompletionRepository"]:
        """Run several calls inside one session; commit once or roll back."""
        with self.session_factory() as session:
            yield SQLModelCompletionRepository(bound_session_factory(session))

    def get_by_id(self, completion_id: int) -> Optional[HabitCompletion]:
        """Retrieve a record by ID."""
        with self.session_factory() as session:
            obj = session.get(HabitCompletion, completion_id)
            if obj:
                session.expunge(obj)
            return obj

    def get_by_habit_and_date(
        self, habit_id: int, completion_date: date
    ) -> Optional[HabitCompletion]:
        """Retrieve the record for one habit on one day."""
        with self.session_factory() as session:
            obj = session.exec(
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completion_date == completion_date)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def get_range(self, habit_id: int, start_date: date, end_date: date) -> list[HabitCompletion]:
        """Get records for a habit within a date range, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completion_date >= start_date)
                .where(HabitCompletion.completion_date <= end_date)
                .order_by(HabitCompletion.completion_date)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            for row in rows:
                session.expunge(row)
            return rows

    def list_for_habit(self, habit_id: int) -> list[HabitCompletion]:
        """All records for a habit, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .order_by(HabitCompletion.completion_date)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            for row in rows:
                session.expunge(row)
            return rows

    def list_for_date(
        self, completion_date: date, status: Optional[CompletionStatus] = None
    ) -> list[HabitCompletion]:
        """Records across habits on one day, optionally filtered by status."""
        with self.session_factory() as session:
            statement = select(HabitCompletion).where(
                HabitCompletion.completion_date == completion_date
            )
            if status is not None:
                statement = statement.where(HabitCompletion.status == status)
            statement = statement.order_by(HabitCompletion.habit_id)  # type: ignore
            rows = list(session.exec(statement).all())
            for row in rows:
                session.expunge(row)
            return rows

    def insert(self, completion: HabitCompletion) -> HabitCompletion:
        """Insert a new record; the unique key rejects a second row for the same day."""
        with self.session_factory() as session:
            session.add(completion)
            session.flush()
            session.refresh(completion)
            session.expunge(completion)
            return completion

    def update(self, completion: HabitCompletion) -> HabitCompletion:
        """Persist changes to an existing record."""
        if completion.id is None:
            raise ValueError("Completion ID cannot be None for update")
        with self.session_factory() as session:
            if session.get(HabitCompletion, completion.id) is None:
                raise CompletionNotFoundError(completion.id)
            completion.updated_at = datetime.now()
            merged = session.merge(completion)
            session.flush()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, completion_id: int) -> bool:
        """Delete a record by ID."""
        with self.session_factory() as session:
            obj = session.get(HabitCompletion, completion_id)
            if obj is None:
                return False
            session.delete(obj)
            session.flush()
            return True

    def delete_by_habit(self, habit_id: int) -> int:
        """Delete every record of a habit."""
        with self.session_factory() as session:
            rows = session.exec(
                select(HabitCompletion).where(HabitCompletion.habit_id == habit_id)
            ).all()
            for row in rows:
                session.delete(row)
            session.flush()
            return len(rows)

    def delete_older_than(self, cutoff: date) -> int:
        """Delete records dated strictly before ``cutoff``."""
        with self.session_factory() as session:
            rows = session.exec(
                select(HabitCompletion).where(HabitCompletion.completion_date < cutoff)
            ).all()
            for row in rows:
                session.delete(row)
            session.flush()
            return len(rows)

    def distinct_habit_ids(self) -> list[int]:
        """Habit ids referenced by at least one record."""
        with self.session_factory() as session:
            statement = (
                select(HabitCompletion.habit_id)
                .distinct()
                .order_by(HabitCompletion.habit_id)  # type: ignore
            )
            return list(session.exec(statement).all())

    def count_by_status(self, habit_id: Optional[int] = None) -> dict[CompletionStatus, int]:
        """Row counts per status for one habit or the whole ledger."""
        with self.session_factory() as session:
            statement = select(HabitCompletion.status, func.count(HabitCompletion.id))
            if habit_id is not None:
                statement = statement.where(HabitCompletion.habit_id == habit_id)
            statement = statement.group_by(HabitCompletion.status)
            counts = {status: 0 for status in CompletionStatus}
            for status, count in session.exec(statement).all():
                counts[CompletionStatus.parse(status)] = int(count)
            return counts
