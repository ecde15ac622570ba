"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import select

from ...models.completion import HabitCompletion
from ...models.habit import Habit
from ..database import SessionFactory


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, include_inactive: bool = False) -> list[Habit]:
        """List all habits, optionally including inactive ones."""
        with self.session_factory() as session:
            statement = select(Habit).order_by(Habit.name)  # type: ignore

            if not include_inactive:
                statement = statement.where(Habit.is_active == True)  # noqa: E712

            rows = list(session.exec(statement).all())
            for row in rows:
                session.expunge(row)
            return rows

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            session.add(habit)
            session.flush()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        if habit.id is None:
            raise ValueError("Habit ID cannot be None for update")
        with self.session_factory() as session:
            habit.updated_at = datetime.now()
            merged = session.merge(habit)
            session.flush()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, habit_id: int) -> bool:
        """Delete a habit by ID together with its completion records."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return False
            for entry in session.exec(
                select(HabitCompletion).where(HabitCompletion.habit_id == habit_id)
            ).all():
                session.delete(entry)
            session.delete(habit)
            session.flush()
            return True
