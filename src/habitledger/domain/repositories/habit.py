"""Habit repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.habit import Habit


class HabitRepository(Protocol):
    """Read access to habits plus the CRUD the engine's callers need."""

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_all(self, include_inactive: bool = False) -> list[Habit]:
        """List all habits, optionally including inactive ones."""
        ...

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        ...

    def delete(self, habit_id: int) -> bool:
        """Delete a habit and its completions; return whether it existed."""
        ...
