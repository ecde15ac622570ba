"""Repository protocol definitions for domain layer."""

from .completion import CompletionRepository
from .habit import HabitRepository

__all__ = ["CompletionRepository", "HabitRepository"]
