"""Pytest configuration and shared fixtures for habitledger tests.

Every test gets its own SQLite file under ``tmp_path`` and a fixed clock so
that "today" and "now" are deterministic.
"""

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from habitledger.config import BaseConfig
from habitledger.context import EngineContext, build_context
from habitledger.infra.database import create_db_engine, create_session_factory, init_database
from habitledger.models import Habit, RecurrencePattern, format_weekdays
from helpers import MONDAY, FakeClock

_ENV_VARS = (
    "HABITLEDGER_DATABASE_URL",
    "HABITLEDGER_DEV_MODE",
    "HABITLEDGER_GRACE_PERIOD_HOURS",
    "HABITLEDGER_STREAK_LOOKBACK_DAYS",
    "HABITLEDGER_RETENTION_DAYS",
    "HABITLEDGER_MAINTENANCE_HOUR",
)


# =============================================================================
# Configuration & Database Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path, monkeypatch) -> BaseConfig:
    """Config rooted in a temporary data directory with default policy."""

    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HABITLEDGER_DATA_DIR", str(tmp_path / "data"))
    return BaseConfig()


@pytest.fixture
def db_engine(config):
    """Create an isolated SQLite database file for each test."""

    engine = create_db_engine(config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Committing session factory, as used in production wiring."""

    return create_session_factory(db_engine)


@pytest.fixture
def clock() -> FakeClock:
    """Wednesday 2024-01-10 at noon."""

    return FakeClock(datetime(2024, 1, 10, 12, 0))


@pytest.fixture
def ctx(config, session_factory, clock, db_engine) -> EngineContext:
    """Fully wired engine context sharing the fake clock."""

    return build_context(config, session_factory, clock=clock, engine=db_engine)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(ctx):
    """Factory for creating and persisting habits.

    Returns:
        Callable: Function that creates Habit rows with sensible defaults
    """

    def _create_habit(
        name: str = "Test Habit",
        pattern: RecurrencePattern = RecurrencePattern.EVERYDAY,
        start_date: date = MONDAY,
        end_date: date | None = None,
        custom_days: tuple[int, ...] = (),
        scheduled_time: time = time(8, 0),
        is_active: bool = True,
    ) -> Habit:
        habit = Habit(
            name=name,
            recurrence_pattern=pattern,
            custom_days=format_weekdays(custom_days),
            start_date=start_date,
            end_date=end_date,
            scheduled_time=scheduled_time,
            is_active=is_active,
        )
        return ctx.habit_repo.create(habit)

    return _create_habit
