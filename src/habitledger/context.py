"""Engine context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelCompletionRepository, SQLModelHabitRepository
from .services.ledger import CompletionLedger
from .services.recompute import recalculate_all_streaks
from .services.stats import StatisticsEngine
from .services.streaks import StreakCalculator


@dataclass
class EngineContext:
    """Wired repositories and services sharing one clock and one database."""

    config: BaseConfig
    session_factory: SessionFactory

    habit_repo: SQLModelHabitRepository
    completion_repo: SQLModelCompletionRepository

    streaks: StreakCalculator
    ledger: CompletionLedger
    stats: StatisticsEngine

    engine: Optional[Engine] = None

    def recalculate_all_streaks(self) -> int:
        return recalculate_all_streaks(self.completion_repo)

    def run_maintenance(self, days_to_keep: Optional[int] = None) -> dict[str, int]:
        """Drop expired rows, then repair snapshots of what remains."""

        keep = self.config.RETENTION_DAYS if days_to_keep is None else days_to_keep
        deleted = self.ledger.cleanup_old_data(keep)
        changed = self.recalculate_all_streaks()
        return {"deleted": deleted, "recalculated": changed}


def build_context(
    config: BaseConfig,
    session_factory: SessionFactory,
    *,
    clock: Callable[[], datetime] = datetime.now,
    engine: Optional[Engine] = None,
) -> EngineContext:
    """Assemble services on top of an existing session factory."""

    habit_repo = SQLModelHabitRepository(session_factory)
    completion_repo = SQLModelCompletionRepository(session_factory)
    streaks = StreakCalculator(
        habit_repo,
        completion_repo,
        clock=clock,
        grace_period=timedelta(hours=config.GRACE_PERIOD_HOURS),
        max_lookback_days=config.STREAK_LOOKBACK_DAYS,
    )
    return EngineContext(
        config=config,
        session_factory=session_factory,
        habit_repo=habit_repo,
        completion_repo=completion_repo,
        streaks=streaks,
        ledger=CompletionLedger(habit_repo, completion_repo, streaks),
        stats=StatisticsEngine(habit_repo, completion_repo, streaks),
        engine=engine,
    )


def create_engine_context(
    config: Optional[BaseConfig] = None,
    *,
    clock: Callable[[], datetime] = datetime.now,
) -> EngineContext:
    """Create the database, ensure the schema and wire every service."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)
    return build_context(config, session_factory, clock=clock, engine=engine)
