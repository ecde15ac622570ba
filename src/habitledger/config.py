"""Engine configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read a non-negative integer setting, rejecting garbage early."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < 0:
        raise ValueError(f"{name} must not be negative, got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitLedger"
    DB_FILENAME = "habitledger.db"
    ENV_PREFIX = "HABITLEDGER_"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self) -> None:
        self.DEV_MODE = _env_bool(self._env("DEV_MODE"), default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.DATABASE_URL = os.getenv(self._env("DATABASE_URL"), self._build_sqlite_url())

        # Streak engine policy
        self.GRACE_PERIOD_HOURS = _env_int(self._env("GRACE_PERIOD_HOURS"), 24)
        self.STREAK_LOOKBACK_DAYS = _env_int(self._env("STREAK_LOOKBACK_DAYS"), 365)
        self.RETENTION_DAYS = _env_int(self._env("RETENTION_DAYS"), 365)
        self.MAINTENANCE_HOUR = _env_int(self._env("MAINTENANCE_HOUR"), 3)
        if self.MAINTENANCE_HOUR > 23:
            raise ValueError("HABITLEDGER_MAINTENANCE_HOUR must be between 0 and 23.")

    def _env(self, name: str) -> str:
        return f"{self.ENV_PREFIX}{name}"

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv(self._env("DATA_DIR"), "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {}
        if self.is_sqlite:
            engine_options["connect_args"] = {"check_same_thread": False}
        return engine_options
