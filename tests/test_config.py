"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from habitledger.config import BaseConfig


def test_defaults(config, tmp_path):
    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.exists()
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'habitledger.db'}"
    assert config.GRACE_PERIOD_HOURS == 24
    assert config.STREAK_LOOKBACK_DAYS == 365
    assert config.RETENTION_DAYS == 365
    assert config.MAINTENANCE_HOUR == 3
    assert config.is_sqlite
    assert config.sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}


def test_policy_overrides(config, monkeypatch):
    monkeypatch.setenv("HABITLEDGER_GRACE_PERIOD_HOURS", "6")
    monkeypatch.setenv("HABITLEDGER_STREAK_LOOKBACK_DAYS", "90")
    monkeypatch.setenv("HABITLEDGER_RETENTION_DAYS", "30")
    monkeypatch.setenv("HABITLEDGER_MAINTENANCE_HOUR", "0")
    monkeypatch.setenv("HABITLEDGER_DEV_MODE", "false")

    cfg = BaseConfig()
    assert cfg.GRACE_PERIOD_HOURS == 6
    assert cfg.STREAK_LOOKBACK_DAYS == 90
    assert cfg.RETENTION_DAYS == 30
    assert cfg.MAINTENANCE_HOUR == 0
    assert cfg.DEV_MODE is False


def test_database_url_override(config, monkeypatch):
    monkeypatch.setenv("HABITLEDGER_DATABASE_URL", "postgresql://localhost/habits")

    cfg = BaseConfig()
    assert cfg.DATABASE_URL == "postgresql://localhost/habits"
    assert not cfg.is_sqlite
    assert cfg.sqlalchemy_engine_options() == {}


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("HABITLEDGER_GRACE_PERIOD_HOURS", "soon"),
        ("HABITLEDGER_RETENTION_DAYS", "-1"),
        ("HABITLEDGER_MAINTENANCE_HOUR", "24"),
    ],
)
def test_invalid_values_fail_fast(config, monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        BaseConfig()


def test_blank_value_uses_default(config, monkeypatch):
    monkeypatch.setenv("HABITLEDGER_STREAK_LOOKBACK_DAYS", "  ")
    assert BaseConfig().STREAK_LOOKBACK_DAYS == 365


def test_context_uses_policy(config, monkeypatch, tmp_path):
    from habitledger.context import create_engine_context

    monkeypatch.setenv("HABITLEDGER_GRACE_PERIOD_HOURS", "2")
    monkeypatch.setenv("HABITLEDGER_STREAK_LOOKBACK_DAYS", "30")

    ctx = create_engine_context(BaseConfig())
    try:
        assert ctx.streaks.grace_period.total_seconds() == 2 * 3600
        assert ctx.streaks.max_lookback_days == 30
    finally:
        ctx.engine.dispose()
