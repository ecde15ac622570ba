"""Command line entry points for habitledger."""

from __future__ import annotations

import json
from datetime import date, datetime

import click

from .config import BaseConfig
from .context import EngineContext, create_engine_context
from .errors import HabitNotFoundError
from .logging_config import setup_logging


def _echo_json(payload: object) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def _as_date(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Habit completion ledger and streak engine."""

    if ctx.obj is None:
        config = BaseConfig()
        setup_logging(config)
        ctx.obj = create_engine_context(config)


@cli.command("init-db")
@click.pass_obj
def init_db(engine_ctx: EngineContext) -> None:
    """Create the database schema if it does not exist."""

    click.echo(f"Database ready: {engine_ctx.config.DATABASE_URL}")


@cli.command("streak")
@click.argument("habit_id", type=int)
@click.option("--as-of", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.pass_obj
def streak(engine_ctx: EngineContext, habit_id: int, as_of: datetime | None) -> None:
    """Print the current and longest streak of a habit."""

    try:
        current = engine_ctx.streaks.current_streak(habit_id, _as_date(as_of))
    except HabitNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    longest = engine_ctx.streaks.longest_streak(habit_id)
    _echo_json({"habit_id": habit_id, "current_streak": current, "longest_streak": longest})


@cli.command("stats")
@click.argument("habit_id", type=int, required=False)
@click.pass_obj
def stats(engine_ctx: EngineContext, habit_id: int | None) -> None:
    """Print completion statistics for one habit, or ledger-wide totals."""

    if habit_id is None:
        _echo_json(engine_ctx.stats.overall_stats().as_dict())
        return
    try:
        report = engine_ctx.stats.completion_stats(habit_id)
    except HabitNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(report.as_dict())


@cli.command("recalculate-streaks")
@click.pass_obj
def recalculate_streaks(engine_ctx: EngineContext) -> None:
    """Rewrite every stored streak snapshot from the ledger."""

    changed = engine_ctx.recalculate_all_streaks()
    click.echo(f"Recalculated streak snapshots: {changed} updated")


@cli.command("cleanup")
@click.option("--days", type=click.IntRange(min=0), default=None, help="Days of history to keep")
@click.pass_obj
def cleanup(engine_ctx: EngineContext, days: int | None) -> None:
    """Delete ledger rows older than the retention window."""

    keep = engine_ctx.config.RETENTION_DAYS if days is None else days
    removed = engine_ctx.ledger.cleanup_old_data(keep)
    click.echo(f"Removed {removed} completion(s) older than {keep} days")


@cli.command("export")
@click.argument("habit_id", type=int)
@click.pass_obj
def export(engine_ctx: EngineContext, habit_id: int) -> None:
    """Dump a habit and its completions as JSON."""

    try:
        payload = engine_ctx.stats.export_habit_data(habit_id)
    except HabitNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(payload)


def main() -> None:  # pragma: no cover - console script
    cli()
