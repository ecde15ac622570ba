"""Tests for the maintenance scheduler."""

from __future__ import annotations

import pytest
from apscheduler.triggers.cron import CronTrigger

from habitledger.scheduler import MAINTENANCE_JOB_ID, create_scheduler
from helpers import day


@pytest.fixture
def scheduler(ctx):
    sched = create_scheduler(ctx)
    yield sched
    sched.stop()


def test_nightly_job_is_registered(scheduler, ctx):
    assert not scheduler.running
    assert [job.id for job in scheduler.scheduler.get_jobs()] == [MAINTENANCE_JOB_ID]

    job = scheduler.scheduler.get_job(MAINTENANCE_JOB_ID)
    assert isinstance(job.trigger, CronTrigger)
    assert str(job.trigger.fields[5]) == str(ctx.config.MAINTENANCE_HOUR)


def test_run_maintenance(scheduler, ctx, habit_factory):
    habit = habit_factory()
    for n in range(1, 6):
        ctx.ledger.mark_completed(habit.id, day(n))
    ctx.config.RETENTION_DAYS = 7

    assert scheduler.run_maintenance() == {"deleted": 2, "recalculated": 3}


def test_run_maintenance_failure_is_logged(scheduler, ctx, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise RuntimeError("database locked")

    monkeypatch.setattr(ctx, "run_maintenance", broken)
    with caplog.at_level("ERROR", logger="habitledger.scheduler"):
        assert scheduler.run_maintenance() is None
    assert "database locked" in caplog.text


def test_start_and_stop(ctx):
    sched = create_scheduler(ctx, auto_start=True)
    try:
        assert sched.running
        sched.start()  # second start is a no-op
        assert sched.running
    finally:
        sched.stop()
    assert not sched.running
