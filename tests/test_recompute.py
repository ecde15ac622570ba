"""Tests for bulk streak snapshot repair."""

from __future__ import annotations

import pytest

from habitledger.infra.repositories import SQLModelCompletionRepository
from helpers import day


def _drift(ctx, habit_id, value=99):
    for record in ctx.completion_repo.list_for_habit(habit_id):
        record.streak_count = value
        ctx.completion_repo.update(record)


def _snapshots(ctx, habit_id):
    return [r.streak_count for r in ctx.completion_repo.list_for_habit(habit_id)]


def test_rewrites_drifted_snapshots(ctx, habit_factory):
    habit = habit_factory()
    ctx.ledger.mark_completed(habit.id, day(1))
    ctx.ledger.mark_completed(habit.id, day(2))
    ctx.ledger.mark_skipped(habit.id, day(3))
    ctx.ledger.mark_missed(habit.id, day(4))
    ctx.ledger.mark_completed(habit.id, day(5))
    _drift(ctx, habit.id)

    assert ctx.recalculate_all_streaks() == 5
    assert _snapshots(ctx, habit.id) == [1, 2, 2, 0, 1]


def test_out_of_order_marks_are_repaired(ctx, habit_factory):
    habit = habit_factory()
    ctx.ledger.mark_completed(habit.id, day(3))
    ctx.ledger.mark_completed(habit.id, day(1))
    ctx.ledger.mark_completed(habit.id, day(2))

    ctx.recalculate_all_streaks()
    assert _snapshots(ctx, habit.id) == [1, 2, 3]


def test_habits_are_replayed_independently(ctx, habit_factory):
    run = habit_factory(name="Run")
    read = habit_factory(name="Read")
    for n in (1, 2):
        ctx.ledger.mark_completed(run.id, day(n))
    ctx.ledger.mark_missed(read.id, day(1))
    ctx.ledger.mark_completed(read.id, day(2))
    _drift(ctx, run.id)
    _drift(ctx, read.id)

    ctx.recalculate_all_streaks()
    assert _snapshots(ctx, run.id) == [1, 2]
    assert _snapshots(ctx, read.id) == [0, 1]


def test_idempotent(ctx, habit_factory):
    habit = habit_factory()
    for n in (1, 2, 3):
        ctx.ledger.mark_completed(habit.id, day(n))
    _drift(ctx, habit.id, value=7)

    ctx.recalculate_all_streaks()
    first = _snapshots(ctx, habit.id)
    assert ctx.recalculate_all_streaks() == 0
    assert _snapshots(ctx, habit.id) == first


def test_empty_ledger(ctx):
    assert ctx.recalculate_all_streaks() == 0


def test_failure_rolls_back_every_rewrite(ctx, habit_factory, monkeypatch):
    habit = habit_factory()
    for n in (1, 2, 3):
        ctx.ledger.mark_completed(habit.id, day(n))
    _drift(ctx, habit.id)

    original = SQLModelCompletionRepository.update
    calls = []

    def flaky_update(self, completion):
        calls.append(completion.id)
        if len(calls) > 1:
            raise RuntimeError("disk full")
        return original(self, completion)

    monkeypatch.setattr(SQLModelCompletionRepository, "update", flaky_update)
    with pytest.raises(RuntimeError):
        ctx.recalculate_all_streaks()
    monkeypatch.undo()

    assert _snapshots(ctx, habit.id) == [99, 99, 99]


def test_run_maintenance(ctx, habit_factory):
    habit = habit_factory()
    for n in range(1, 6):
        ctx.ledger.mark_completed(habit.id, day(n))

    result = ctx.run_maintenance(days_to_keep=7)

    # Jan 1 and 2 fall outside the window; the survivors are replayed from 1
    assert result == {"deleted": 2, "recalculated": 3}
    assert _snapshots(ctx, habit.id) == [1, 2, 3]
