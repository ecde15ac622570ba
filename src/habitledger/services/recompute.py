"""Bulk repair of stored streak snapshots."""

from __future__ import annotations

from ..domain.repositories import CompletionRepository
from ..logging_config import get_logger
from ..models.enums import CompletionStatus
from .streaks import running_streaks

logger = get_logger("services.recompute")


def recalculate_all_streaks(completions: CompletionRepository) -> int:
    """Rewrite every ``streak_count`` by replaying each habit's rows in date order.

    Runs in one transaction; either every snapshot is rewritten or none is.
    Returns the number of rows whose snapshot changed.
    """

    changed = 0
    with completions.transaction() as store:
        habit_ids = store.distinct_habit_ids()
        for habit_id in habit_ids:
            records = store.list_for_habit(habit_id)
            values = running_streaks(CompletionStatus.parse(r.status) for r in records)
            for record, value in zip(records, values):
                if record.streak_count == value:
                    continue
                record.streak_count = value
                store.update(record)
                changed += 1

    logger.info(
        "Streak snapshots recalculated",
        extra={"habits": len(habit_ids), "changed": changed},
    )
    return changed


__all__ = ["recalculate_all_streaks"]
