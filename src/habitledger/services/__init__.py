"""Service module exports."""

from . import ledger, recompute, schedule, stats, streaks

__all__ = ["ledger", "recompute", "schedule", "stats", "streaks"]
