"""Shared dates and a controllable clock for the test suite."""

from __future__ import annotations

from datetime import date, datetime, timedelta

# 2024-01-01 is a Monday.
MONDAY = date(2024, 1, 1)


def day(n: int) -> date:
    """Calendar day ``n`` of January 2024."""

    return date(2024, 1, n)


class FakeClock:
    """Callable clock returning a settable ``now``."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)
