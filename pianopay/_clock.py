"""
Clock — injectable source of the current time.

Countdown and expiry checks read time through a Clock so tests can move
time forward without sleeping.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Current timezone-aware time."""
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """
    Clock that only moves when told to.

    Example:
        clock = ManualClock()
        clock.advance(seconds=3601)
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float = 0, *, delta: timedelta | None = None) -> datetime:
        self._now += delta if delta is not None else timedelta(seconds=seconds)
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value


__all__ = ("Clock", "SystemClock", "ManualClock")
