"""Time source for backup names.

Backups are named after the wall clock in epoch milliseconds.  The clock is
injected so tests can freeze or step time.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(UTC)


def epoch_millis(clock: Clock) -> int:
    return round(clock.now().timestamp() * 1000)


class StampSequence:
    """Strictly increasing millisecond stamps read from *clock*.

    Stamps taken within the same millisecond, or after the clock has stepped
    backwards, still come out in order.  ``seed`` raises the floor to a stamp
    that is already in use.
    """

    def __init__(self, clock: Clock) -> None:
        self.clock = clock
        self.last: int | None = None

    @property
    def seeded(self) -> bool:
        return self.last is not None

    def seed(self, stamp: int) -> None:
        self.last = max(self.last or 0, stamp)

    def next(self) -> int:
        stamp = max(epoch_millis(self.clock), (self.last or 0) + 1)
        self.last = stamp
        return stamp
