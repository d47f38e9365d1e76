"""
tychee_core.clock
-----------------
Ledger clocks. Timestamps are whole seconds and never move backwards.
"""

from __future__ import annotations
import time


class LedgerClock:
    def timestamp(self) -> int:
        raise NotImplementedError


class SystemClock(LedgerClock):
    def __init__(self):
        self._last = 0

    def timestamp(self) -> int:
        self._last = max(self._last, int(time.time()))
        return self._last


class ManualClock(LedgerClock):
    """Test clock; only moves when told to."""

    def __init__(self, start: int = 0):
        self._now = int(start)

    def timestamp(self) -> int:
        return self._now

    def set(self, ts: int) -> None:
        if ts < self._now:
            raise ValueError(f"ledger clock cannot move backwards ({ts} < {self._now})")
        self._now = int(ts)

    def advance(self, seconds: int) -> int:
        self.set(self._now + seconds)
        return self._now
