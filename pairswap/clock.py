"""Time sources for pools.

Pools read the current time (whole seconds) from a clock so tests and
simulations can drive the oracle deterministically.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> int: ...


class SystemClock:
    """Wall-clock seconds since the epoch."""

    def __call__(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"Cannot move a clock backwards: {seconds}")
        self.now += seconds
        return self.now
