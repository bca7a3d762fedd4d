from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float: ...

    def elapsed(self, start: float, end: float) -> float: ...


class MonotonicClock:
    """perf_counter based clock; timestamps and differences are in seconds."""

    def now(self) -> float:
        return time.perf_counter()

    def elapsed(self, start: float, end: float) -> float:
        return end - start


@dataclass
class ManualClock:
    """Clock that only moves when advanced (tests and offline simulation)."""
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def elapsed(self, start: float, end: float) -> float:
        return end - start

    def advance(self, dt: float) -> float:
        if dt < 0:
            raise ValueError("clock cannot move backwards")
        self.t += dt
        return self.t

__all__ = ["Clock", "MonotonicClock", "ManualClock"]
