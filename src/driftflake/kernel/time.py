"""
Tick source abstraction for deterministic testing

The generator never reads the system clock directly. It asks a tick source
for the number of milliseconds elapsed since the configured base time, which
lets tests freeze, rewind and script the clock.
"""

import time
from collections.abc import Iterable
from typing import Protocol


def current_millis() -> int:
    """Wall-clock milliseconds since the Unix epoch"""
    return time.time_ns() // 1_000_000


class TickSource(Protocol):
    """Protocol for tick sources - allows deterministic testing"""

    def now(self) -> int:
        """Return the current tick (milliseconds since base time)"""
        ...


class SystemTickSource:
    """Production tick source using the system clock"""

    def __init__(self, base_time: int) -> None:
        self.base_time = base_time

    def now(self) -> int:
        return current_millis() - self.base_time


class ManualTickSource:
    """
    Controllable tick source for deterministic tests

    Holds a single tick value that only moves when told to. Optionally
    replays a script: each call to now() consumes the next scripted tick,
    and once the script runs out the last value sticks.
    """

    def __init__(self, tick: int = 0, script: Iterable[int] | None = None) -> None:
        """
        Initialize with a fixed tick

        Args:
            tick: Starting tick value
            script: Optional ticks to return, in order, before falling back
                to the fixed value
        """
        self._tick = tick
        self._script = list(script or [])
        self.calls = 0

    def now(self) -> int:
        self.calls += 1
        if self._script:
            self._tick = self._script.pop(0)
        return self._tick

    def set(self, tick: int) -> None:
        """Jump to a specific tick (backwards jumps simulate clock rollback)"""
        self._tick = tick

    def advance(self, ticks: int = 1) -> None:
        """Move the clock forward by the given number of ticks"""
        self._tick += ticks

    def queue(self, *ticks: int) -> None:
        """Append ticks to the replay script"""
        self._script.extend(ticks)
