"""
Statistics collector - Passive counters read on demand

Updated by the state machine as a side effect of generation. Resetting
statistics never touches generation state.
"""

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, Field

from driftflake.kernel.time import current_millis


class GeneratorMode(str, Enum):
    """
    Current operating mode

    NORMAL: ids carry the wall-clock tick
    DRIFT: ids carry borrowed future ticks until the clock catches up
    """

    NORMAL = "NORMAL"
    DRIFT = "DRIFT"


class StatsSnapshot(BaseModel):
    """Point-in-time view of generator statistics"""

    total_generated: int = Field(ge=0)
    drift_episodes: int = Field(ge=0, description="Times sequence exhaustion started a drift")
    rollback_episodes: int = Field(ge=0, description="Clock rollbacks served from reserved slots")
    uptime_ms: int = Field(description="Milliseconds since start or last reset")
    avg_per_second: int = Field(ge=0)
    mode: GeneratorMode


class StatisticsCollector:
    """Counters for one generator instance"""

    def __init__(self, clock: Callable[[], int] = current_millis) -> None:
        """
        Args:
            clock: Wall-clock milliseconds source used for uptime
        """
        self._clock = clock
        self.reset()

    def reset(self) -> None:
        self.total_generated = 0
        self.drift_episodes = 0
        self.rollback_episodes = 0
        self.start_time = self._clock()

    def record_generated(self) -> None:
        self.total_generated += 1

    def record_drift_episode(self) -> None:
        self.drift_episodes += 1

    def record_rollback_episode(self) -> None:
        self.rollback_episodes += 1

    def checkpoint(self) -> tuple[int, int, int]:
        return (self.total_generated, self.drift_episodes, self.rollback_episodes)

    def restore(self, checkpoint: tuple[int, int, int]) -> None:
        self.total_generated, self.drift_episodes, self.rollback_episodes = checkpoint

    def snapshot(self, mode: GeneratorMode) -> StatsSnapshot:
        uptime = self._clock() - self.start_time
        avg = (self.total_generated * 1000) // uptime if uptime > 0 else 0
        return StatsSnapshot(
            total_generated=self.total_generated,
            drift_episodes=self.drift_episodes,
            rollback_episodes=self.rollback_episodes,
            uptime_ms=uptime,
            avg_per_second=avg,
            mode=mode,
        )
