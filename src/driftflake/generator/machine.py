"""
Generation state machine - Decides the tick and sequence of every id

Two paths share one state record:

Normal path (not drifting):
    clock behind last tick  -> rollback sub-protocol (reserved slots 1-4)
    clock ahead             -> adopt the new tick, restart the sequence
    same tick, room left    -> next sequence
    same tick, exhausted    -> borrow the next tick and enter drift
                               (TRADITIONAL method waits for the clock instead)

Drift path (running ahead of the clock):
    clock caught up         -> drain one leftover sequence, then rejoin the clock
    drift budget spent      -> wait for the clock
    sequence exhausted      -> borrow another tick
    room left               -> next sequence

Not thread-safe. One machine must only ever be driven by one thread at a
time; concurrent producers need external serialization or their own
machine with a distinct worker id.
"""

from collections.abc import Iterable

from driftflake.generator.codec import IdCodec
from driftflake.generator.config import GeneratorConfig, GenidMethod
from driftflake.generator.observers import GeneratorObserver
from driftflake.generator.state import MAX_ROLLBACK_DEPTH, GenerationState
from driftflake.generator.stats import GeneratorMode, StatisticsCollector
from driftflake.kernel.time import SystemTickSource, TickSource
from driftflake.kernel.wait import DEFAULT_MAX_POLLS, wait_for_tick

Checkpoint = tuple[GenerationState, tuple[int, int, int]]


class GenerationStateMachine:
    """
    Produces ids for one worker

    Attributes:
        config: Validated bit layout
        codec: Packs fields into ids
        tick_source: The only clock the machine reads
        stats: Counters updated as ids are produced
        state: Mutable generation state
    """

    def __init__(
        self,
        config: GeneratorConfig,
        tick_source: TickSource | None = None,
        observers: Iterable[GeneratorObserver] = (),
        stats: StatisticsCollector | None = None,
        max_wait_polls: int = DEFAULT_MAX_POLLS,
    ) -> None:
        self.config = config
        self.codec = IdCodec(config)
        self.tick_source = tick_source or SystemTickSource(config.base_time)
        self.observers = list(observers)
        self.stats = stats or StatisticsCollector()
        self.max_wait_polls = max_wait_polls
        self.state = GenerationState.initial(config.min_seq)

    @property
    def mode(self) -> GeneratorMode:
        return GeneratorMode.DRIFT if self.state.in_drift else GeneratorMode.NORMAL

    def next_id(self) -> int:
        if self.state.in_drift:
            return self._next_drift_id()
        return self._next_normal_id()

    def checkpoint(self) -> Checkpoint:
        """Capture state and counters so a rejected call can be undone"""
        return (self.state.copy(), self.stats.checkpoint())

    def restore(self, checkpoint: Checkpoint) -> None:
        state, counters = checkpoint
        self.state = state.copy()
        self.stats.restore(counters)

    # ------------------------------------------------------------------
    # Normal path
    # ------------------------------------------------------------------

    def _next_normal_id(self) -> int:
        state = self.state
        now = self.tick_source.now()

        if now < state.last_tick:
            return self._next_rollback_id()

        if state.rollback_tick is not None:
            self._notify("on_rollback_end", state.rollback_tick)
            state.clear_rollback()

        if now > state.last_tick:
            state.last_tick = now
            state.current_seq = self.config.min_seq
            return self._emit(state.last_tick)

        if state.current_seq > self.config.max_seq:
            if self.config.method is GenidMethod.TRADITIONAL:
                state.last_tick = self._wait_past_last_tick("sequence_exhausted")
                state.current_seq = self.config.min_seq
                return self._emit(state.last_tick)

            self._notify("on_drift_begin", now)
            state.last_tick += 1
            state.current_seq = self.config.min_seq
            state.in_drift = True
            state.drift_steps = 1
            self.stats.record_drift_episode()
            return self._emit(state.last_tick)

        return self._emit(state.last_tick)

    def _next_rollback_id(self) -> int:
        state = self.state

        # Open a new episode when none is running or the current one has
        # walked back to tick 0
        if state.rollback_tick is None or state.rollback_tick < 1:
            rollback_tick = state.last_tick - 1
            depth = state.rollback_index + 1

            if depth > MAX_ROLLBACK_DEPTH or rollback_tick < 0:
                return self._recover_from_rollback(depth)

            # State only changes once every observer has accepted the episode
            self._notify("on_rollback_begin", rollback_tick)
            state.rollback_tick = rollback_tick
            state.rollback_index = depth
            self.stats.record_rollback_episode()

        value = self.codec.encode(
            state.rollback_tick, self.config.worker_id, state.rollback_index
        )
        state.rollback_tick -= 1
        self.stats.record_generated()
        return value

    def _recover_from_rollback(self, depth: int) -> int:
        """Reserved slots are used up: wait for the clock instead"""
        state = self.state
        if depth > 1:
            self._notify("on_rollback_end", state.last_tick)
        state.last_tick = self._wait_past_last_tick("rollback_depth")
        state.clear_rollback()
        state.current_seq = self.config.min_seq
        return self._emit(state.last_tick)

    # ------------------------------------------------------------------
    # Drift path
    # ------------------------------------------------------------------

    def _next_drift_id(self) -> int:
        state = self.state
        now = self.tick_source.now()

        if now > state.last_tick:
            self._notify("on_drift_end", now)
            if state.current_seq <= self.config.max_seq:
                # Hand out the leftover sequence at the borrowed tick first
                value = self._emit(state.last_tick)
                self._rejoin_clock(now)
                return value
            self._rejoin_clock(now)
            return self._emit(state.last_tick)

        if state.drift_steps >= self.config.max_drift_steps:
            self._notify("on_drift_end", now)
            self._rejoin_clock(self._wait_past_last_tick("drift_budget"))
            return self._emit(state.last_tick)

        if state.current_seq > self.config.max_seq:
            state.last_tick += 1
            state.current_seq = self.config.min_seq
            state.drift_steps += 1
            return self._emit(state.last_tick)

        return self._emit(state.last_tick)

    def _rejoin_clock(self, tick: int) -> None:
        state = self.state
        state.last_tick = tick
        state.current_seq = self.config.min_seq
        state.clear_drift()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _emit(self, tick: int) -> int:
        state = self.state
        value = self.codec.encode(tick, self.config.worker_id, state.current_seq)
        state.current_seq += 1
        self.stats.record_generated()
        return value

    def _wait_past_last_tick(self, reason: str) -> int:
        return wait_for_tick(
            self.tick_source,
            self.state.last_tick,
            reason=reason,
            max_polls=self.max_wait_polls,
        )

    def _notify(self, hook: str, tick: int) -> None:
        for observer in self.observers:
            getattr(observer, hook)(tick)
