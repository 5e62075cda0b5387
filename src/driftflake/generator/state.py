"""
Generation state - the mutable half of a generator

Owned by exactly one GenerationStateMachine and never shared. Kept as a
plain dataclass so the machine can checkpoint and restore it cheaply when a
call has to be undone.
"""

from dataclasses import dataclass, replace

# Highest nested rollback depth served from the reserved sequence slots 1-4
MAX_ROLLBACK_DEPTH = 4


@dataclass
class GenerationState:
    """
    Attributes:
        last_tick: Tick of the most recently minted id (may run ahead of the
            clock while drifting)
        current_seq: Next sequence to hand out at last_tick
        in_drift: Whether last_tick was borrowed from the future
        drift_steps: Ticks borrowed in the current drift episode
        rollback_tick: Tick the next rollback id is minted at, or None when
            no rollback episode is open
        rollback_index: Nested rollback depth, doubling as the reserved
            sequence value used for rollback ids
    """

    last_tick: int
    current_seq: int
    in_drift: bool = False
    drift_steps: int = 0
    rollback_tick: int | None = None
    rollback_index: int = 0

    @classmethod
    def initial(cls, min_seq: int) -> "GenerationState":
        return cls(last_tick=0, current_seq=min_seq)

    def copy(self) -> "GenerationState":
        return replace(self)

    def clear_rollback(self) -> None:
        self.rollback_tick = None
        self.rollback_index = 0

    def clear_drift(self) -> None:
        self.in_drift = False
        self.drift_steps = 0
