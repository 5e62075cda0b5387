"""
Test helpers - Observers and assertions shared across test modules
"""

from collections.abc import Sequence

from driftflake.generator.codec import IdCodec
from driftflake.generator.observers import NullObserver


class RecordingObserver(NullObserver):
    """Records (hook, tick) pairs in call order"""

    def __init__(self) -> None:
        self.events: list[tuple[str, int]] = []

    def on_drift_begin(self, tick: int) -> None:
        self.events.append(("drift_begin", tick))

    def on_drift_end(self, tick: int) -> None:
        self.events.append(("drift_end", tick))

    def on_rollback_begin(self, tick: int) -> None:
        self.events.append(("rollback_begin", tick))

    def on_rollback_end(self, tick: int) -> None:
        self.events.append(("rollback_end", tick))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


def assert_strictly_increasing(ids: Sequence[int]) -> None:
    for previous, current in zip(ids, ids[1:]):
        assert current > previous, f"{current} does not follow {previous}"


def decoded_pairs(codec: IdCodec, ids: Sequence[int]) -> list[tuple[int, int]]:
    """(tick, sequence) for each id"""
    return [(d.tick, d.sequence) for d in map(codec.decode, ids)]
