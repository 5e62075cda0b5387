"""
Genid - Main façade class

This is the primary interface for generating and inspecting ids. It wires
a validated configuration, a tick source, statistics and observers into a
generation state machine and exposes the caller-facing operations.

Example:
    >>> from driftflake import Genid
    >>> genid = Genid(worker_id=1)
    >>> new_id = genid.next_id()
    >>> genid.parse(new_id).worker_id
    1
    >>> genid.is_valid(new_id, strict=True)
    True

Thread safety: a Genid instance is NOT safe for concurrent use. Serialize
access externally, or give every thread/process its own instance with a
distinct worker id. Sharing one instance across threads can produce
duplicate or out-of-order ids.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from driftflake.generator.codec import ParsedId
from driftflake.generator.config import (
    ID_BITS,
    ConfigSummary,
    GeneratorConfig,
    validate_config,
)
from driftflake.generator.machine import GenerationStateMachine
from driftflake.generator.observers import (
    GeneratorObserver,
    LoggingObserver,
    MetricsObserver,
)
from driftflake.generator.stats import StatisticsCollector, StatsSnapshot
from driftflake.kernel.errors import InvalidArgumentError, RangeError
from driftflake.kernel.logging import get_logger
from driftflake.kernel.metrics import batch_size
from driftflake.kernel.time import TickSource, current_millis
from driftflake.kernel.wait import DEFAULT_MAX_POLLS

logger = get_logger(__name__)

# Exclusive upper bounds for the fixed-width outputs
UINT64_LIMIT = 1 << ID_BITS
# Integers above 2^53 lose precision as IEEE-754 doubles (JSON numbers)
NARROW_LIMIT = 1 << 53


class Genid:
    """
    Snowflake-style id generator façade

    Provides a unified API for:
    - Id generation (single, fixed-width checked, batch)
    - Id parsing, validation and debug rendering
    - Statistics and effective configuration
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        tick_source: TickSource | None = None,
        observers: Iterable[GeneratorObserver] | None = None,
        max_wait_polls: int = DEFAULT_MAX_POLLS,
        clock: Callable[[], int] = current_millis,
        **overrides: Any,
    ) -> None:
        """
        Initialize generator

        Args:
            options: Generator options (see GeneratorConfig); worker_id is required
            tick_source: Tick source (uses the system clock if None)
            observers: Episode observers (logging + metrics if None)
            max_wait_polls: Poll cap for the bounded clock wait
            clock: Wall-clock milliseconds used for uptime statistics
            **overrides: Options given as keywords, applied on top of `options`

        Raises:
            ConfigurationError: If the options are invalid
        """
        self.config = validate_config(options, **overrides)

        if observers is None:
            observers = [
                LoggingObserver(self.config.worker_id),
                MetricsObserver(self.config.worker_id),
            ]

        self._machine = GenerationStateMachine(
            self.config,
            tick_source=tick_source,
            observers=observers,
            stats=StatisticsCollector(clock),
            max_wait_polls=max_wait_polls,
        )

        logger.info(
            "Generator initialized",
            worker_id=self.config.worker_id,
            method=self.config.method.value,
            worker_id_bits=self.config.worker_id_bits,
            seq_bits=self.config.seq_bits,
        )

    @classmethod
    def from_config(cls, config: GeneratorConfig, **kwargs: Any) -> "Genid":
        """Build a generator from an already validated configuration"""
        return cls(config.model_dump(), **kwargs)

    @property
    def machine(self) -> GenerationStateMachine:
        return self._machine

    # Generation

    def next_id(self) -> int:
        """Generate the next id as a full-precision int"""
        return self._machine.next_id()

    def next_exact(self) -> int:
        """
        Generate the next id, guaranteed to fit an unsigned 64-bit integer

        Raises:
            RangeError: If the id needs more than 64 bits (timestamp field
                overflowed); generator state is left untouched
        """
        return self._next_below(UINT64_LIMIT)

    def next_narrow(self) -> int:
        """
        Generate the next id, guaranteed to be exactly representable as a double

        Raises:
            RangeError: If the id is 2^53 or larger; generator state is left
                untouched
        """
        return self._next_below(NARROW_LIMIT)

    def next_batch(self, count: int) -> list[int]:
        """
        Generate `count` ids in order

        Raises:
            InvalidArgumentError: If count is not a positive integer
        """
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidArgumentError(
                "count", count, f"Batch count must be a positive integer, got {count!r}"
            )
        batch_size.observe(count)
        next_id = self._machine.next_id
        return [next_id() for _ in range(count)]

    def _next_below(self, limit: int) -> int:
        checkpoint = self._machine.checkpoint()
        value = self._machine.next_id()
        if value >= limit:
            self._machine.restore(checkpoint)
            raise RangeError(value, limit)
        return value

    # Inspection

    def parse(self, value: int | str) -> ParsedId:
        """
        Decode an id into timestamp, worker id and sequence

        Raises:
            InvalidIdError: If the id is negative or not an integer
        """
        return self._machine.codec.parse(value)

    def is_valid(self, value: Any, strict: bool = False) -> bool:
        """
        Check whether an id could have been produced under this layout

        Args:
            value: Id as int or decimal string
            strict: Also require this instance's worker id

        Returns:
            True if the id is structurally acceptable
        """
        now_ms = self.config.base_time + self._machine.tick_source.now()
        return self._machine.codec.is_valid(value, now_ms, strict=strict)

    def debug_format(self, value: int | str) -> str:
        """Human-readable binary breakdown (diagnostic, not a stable format)"""
        return self._machine.codec.format_binary(value)

    # Statistics & configuration

    def get_stats(self) -> StatsSnapshot:
        return self._machine.stats.snapshot(self._machine.mode)

    def reset_stats(self) -> None:
        """Zero counters and restart uptime; generation state is untouched"""
        self._machine.stats.reset()

    def get_config(self) -> ConfigSummary:
        return self.config.summary()
