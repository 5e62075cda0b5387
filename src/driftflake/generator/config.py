"""
Bit-layout configuration - How a 64-bit id is carved up

The layout is validated once, at construction, and never changes. All bit
arithmetic downstream trusts these invariants instead of re-checking them.

Layout (most significant bit first):

    | timestamp (64 - w - s bits) | worker id (w bits) | sequence (s bits) |

Sequence values 0-4 are reserved for ids minted during a clock rollback, so
normal sequencing always starts at 5 or above.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from driftflake.kernel.errors import ConfigurationError

# 2020-01-01T00:00:00Z in milliseconds
DEFAULT_BASE_TIME = 1577836800000
DEFAULT_WORKER_ID_BITS = 6
DEFAULT_SEQ_BITS = 6
DEFAULT_MIN_SEQ = 5
DEFAULT_MAX_DRIFT_STEPS = 2000

WORKER_ID_BITS_RANGE = (1, 15)
SEQ_BITS_RANGE = (3, 21)
# worker id + sequence bits; leaves >= 42 bits of timestamp
MAX_LAYOUT_BITS = 22
RESERVED_SEQ_COUNT = 5
ID_BITS = 64


class GenidMethod(str, Enum):
    """
    Generation algorithm

    DRIFT: borrow future ticks when a tick's sequence space runs out
    TRADITIONAL: block until the wall clock reaches the next tick
    """

    DRIFT = "DRIFT"
    TRADITIONAL = "TRADITIONAL"


# Numeric method codes accepted as aliases
METHOD_CODES = {1: GenidMethod.DRIFT, 2: GenidMethod.TRADITIONAL}


class GeneratorConfig(BaseModel):
    """
    Validated, immutable bit layout and generation limits

    Only absent or None options take their defaults - an explicit 0 is
    validated like any other value.
    """

    worker_id: int = Field(
        ge=0,
        description="Externally assigned producer id, unique per deployment",
    )
    method: GenidMethod = Field(
        default=GenidMethod.DRIFT,
        description="Generation algorithm",
    )
    base_time: int = Field(
        default=DEFAULT_BASE_TIME,
        ge=0,
        description="Epoch offset in Unix milliseconds; timestamps are base_time + tick",
    )
    worker_id_bits: int = Field(
        default=DEFAULT_WORKER_ID_BITS,
        ge=WORKER_ID_BITS_RANGE[0],
        le=WORKER_ID_BITS_RANGE[1],
        description="Width of the worker id field",
    )
    seq_bits: int = Field(
        default=DEFAULT_SEQ_BITS,
        ge=SEQ_BITS_RANGE[0],
        le=SEQ_BITS_RANGE[1],
        description="Width of the sequence field",
    )
    max_seq: int | None = Field(
        default=None,  # filled from seq_bits after validation
        ge=0,
        description="Largest sequence used by normal sequencing (default 2^seq_bits - 1)",
    )
    min_seq: int = Field(
        default=DEFAULT_MIN_SEQ,
        ge=0,
        description="Smallest sequence used by normal sequencing (0-4 are reserved)",
    )
    max_drift_steps: int = Field(
        default=DEFAULT_MAX_DRIFT_STEPS,
        ge=1,
        description="Consecutive borrowed ticks allowed before waiting for the clock",
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {key: value for key, value in data.items() if value is not None}

    @field_validator("method", mode="before")
    @classmethod
    def _method_from_code(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool) and value in METHOD_CODES:
            return METHOD_CODES[value]
        return value

    @model_validator(mode="after")
    def _check_layout(self) -> "GeneratorConfig":
        if self.max_seq is None:
            # frozen model, so bypass the assignment guard
            object.__setattr__(self, "max_seq", self.sequence_mask)
        # ConfigurationError is not a ValueError, so pydantic lets it through untouched
        if self.worker_id_bits + self.seq_bits > MAX_LAYOUT_BITS:
            raise ConfigurationError(
                "worker_id_bits",
                f"worker_id_bits + seq_bits must not exceed {MAX_LAYOUT_BITS} "
                f"(got {self.worker_id_bits} + {self.seq_bits})",
            )
        if self.worker_id > self.max_worker_id:
            raise ConfigurationError(
                "worker_id",
                f"worker_id must be between 0 and {self.max_worker_id} "
                f"(got {self.worker_id})",
            )
        if self.min_seq < RESERVED_SEQ_COUNT:
            raise ConfigurationError(
                "min_seq",
                f"min_seq must be at least {RESERVED_SEQ_COUNT}, "
                f"0-{RESERVED_SEQ_COUNT - 1} are reserved (got {self.min_seq})",
            )
        if self.max_seq < self.min_seq:
            raise ConfigurationError(
                "max_seq",
                f"max_seq must be >= min_seq (got {self.max_seq} < {self.min_seq})",
            )
        if self.max_seq > self.sequence_mask:
            raise ConfigurationError(
                "max_seq",
                f"max_seq {self.max_seq} does not fit in {self.seq_bits} sequence bits",
            )
        return self

    @property
    def timestamp_shift(self) -> int:
        return self.worker_id_bits + self.seq_bits

    @property
    def timestamp_bits(self) -> int:
        return ID_BITS - self.timestamp_shift

    @property
    def max_worker_id(self) -> int:
        return (1 << self.worker_id_bits) - 1

    @property
    def sequence_mask(self) -> int:
        return (1 << self.seq_bits) - 1

    @property
    def ids_per_tick(self) -> int:
        return self.max_seq - self.min_seq + 1

    def summary(self) -> "ConfigSummary":
        """Effective configuration with derived fields, for display"""
        return ConfigSummary(
            method=self.method,
            worker_id=self.worker_id,
            worker_id_range=f"0-{self.max_worker_id}",
            sequence_range=f"{self.min_seq}-{self.max_seq}",
            max_sequence=self.sequence_mask,
            ids_per_tick=self.ids_per_tick,
            base_time=datetime.fromtimestamp(self.base_time / 1000, tz=timezone.utc),
            timestamp_bits=self.timestamp_bits,
            worker_id_bits=self.worker_id_bits,
            sequence_bits=self.seq_bits,
            max_drift_steps=self.max_drift_steps,
        )


class ConfigSummary(BaseModel):
    """Read-only view of the effective configuration"""

    method: GenidMethod
    worker_id: int
    worker_id_range: str = Field(description='Accepted worker ids, e.g. "0-63"')
    sequence_range: str = Field(description='Normal sequence range, e.g. "5-63"')
    max_sequence: int = Field(description="Largest value the sequence field can hold")
    ids_per_tick: int = Field(description="Ids available per millisecond before drift")
    base_time: datetime
    timestamp_bits: int
    worker_id_bits: int
    sequence_bits: int
    max_drift_steps: int


def validate_config(
    options: Mapping[str, Any] | None = None, **overrides: Any
) -> GeneratorConfig:
    """
    Build a GeneratorConfig, reporting the first invalid option

    Args:
        options: Generator options (worker_id is required)
        **overrides: Options applied on top of `options`

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: naming the offending option
    """
    merged = {**(options or {}), **overrides}
    try:
        return GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else "options"
        if error["type"] == "missing":
            message = f"{field} is required"
        elif error["type"] == "extra_forbidden":
            message = f"Unknown option: {field}"
        else:
            message = f"Invalid {field}: {error['msg']}"
        raise ConfigurationError(field, message) from exc
