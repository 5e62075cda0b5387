"""
Codec - Packing and unpacking ids

Pure bit arithmetic over a validated GeneratorConfig. The codec never
touches generator state; counting emitted ids is the state machine's job.
"""

import re
from datetime import datetime, timezone
from typing import Any, NamedTuple

from pydantic import BaseModel, Field

from driftflake.generator.config import ID_BITS, GeneratorConfig
from driftflake.kernel.errors import InvalidIdError

MAX_ID = (1 << ID_BITS) - 1
# How far past "now" an id's timestamp may be and still validate
FUTURE_TOLERANCE_MS = 1000

_DECIMAL = re.compile(r"-?[0-9]+")


class DecodedId(NamedTuple):
    """Raw id fields"""

    tick: int
    worker_id: int
    sequence: int


class ParsedId(BaseModel):
    """Decoded id with the timestamp re-anchored to the Unix epoch"""

    timestamp: datetime
    timestamp_ms: int = Field(description="Unix milliseconds (base_time + tick)")
    worker_id: int
    sequence: int


def coerce_id(value: Any) -> int:
    """
    Turn an int or decimal string into a non-negative int

    Raises:
        InvalidIdError: for negatives, booleans, floats and anything unparseable
    """
    if isinstance(value, bool):
        raise InvalidIdError(value, "Id must be an integer, not a boolean")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not _DECIMAL.fullmatch(text):
            raise InvalidIdError(value, f"Id is not a decimal integer: {value!r}")
        try:
            number = int(text)
        except ValueError as exc:
            # digit count beyond the interpreter's int conversion limit
            raise InvalidIdError(value, "Id has too many digits") from exc
    else:
        raise InvalidIdError(value, f"Id must be an int or decimal string, got {type(value).__name__}")
    if number < 0:
        raise InvalidIdError(value, "Id must not be negative")
    return number


class IdCodec:
    """Encodes and decodes ids for one bit layout"""

    def __init__(self, config: GeneratorConfig) -> None:
        self.config = config
        self._timestamp_shift = config.timestamp_shift
        self._seq_bits = config.seq_bits
        self._worker_mask = config.max_worker_id
        self._seq_mask = config.sequence_mask

    def encode(self, tick: int, worker_id: int, sequence: int) -> int:
        return (
            (tick << self._timestamp_shift)
            | (worker_id << self._seq_bits)
            | sequence
        )

    def decode(self, value: Any) -> DecodedId:
        """
        Split an id into (tick, worker_id, sequence)

        Raises:
            InvalidIdError: if the id is negative or not an integer
        """
        number = coerce_id(value)
        return DecodedId(
            tick=number >> self._timestamp_shift,
            worker_id=(number >> self._seq_bits) & self._worker_mask,
            sequence=number & self._seq_mask,
        )

    def parse(self, value: Any) -> ParsedId:
        decoded = self.decode(value)
        timestamp_ms = self.config.base_time + decoded.tick
        try:
            timestamp = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidIdError(
                value, f"Id timestamp {timestamp_ms} ms is outside the datetime range"
            ) from exc
        return ParsedId(
            timestamp=timestamp,
            timestamp_ms=timestamp_ms,
            worker_id=decoded.worker_id,
            sequence=decoded.sequence,
        )

    def is_valid(self, value: Any, now_ms: int, strict: bool = False) -> bool:
        """
        Structural acceptance check for externally supplied ids

        Accepts ids that decode, fit in 64 bits, carry a timestamp between
        base_time and now_ms plus a one-second tolerance, and - when strict -
        belong to this layout's worker id.
        """
        try:
            number = coerce_id(value)
        except InvalidIdError:
            return False
        if number > MAX_ID:
            return False

        decoded = self.decode(number)
        timestamp_ms = self.config.base_time + decoded.tick
        if timestamp_ms < self.config.base_time:
            return False
        if timestamp_ms > now_ms + FUTURE_TOLERANCE_MS:
            return False
        if strict and decoded.worker_id != self.config.worker_id:
            return False
        return True

    def format_binary(self, value: Any) -> str:
        """Render an id as its 64-bit binary fields (diagnostic only)"""
        number = coerce_id(value)
        parsed = self.parse(number)
        binary = format(number, f"0{ID_BITS}b")
        shift = self._timestamp_shift

        return "\n".join(
            [
                f"ID: {number}",
                f"Binary ({ID_BITS}-bit):",
                f"{binary[:-shift]} - timestamp ({self.config.timestamp_bits} bits) "
                f"= {parsed.timestamp.isoformat()}",
                f"{binary[-shift:-self._seq_bits]} - worker id "
                f"({self.config.worker_id_bits} bits) = {parsed.worker_id}",
                f"{binary[-self._seq_bits:]} - sequence ({self._seq_bits} bits) "
                f"= {parsed.sequence}",
            ]
        )
