"""
Custom exceptions for driftflake

Every failure is raised synchronously at the call site and carries the
offending value as an attribute so callers can react without parsing
messages. A call that raises never mutates generator state.
"""

from typing import Any


class GenidError(Exception):
    """Base exception for all driftflake errors"""

    pass


class ConfigurationError(GenidError):
    """
    Raised when generator options violate the bit-layout rules

    Fatal at construction time - there is nothing to retry, the options
    themselves must change.
    """

    def __init__(self, field: str, message: str = "") -> None:
        self.field = field
        super().__init__(message or f"Invalid configuration option: {field}")


class InvalidArgumentError(GenidError):
    """Raised when a call-time argument is out of its accepted domain"""

    def __init__(self, argument: str, value: Any, message: str = "") -> None:
        self.argument = argument
        self.value = value
        super().__init__(message or f"Invalid value for {argument}: {value!r}")


class InvalidIdError(GenidError):
    """Raised when an id cannot be decoded (negative, non-integer, garbage)"""

    def __init__(self, value: Any, message: str = "") -> None:
        self.value = value
        super().__init__(message or f"Invalid id: {value!r}")


class RangeError(GenidError):
    """
    Raised when a generated id does not fit the requested integer width

    The generator state is rolled back before this is raised, so the
    rejected id is never handed out.
    """

    def __init__(self, value: int, limit: int, message: str = "") -> None:
        self.value = value
        self.limit = limit
        super().__init__(
            message or f"Id {value} exceeds the representable range (must be < {limit})"
        )
