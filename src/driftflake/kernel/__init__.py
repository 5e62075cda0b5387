"""
Kernel - Infrastructure shared by the generator

Errors, the tick-source seam, logging, metrics and the bounded clock wait.
Nothing in here knows about bit layouts.
"""

from driftflake.kernel.errors import (
    ConfigurationError,
    GenidError,
    InvalidArgumentError,
    InvalidIdError,
    RangeError,
)
from driftflake.kernel.time import ManualTickSource, SystemTickSource, TickSource
from driftflake.kernel.wait import wait_for_tick

__all__ = [
    # Time
    "TickSource",
    "SystemTickSource",
    "ManualTickSource",
    "wait_for_tick",
    # Errors
    "GenidError",
    "ConfigurationError",
    "InvalidArgumentError",
    "InvalidIdError",
    "RangeError",
]
