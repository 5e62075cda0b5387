"""
driftflake - Time-ordered 64-bit id generation

Snowflake-family ids that stay unique across producers through a distinct
worker id per producer, keep generating through clock rollbacks using a
reserved sequence range, and borrow future ticks (bounded drift) when a
millisecond's sequence space runs out.
"""

from driftflake.generator.config import GeneratorConfig, GenidMethod
from driftflake.genid import Genid
from driftflake.kernel.errors import (
    ConfigurationError,
    GenidError,
    InvalidArgumentError,
    InvalidIdError,
    RangeError,
)

__version__ = "0.1.0"
__all__ = [
    "Genid",
    "GeneratorConfig",
    "GenidMethod",
    "GenidError",
    "ConfigurationError",
    "InvalidArgumentError",
    "InvalidIdError",
    "RangeError",
    "__version__",
]
