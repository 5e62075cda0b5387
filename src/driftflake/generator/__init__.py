"""
Generator - Bit layout, codec and the generation state machine
"""

from driftflake.generator.codec import DecodedId, IdCodec, ParsedId
from driftflake.generator.config import (
    ConfigSummary,
    GeneratorConfig,
    GenidMethod,
    validate_config,
)
from driftflake.generator.machine import GenerationStateMachine
from driftflake.generator.observers import (
    GeneratorObserver,
    LoggingObserver,
    MetricsObserver,
    NullObserver,
)
from driftflake.generator.state import GenerationState
from driftflake.generator.stats import GeneratorMode, StatisticsCollector, StatsSnapshot

__all__ = [
    # Config
    "GeneratorConfig",
    "GenidMethod",
    "ConfigSummary",
    "validate_config",
    # Codec
    "IdCodec",
    "DecodedId",
    "ParsedId",
    # State machine
    "GenerationState",
    "GenerationStateMachine",
    # Statistics
    "GeneratorMode",
    "StatisticsCollector",
    "StatsSnapshot",
    # Observers
    "GeneratorObserver",
    "NullObserver",
    "LoggingObserver",
    "MetricsObserver",
]
