"""
Pytest configuration and shared fixtures

Every generator built here reads a ManualTickSource, so tests decide exactly
what the clock says on each call.
"""

from collections.abc import Callable
from typing import Any

import pytest

from driftflake.generator.config import GeneratorConfig, validate_config
from driftflake.generator.machine import GenerationStateMachine
from driftflake.genid import Genid
from driftflake.kernel.time import ManualTickSource

from tests.helpers import RecordingObserver

# Keep the bounded wait short when a frozen clock forces the fallback
TEST_MAX_WAIT_POLLS = 25


@pytest.fixture
def tick_source() -> ManualTickSource:
    """Provide a frozen tick source starting at tick 1000"""
    return ManualTickSource(1000)


@pytest.fixture
def recorder() -> RecordingObserver:
    """Provide an observer that records every episode notification"""
    return RecordingObserver()


@pytest.fixture
def make_machine(
    tick_source: ManualTickSource, recorder: RecordingObserver
) -> Callable[..., GenerationStateMachine]:
    """
    Factory for state machines over the shared tick source

    Defaults to base_time=0 and worker_id=5 so decoded ticks equal the
    values the tick source reports.
    """

    def _make(**options: Any) -> GenerationStateMachine:
        options.setdefault("worker_id", 5)
        options.setdefault("base_time", 0)
        config: GeneratorConfig = validate_config(options)
        return GenerationStateMachine(
            config,
            tick_source=tick_source,
            observers=[recorder],
            max_wait_polls=TEST_MAX_WAIT_POLLS,
        )

    return _make


@pytest.fixture
def make_genid(tick_source: ManualTickSource) -> Callable[..., Genid]:
    """Factory for façade instances over the shared tick source"""

    def _make(**options: Any) -> Genid:
        options.setdefault("worker_id", 1)
        options.setdefault("base_time", 0)
        return Genid(
            options,
            tick_source=tick_source,
            observers=[],
            max_wait_polls=TEST_MAX_WAIT_POLLS,
        )

    return _make
