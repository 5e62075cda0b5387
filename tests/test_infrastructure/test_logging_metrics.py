"""
Test infrastructure components: logging, metrics and the bounded wait.

These tests verify the ambient infrastructure around the generator works
correctly.
"""

import pytest
import structlog

from driftflake import Genid
from driftflake.generator.observers import LoggingObserver
from driftflake.kernel.logging import add_component, configure_logging, get_logger, is_production
from driftflake.kernel.metrics import forced_waits_total, wait_fallbacks_total
from driftflake.kernel.time import ManualTickSource


class TestLoggingFramework:
    """Test structured logging framework."""

    def test_configure_logging_console(self) -> None:
        """Test logging configuration for console output."""
        configure_logging(json_output=False, log_level="INFO")
        logger = get_logger(__name__)
        assert logger is not None

    def test_configure_logging_json(self) -> None:
        """Test logging configuration for JSON output."""
        configure_logging(json_output=True, log_level="DEBUG")
        logger = get_logger(__name__)
        assert logger is not None

    def test_processor_chain(self) -> None:
        """Test the configured chain tags events and ends in the chosen renderer."""
        configure_logging(json_output=True, log_level="INFO")
        processors = structlog.get_config()["processors"]

        assert add_component in processors
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert not any(
            isinstance(processor, structlog.stdlib.PositionalArgumentsFormatter)
            for processor in processors
        )

    def test_add_component(self) -> None:
        """Test every event is tagged with the component name."""
        event = add_component(None, "info", {"event": "hello"})  # type: ignore[arg-type]
        assert event["component"] == "driftflake"

    def test_logging_observer_binds_worker_id(self) -> None:
        """Test observer events carry the worker id and tick."""
        with structlog.testing.capture_logs() as captured:
            observer = LoggingObserver(worker_id=11)
            observer.on_rollback_end(42)

        assert captured == [
            {
                "event": "Clock rollback resolved",
                "log_level": "info",
                "worker_id": 11,
                "tick": 42,
            }
        ]

    def test_rollback_logged_as_warning(self) -> None:
        """Test clock rollbacks are logged by the default observers."""
        source = ManualTickSource(1000)
        with structlog.testing.capture_logs() as captured:
            genid = Genid(worker_id=12, base_time=0, tick_source=source)
            genid.next_id()
            source.set(900)
            genid.next_id()

        warnings = [entry for entry in captured if entry["log_level"] == "warning"]
        assert len(warnings) == 1
        assert warnings[0]["tick"] == 999
        assert warnings[0]["worker_id"] == 12


class TestEnvironment:
    """Test environment detection."""

    def test_development_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DRIFTFLAKE_ENVIRONMENT", raising=False)
        assert is_production() is False

    @pytest.mark.parametrize("value", ["production", "PRODUCTION", "Production"])
    def test_production(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("DRIFTFLAKE_ENVIRONMENT", value)
        assert is_production() is True

    def test_other_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DRIFTFLAKE_ENVIRONMENT", "staging")
        assert is_production() is False


class TestMetrics:
    """Test Prometheus metrics collection."""

    def test_forced_wait_counted(self) -> None:
        """Test a traditional generator counts its waits for the next tick."""
        source = ManualTickSource(1000)
        genid = Genid(
            worker_id=1,
            base_time=0,
            seq_bits=3,
            method="TRADITIONAL",
            tick_source=source,
            observers=[],
        )
        before = forced_waits_total.labels(reason="sequence_exhausted")._value.get()

        genid.next_batch(3)
        source.queue(1000, 1001)
        genid.next_id()

        after = forced_waits_total.labels(reason="sequence_exhausted")._value.get()
        assert after == before + 1

    def test_wait_fallback_counted(self) -> None:
        """Test a clock that never advances triggers the fallback counter."""
        source = ManualTickSource(1000)
        genid = Genid(
            worker_id=1,
            base_time=0,
            seq_bits=3,
            method="TRADITIONAL",
            tick_source=source,
            observers=[],
            max_wait_polls=3,
        )
        before = wait_fallbacks_total._value.get()

        ids = genid.next_batch(4)

        assert wait_fallbacks_total._value.get() == before + 1
        assert genid.parse(ids[-1]).timestamp_ms == 1001
