"""
Observers - Notifications at drift and rollback episode boundaries

Observers see episodes begin and end; they cannot influence which id is
produced. Exceptions raised by an observer propagate to the caller.
"""

from typing import Protocol

from driftflake.kernel.logging import get_logger
from driftflake.kernel.metrics import drift_episodes_total, rollback_episodes_total


class GeneratorObserver(Protocol):
    """Receives episode boundary notifications from a state machine"""

    def on_drift_begin(self, tick: int) -> None: ...

    def on_drift_end(self, tick: int) -> None: ...

    def on_rollback_begin(self, tick: int) -> None: ...

    def on_rollback_end(self, tick: int) -> None: ...


class NullObserver:
    """No-op observer; subclass and override only what you need"""

    def on_drift_begin(self, tick: int) -> None:
        pass

    def on_drift_end(self, tick: int) -> None:
        pass

    def on_rollback_begin(self, tick: int) -> None:
        pass

    def on_rollback_end(self, tick: int) -> None:
        pass


class LoggingObserver(NullObserver):
    """Logs episode boundaries with structlog"""

    def __init__(self, worker_id: int) -> None:
        self.logger = get_logger(__name__).bind(worker_id=worker_id)

    def on_drift_begin(self, tick: int) -> None:
        self.logger.debug("Sequence exhausted, drifting ahead of clock", tick=tick)

    def on_drift_end(self, tick: int) -> None:
        self.logger.debug("Drift episode ended", tick=tick)

    def on_rollback_begin(self, tick: int) -> None:
        self.logger.warning("Clock moved backwards, serving reserved sequence", tick=tick)

    def on_rollback_end(self, tick: int) -> None:
        self.logger.info("Clock rollback resolved", tick=tick)


class MetricsObserver(NullObserver):
    """Counts episodes in Prometheus"""

    def __init__(self, worker_id: int) -> None:
        self.worker_label = str(worker_id)

    def on_drift_begin(self, tick: int) -> None:
        drift_episodes_total.labels(worker_id=self.worker_label).inc()

    def on_rollback_begin(self, tick: int) -> None:
        rollback_episodes_total.labels(worker_id=self.worker_label).inc()
