"""
Bounded wait for the clock to move past a tick.

The generator blocks here when it cannot manufacture more sequence space.
Polling is capped: a clock that never advances gets the next tick forced
rather than hanging the caller forever.
"""

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from driftflake.kernel.logging import get_logger
from driftflake.kernel.metrics import forced_waits_total, wait_fallbacks_total
from driftflake.kernel.time import TickSource

logger = get_logger(__name__)

DEFAULT_MAX_POLLS = 1_000_000


def wait_for_tick(
    source: TickSource,
    after: int,
    *,
    reason: str,
    max_polls: int = DEFAULT_MAX_POLLS,
    poll_interval: float = 0.0,
) -> int:
    """
    Poll the tick source until it reports a tick strictly greater than `after`.

    Args:
        source: Tick source to poll
        after: Tick the clock must pass
        reason: Why the generator is waiting (metrics label)
        max_polls: Poll cap before giving up on the clock
        poll_interval: Seconds to sleep between polls (0 spins)

    Returns:
        The first observed tick greater than `after`, or `after + 1` when the
        poll cap is reached
    """
    forced_waits_total.labels(reason=reason).inc()

    def _force_next_tick(retry_state: RetryCallState) -> int:
        wait_fallbacks_total.inc()
        logger.warning(
            "Clock did not advance within poll cap, forcing next tick",
            after=after,
            polls=retry_state.attempt_number,
            reason=reason,
        )
        return after + 1

    retrying = Retrying(
        retry=retry_if_result(lambda tick: tick <= after),
        stop=stop_after_attempt(max_polls),
        wait=wait_fixed(poll_interval),
        retry_error_callback=_force_next_tick,
    )
    return retrying(source.now)
