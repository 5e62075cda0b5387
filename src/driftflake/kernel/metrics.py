"""
Prometheus metrics collection for driftflake.

Counts the abnormal paths of the generator (drift compensation, clock
rollback, forced waits) so operators can see clock trouble before it turns
into duplicate ids.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# Generator Episode Metrics
# ============================================================================

drift_episodes_total = Counter(
    "driftflake_drift_episodes_total",
    "Total number of drift-compensation episodes (sequence exhausted within a tick)",
    ["worker_id"],
)

rollback_episodes_total = Counter(
    "driftflake_rollback_episodes_total",
    "Total number of clock rollback episodes served from the reserved sequence range",
    ["worker_id"],
)

forced_waits_total = Counter(
    "driftflake_forced_waits_total",
    "Total number of bounded waits for the clock to pass the last used tick",
    ["reason"],  # reason: drift_budget, rollback_depth, sequence_exhausted
)

wait_fallbacks_total = Counter(
    "driftflake_wait_fallbacks_total",
    "Total number of bounded waits that hit the poll cap and forced the next tick",
)

# ============================================================================
# Batch Metrics
# ============================================================================

batch_size = Histogram(
    "driftflake_batch_size",
    "Number of ids requested per batch call",
    buckets=(1, 10, 100, 1000, 10000, 100000),
)
