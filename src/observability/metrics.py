"""Prometheus metrics for bid synchronization and submission.

Exports counters for ledger polls, bid raises and commits, plus commit
latency and the latest known bid per item.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    generate_latest,
    REGISTRY,
)
import time


# ============================================================================
# CORE METRICS
# ============================================================================

ledger_polls_total = Counter(
    "bid_sync_ledger_polls_total",
    "Total number of ledger polls by the reconciler",
    ["outcome"],  # 'raised', 'unchanged', 'empty' or 'failed'
)

bid_raises_total = Counter(
    "bid_sync_bid_raises_total",
    "Total number of times the current bid was raised",
    ["source"],  # 'poll' or 'commit'
)

bid_commits_total = Counter(
    "bid_sync_bid_commits_total",
    "Total number of bid commit attempts",
    ["outcome"],
)

validation_rejections_total = Counter(
    "bid_sync_validation_rejections_total",
    "Total number of bids refused before reaching the ledger",
    ["reason"],
)

commit_latency = Histogram(
    "bid_sync_commit_latency_seconds",
    "Time to commit a bid to the ledger",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

current_bid = Gauge("bid_sync_current_bid", "Latest known bid per item", ["item_id"])

active_sessions = Gauge("bid_sync_active_sessions", "Number of open bidding sessions")


# ============================================================================
# HELPERS
# ============================================================================


class MetricsContext:
    """
    Context manager for tracking elapsed time into a histogram.

    Example:
        with MetricsContext(commit_latency):
            await ledger.place_bid(request)
    """

    def __init__(self, histogram):
        self.histogram = histogram
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.histogram.observe(time.time() - self.start_time)
        return False


# ============================================================================
# METRICS COLLECTOR
# ============================================================================


class MetricsCollector:
    """
    Centralized metrics collection and export.
    """

    def record_poll(self, outcome: str):
        """Record one reconciler poll."""
        ledger_polls_total.labels(outcome=outcome).inc()

    def record_raise(self, item_id, source: str, amount: int):
        """Record a raise of the current bid."""
        bid_raises_total.labels(source=source).inc()
        current_bid.labels(item_id=str(item_id)).set(amount)

    def record_commit(self, outcome: str):
        """Record a commit attempt by outcome (status name)."""
        bid_commits_total.labels(outcome=outcome).inc()

    def record_rejection(self, reason: str):
        """Record a bid refused by local validation."""
        validation_rejections_total.labels(reason=reason).inc()

    def session_opened(self):
        active_sessions.inc()

    def session_closed(self):
        active_sessions.dec()

    def get_metrics(self) -> bytes:
        """
        Get metrics in Prometheus format.

        Returns:
            Metrics as bytes in Prometheus exposition format
        """
        return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()
