"""
Observability module: Prometheus metrics and OpenTelemetry tracing.
"""

from .tracing import (
    setup_tracing,
    create_span,
    inject_trace_headers,
    get_tracer,
    shutdown_tracing,
)
from .metrics import metrics_collector, MetricsCollector, MetricsContext

__all__ = [
    'setup_tracing',
    'create_span',
    'inject_trace_headers',
    'get_tracer',
    'shutdown_tracing',
    'metrics_collector',
    'MetricsCollector',
    'MetricsContext',
]
