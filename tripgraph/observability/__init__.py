"""Run tracing and metrics."""

from tripgraph.observability.metrics import MetricsCollector, get_metrics_collector
from tripgraph.observability.tracer import (
    ExecutionTracer,
    InMemoryTracer,
    NullTracer,
    get_default_tracer,
    safe_call,
)

__all__ = [
    "ExecutionTracer",
    "InMemoryTracer",
    "MetricsCollector",
    "NullTracer",
    "get_default_tracer",
    "get_metrics_collector",
    "safe_call",
]
