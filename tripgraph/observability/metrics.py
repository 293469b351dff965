"""
In-process metrics with Prometheus text exposition.

Counters, histograms and gauges keyed by name and labels. Like the tracer,
a collector is injected where it is used and a process-wide instance is
only created for the HTTP app.
"""

import math
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

PREFIX = "tripgraph"

DURATION_BUCKETS_MS = [50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000]

LabelKey = Tuple[Tuple[str, str], ...]


def _label_key(labels: Optional[Dict[str, str]]) -> LabelKey:
    return tuple(sorted((k, str(v)) for k, v in (labels or {}).items()))


def _sanitize_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", " ")


def _format_labels(labels: LabelKey, extra: Optional[Tuple[str, str]] = None) -> str:
    items = list(labels) + ([extra] if extra else [])
    if not items:
        return ""
    return "{" + ",".join(f'{k}="{_sanitize_label_value(v)}"' for k, v in items) + "}"


def _format_value(value: float) -> str:
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.6g}"


@dataclass
class _Histogram:
    buckets: List[float]
    counts: List[int] = field(default_factory=list)
    total: float = 0.0
    count: int = 0

    def __post_init__(self):
        self.counts = [0] * len(self.buckets)

    def observe(self, value: float) -> None:
        self.total += value
        self.count += 1
        for i, upper in enumerate(self.buckets):
            if value <= upper:
                self.counts[i] += 1


class MetricsCollector:
    """Collects workflow, step and tool metrics."""

    def __init__(self, prefix: str = PREFIX):
        self.prefix = prefix
        self._lock = threading.Lock()
        self._started_at = time.time()
        self._help: Dict[str, str] = {}
        self._counters: Dict[str, Dict[LabelKey, float]] = {}
        self._gauges: Dict[str, Dict[LabelKey, float]] = {}
        self._histograms: Dict[str, Dict[LabelKey, _Histogram]] = {}

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def increment(self, name: str, help: str, labels: Optional[Dict[str, str]] = None, value: float = 1.0) -> None:
        with self._lock:
            self._help.setdefault(name, help)
            series = self._counters.setdefault(name, {})
            key = _label_key(labels)
            series[key] = series.get(key, 0.0) + value

    def observe(
        self,
        name: str,
        help: str,
        value: float,
        labels: Optional[Dict[str, str]] = None,
        buckets: Optional[List[float]] = None,
    ) -> None:
        with self._lock:
            self._help.setdefault(name, help)
            series = self._histograms.setdefault(name, {})
            key = _label_key(labels)
            if key not in series:
                series[key] = _Histogram(buckets=list(buckets or DURATION_BUCKETS_MS))
            series[key].observe(value)

    def set_gauge(self, name: str, help: str, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        with self._lock:
            self._help.setdefault(name, help)
            self._gauges.setdefault(name, {})[_label_key(labels)] = value

    def add_gauge(self, name: str, help: str, delta: float, labels: Optional[Dict[str, str]] = None) -> None:
        with self._lock:
            self._help.setdefault(name, help)
            series = self._gauges.setdefault(name, {})
            key = _label_key(labels)
            series[key] = series.get(key, 0.0) + delta

    # ------------------------------------------------------------------
    # Domain recorders
    # ------------------------------------------------------------------

    def workflow_started(self) -> None:
        self.add_gauge(f"{self.prefix}_active_workflows", "Workflows currently running", 1)

    def record_workflow(self, outcome: str, duration_ms: float, retry_count: int, step_count: int) -> None:
        self.add_gauge(f"{self.prefix}_active_workflows", "Workflows currently running", -1)
        self.increment(
            f"{self.prefix}_workflow_executions_total",
            "Total number of workflow executions",
            {"outcome": outcome},
        )
        self.observe(
            f"{self.prefix}_workflow_duration_milliseconds",
            "Workflow execution duration in milliseconds",
            duration_ms,
        )
        self.observe(
            f"{self.prefix}_workflow_steps_count",
            "Number of step executions per workflow",
            step_count,
            buckets=[3, 5, 7, 10, 15, 20],
        )
        if retry_count > 0:
            self.increment(
                f"{self.prefix}_workflow_retries_total",
                "Total number of budget retries",
                value=retry_count,
            )

    def record_step(self, agent: str, status: str, duration_ms: float) -> None:
        self.increment(
            f"{self.prefix}_step_executions_total",
            "Total number of step executions",
            {"agent": agent, "status": status},
        )
        self.observe(
            f"{self.prefix}_step_duration_milliseconds",
            "Step execution duration in milliseconds",
            duration_ms,
            {"agent": agent},
        )

    def record_tool_call(self, tool: str, status: str, duration_ms: float) -> None:
        self.increment(
            f"{self.prefix}_tool_calls_total",
            "Total number of provider/tool calls",
            {"tool": tool, "status": status},
        )
        self.observe(
            f"{self.prefix}_tool_call_duration_milliseconds",
            "Provider/tool call duration in milliseconds",
            duration_ms,
            {"tool": tool},
        )

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def counter_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        with self._lock:
            return self._counters.get(name, {}).get(_label_key(labels), 0.0)

    def gauge_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        with self._lock:
            return self._gauges.get(name, {}).get(_label_key(labels), 0.0)

    def export_prometheus(self) -> str:
        """Render all series in the Prometheus text exposition format."""
        uptime_name = f"{self.prefix}_uptime_seconds"
        lines: List[str] = [
            f"# HELP {uptime_name} Process uptime in seconds",
            f"# TYPE {uptime_name} gauge",
            f"{uptime_name} {_format_value(round(time.time() - self._started_at, 3))}",
        ]
        with self._lock:
            for name, series in sorted(self._counters.items()):
                lines.append(f"# HELP {name} {self._help.get(name, '')}")
                lines.append(f"# TYPE {name} counter")
                for labels, value in sorted(series.items()):
                    lines.append(f"{name}{_format_labels(labels)} {_format_value(value)}")

            for name, series in sorted(self._gauges.items()):
                lines.append(f"# HELP {name} {self._help.get(name, '')}")
                lines.append(f"# TYPE {name} gauge")
                for labels, value in sorted(series.items()):
                    lines.append(f"{name}{_format_labels(labels)} {_format_value(value)}")

            for name, series in sorted(self._histograms.items()):
                lines.append(f"# HELP {name} {self._help.get(name, '')}")
                lines.append(f"# TYPE {name} histogram")
                for labels, hist in sorted(series.items(), key=lambda item: item[0]):
                    for upper, count in zip(hist.buckets, hist.counts):
                        lines.append(
                            f"{name}_bucket{_format_labels(labels, ('le', _format_value(upper)))} {count}"
                        )
                    lines.append(f"{name}_bucket{_format_labels(labels, ('le', '+Inf'))} {hist.count}")
                    lines.append(f"{name}_sum{_format_labels(labels)} {_format_value(hist.total)}")
                    lines.append(f"{name}_count{_format_labels(labels)} {hist.count}")
        return "\n".join(lines) + "\n"

    def summary(self) -> Dict[str, object]:
        """Compact JSON view of the counters."""
        with self._lock:
            counters = {
                name: {",".join(f"{k}={v}" for k, v in labels) or "_": value for labels, value in series.items()}
                for name, series in self._counters.items()
            }
            gauges = {
                name: {",".join(f"{k}={v}" for k, v in labels) or "_": value for labels, value in series.items()}
                for name, series in self._gauges.items()
            }
        return {"uptime_seconds": round(time.time() - self._started_at, 3), "counters": counters, "gauges": gauges}

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()


_default_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Process-wide collector shared by the HTTP app."""
    global _default_collector
    if _default_collector is None:
        _default_collector = MetricsCollector()
    return _default_collector


def reset_metrics_collector() -> None:
    global _default_collector
    _default_collector = None
