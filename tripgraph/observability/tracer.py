"""
Execution tracer.

Records one trace per workflow run and one span per step. The tracer is
injected into the graph builder and the runner; a process-wide instance
exists only for the HTTP app (get_default_tracer). Tracing must never
affect a run, so callers go through `safe_call`.
"""

import json
import logging
import threading
import time
import uuid
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, Protocol


logger = logging.getLogger(__name__)

STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


class ExecutionTracer(Protocol):
    def start_trace(self, workflow_name: str, input: Any = None, metadata: Optional[Dict[str, Any]] = None) -> str:
        ...

    def end_trace(self, trace_id: str, output: Any = None, error: Optional[str] = None) -> None:
        ...

    def start_span(
        self,
        trace_id: str,
        name: str,
        span_type: str = "node",
        input: Any = None,
        parent_id: Optional[str] = None,
    ) -> str:
        ...

    def end_span(self, trace_id: str, span_id: str, output: Any = None, error: Optional[str] = None) -> None:
        ...

    def get_trace(self, trace_id: str) -> Optional[Dict[str, Any]]:
        ...

    def get_traces(self) -> List[Dict[str, Any]]:
        ...

    def clear(self) -> None:
        ...

    def export(self, format: str = "json") -> str:
        ...


class InMemoryTracer:
    """Keeps the most recent traces in memory."""

    def __init__(self, max_traces: int = 100):
        self.max_traces = max_traces
        self._traces: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def start_trace(self, workflow_name: str, input: Any = None, metadata: Optional[Dict[str, Any]] = None) -> str:
        trace_id = _new_id()
        with self._lock:
            self._traces[trace_id] = {
                "id": trace_id,
                "workflow_name": workflow_name,
                "start_time": time.time(),
                "end_time": None,
                "duration_ms": None,
                "status": STATUS_RUNNING,
                "input": input,
                "output": None,
                "error": None,
                "metadata": metadata or {},
                "spans": [],
            }
            while len(self._traces) > self.max_traces:
                self._traces.popitem(last=False)
        return trace_id

    def end_trace(self, trace_id: str, output: Any = None, error: Optional[str] = None) -> None:
        with self._lock:
            trace = self._traces.get(trace_id)
            if trace is None:
                logger.warning(f"[tracer] end_trace for unknown trace {trace_id}")
                return
            trace["end_time"] = time.time()
            trace["duration_ms"] = round((trace["end_time"] - trace["start_time"]) * 1000, 2)
            trace["status"] = STATUS_ERROR if error else STATUS_COMPLETED
            trace["output"] = output
            trace["error"] = error

    def start_span(
        self,
        trace_id: str,
        name: str,
        span_type: str = "node",
        input: Any = None,
        parent_id: Optional[str] = None,
    ) -> str:
        span_id = _new_id()
        with self._lock:
            trace = self._traces.get(trace_id)
            if trace is None:
                raise KeyError(f"Unknown trace {trace_id}")
            trace["spans"].append({
                "id": span_id,
                "parent_id": parent_id,
                "trace_id": trace_id,
                "name": name,
                "type": span_type,
                "start_time": time.time(),
                "end_time": None,
                "duration_ms": None,
                "status": STATUS_RUNNING,
                "input": input,
                "output": None,
                "error": None,
            })
        return span_id

    def end_span(self, trace_id: str, span_id: str, output: Any = None, error: Optional[str] = None) -> None:
        with self._lock:
            trace = self._traces.get(trace_id)
            if trace is None:
                raise KeyError(f"Unknown trace {trace_id}")
            for span in trace["spans"]:
                if span["id"] == span_id:
                    span["end_time"] = time.time()
                    span["duration_ms"] = round((span["end_time"] - span["start_time"]) * 1000, 2)
                    span["status"] = STATUS_ERROR if error else STATUS_COMPLETED
                    span["output"] = output
                    span["error"] = error
                    return
        raise KeyError(f"Unknown span {span_id} in trace {trace_id}")

    def get_trace(self, trace_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            trace = self._traces.get(trace_id)
            return json.loads(json.dumps(trace, default=str)) if trace else None

    def get_traces(self) -> List[Dict[str, Any]]:
        with self._lock:
            return json.loads(json.dumps(list(self._traces.values()), default=str))

    def clear(self) -> None:
        with self._lock:
            self._traces.clear()

    def export(self, format: str = "json") -> str:
        """Serialize all traces as JSON or as a short human-readable summary."""
        traces = self.get_traces()
        if format == "json":
            return json.dumps(traces, indent=2, ensure_ascii=False)
        lines = []
        for trace in traces:
            lines.append(
                f"Trace {trace['id']} | {trace['workflow_name']} | {trace['status']} | "
                f"{trace['duration_ms']}ms | {len(trace['spans'])} spans"
            )
            for span in trace["spans"]:
                lines.append(f"  - {span['name']} [{span['type']}] {span['status']} {span['duration_ms']}ms")
        return "\n".join(lines)


class NullTracer:
    """Tracer that records nothing."""

    def start_trace(self, workflow_name: str, input: Any = None, metadata: Optional[Dict[str, Any]] = None) -> str:
        return ""

    def end_trace(self, trace_id: str, output: Any = None, error: Optional[str] = None) -> None:
        return None

    def start_span(
        self,
        trace_id: str,
        name: str,
        span_type: str = "node",
        input: Any = None,
        parent_id: Optional[str] = None,
    ) -> str:
        return ""

    def end_span(self, trace_id: str, span_id: str, output: Any = None, error: Optional[str] = None) -> None:
        return None

    def get_trace(self, trace_id: str) -> Optional[Dict[str, Any]]:
        return None

    def get_traces(self) -> List[Dict[str, Any]]:
        return []

    def clear(self) -> None:
        return None

    def export(self, format: str = "json") -> str:
        return "[]" if format == "json" else ""


def safe_call(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Invoke a tracer/metrics method; failures are logged and never propagate."""
    try:
        return func(*args, **kwargs)
    except Exception as e:
        logger.warning(f"[observability] {getattr(func, '__name__', func)} failed: {e}")
        return None


_default_tracer: Optional[InMemoryTracer] = None


def get_default_tracer() -> InMemoryTracer:
    """Process-wide tracer shared by the HTTP app."""
    global _default_tracer
    if _default_tracer is None:
        _default_tracer = InMemoryTracer()
    return _default_tracer


def reset_default_tracer() -> None:
    global _default_tracer
    _default_tracer = None
