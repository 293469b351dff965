"""
Tests for the execution tracer, the metrics collector and their use at
the step boundary.
"""

import asyncio
import json

import pytest

from tripgraph.graph.steps import create_step_node
from tripgraph.observability.metrics import MetricsCollector
from tripgraph.observability.tracer import InMemoryTracer, NullTracer, safe_call
from tripgraph.providers.mock_data import create_mock_providers
from tripgraph.tests.fakes import make_state


# ============================================================================
# Tracer
# ============================================================================


class TestInMemoryTracer:
    def test_trace_with_spans(self):
        tracer = InMemoryTracer()
        trace_id = tracer.start_trace("trip_planner", {"destination": "Hangzhou"}, {"thread_id": "t1"})
        span_id = tracer.start_span(trace_id, "weather", "node", {"attempt": 0})
        tracer.end_span(trace_id, span_id, {"status": "success"})
        tracer.end_trace(trace_id, {"outcome": "within_budget"})

        trace = tracer.get_trace(trace_id)
        assert trace["status"] == "completed"
        assert trace["metadata"] == {"thread_id": "t1"}
        assert trace["duration_ms"] >= 0
        assert trace["output"] == {"outcome": "within_budget"}
        assert len(trace["spans"]) == 1
        assert trace["spans"][0]["name"] == "weather"
        assert trace["spans"][0]["status"] == "completed"

    def test_errors_mark_status(self):
        tracer = InMemoryTracer()
        trace_id = tracer.start_trace("trip_planner")
        span_id = tracer.start_span(trace_id, "dining")
        tracer.end_span(trace_id, span_id, error="ProviderError: poi down")
        tracer.end_trace(trace_id, error="boom")

        trace = tracer.get_trace(trace_id)
        assert trace["status"] == "error"
        assert trace["error"] == "boom"
        assert trace["spans"][0]["status"] == "error"

    def test_unknown_ids(self):
        tracer = InMemoryTracer()
        assert tracer.get_trace("missing") is None
        with pytest.raises(KeyError):
            tracer.start_span("missing", "weather")
        trace_id = tracer.start_trace("trip_planner")
        with pytest.raises(KeyError):
            tracer.end_span(trace_id, "missing")
        tracer.end_trace("missing")

    def test_oldest_traces_evicted(self):
        tracer = InMemoryTracer(max_traces=2)
        first = tracer.start_trace("a")
        tracer.start_trace("b")
        tracer.start_trace("c")
        assert tracer.get_trace(first) is None
        assert [t["workflow_name"] for t in tracer.get_traces()] == ["b", "c"]

    def test_returned_traces_are_copies(self):
        tracer = InMemoryTracer()
        trace_id = tracer.start_trace("trip_planner")
        tracer.get_trace(trace_id)["spans"].append({"name": "fake"})
        assert tracer.get_trace(trace_id)["spans"] == []

    def test_export(self):
        tracer = InMemoryTracer()
        trace_id = tracer.start_trace("trip_planner")
        span_id = tracer.start_span(trace_id, "weather")
        tracer.end_span(trace_id, span_id)
        tracer.end_trace(trace_id)

        assert json.loads(tracer.export("json"))[0]["id"] == trace_id
        text = tracer.export("text")
        assert f"Trace {trace_id}" in text
        assert "weather [node] completed" in text

    def test_clear(self):
        tracer = InMemoryTracer()
        tracer.start_trace("trip_planner")
        tracer.clear()
        assert tracer.get_traces() == []


class TestNullTracer:
    def test_records_nothing(self):
        tracer = NullTracer()
        trace_id = tracer.start_trace("trip_planner")
        assert trace_id == ""
        tracer.end_span(trace_id, tracer.start_span(trace_id, "weather"))
        tracer.end_trace(trace_id)
        assert tracer.get_traces() == []
        assert tracer.get_trace(trace_id) is None
        assert tracer.export("json") == "[]"


class TestSafeCall:
    def test_returns_result(self):
        assert safe_call(lambda a, b: a + b, 1, 2) == 3

    def test_swallows_errors(self):
        def broken():
            raise RuntimeError("exporter down")

        assert safe_call(broken) is None


# ============================================================================
# Metrics
# ============================================================================


class TestMetricsCollector:
    def test_workflow_recording(self):
        metrics = MetricsCollector()
        metrics.workflow_started()
        assert metrics.gauge_value("tripgraph_active_workflows") == 1
        metrics.record_workflow("retry_ceiling_reached", 1200.0, retry_count=2, step_count=13)

        assert metrics.gauge_value("tripgraph_active_workflows") == 0
        assert metrics.counter_value(
            "tripgraph_workflow_executions_total", {"outcome": "retry_ceiling_reached"}
        ) == 1
        assert metrics.counter_value("tripgraph_workflow_retries_total") == 2

    def test_no_retry_counter_without_retries(self):
        metrics = MetricsCollector()
        metrics.record_workflow("within_budget", 10.0, retry_count=0, step_count=7)
        assert "tripgraph_workflow_retries_total" not in metrics.export_prometheus()

    def test_prometheus_text(self):
        metrics = MetricsCollector()
        metrics.record_step("dining", "success", 120.0)
        metrics.record_tool_call("poi_nearby", "error", 30.0)
        text = metrics.export_prometheus()

        assert "# TYPE tripgraph_uptime_seconds gauge" in text
        assert "# HELP tripgraph_step_executions_total Total number of step executions" in text
        assert "# TYPE tripgraph_step_executions_total counter" in text
        assert 'tripgraph_step_executions_total{agent="dining",status="success"} 1' in text
        assert 'tripgraph_tool_calls_total{status="error",tool="poi_nearby"} 1' in text
        assert "# TYPE tripgraph_step_duration_milliseconds histogram" in text
        assert 'tripgraph_step_duration_milliseconds_bucket{agent="dining",le="100"} 0' in text
        assert 'tripgraph_step_duration_milliseconds_bucket{agent="dining",le="250"} 1' in text
        assert 'tripgraph_step_duration_milliseconds_bucket{agent="dining",le="+Inf"} 1' in text
        assert 'tripgraph_step_duration_milliseconds_sum{agent="dining"} 120' in text
        assert 'tripgraph_step_duration_milliseconds_count{agent="dining"} 1' in text
        assert text.endswith("\n")

    def test_label_values_escaped(self):
        metrics = MetricsCollector()
        metrics.increment("tripgraph_test_total", "Test", {"reason": 'say "hi"'})
        assert 'reason="say \\"hi\\""' in metrics.export_prometheus()

    def test_summary_and_reset(self):
        metrics = MetricsCollector()
        metrics.record_step("weather", "success", 5.0)
        summary = metrics.summary()
        assert summary["counters"]["tripgraph_step_executions_total"] == {"agent=weather,status=success": 1.0}
        assert summary["uptime_seconds"] >= 0

        metrics.reset()
        assert metrics.summary()["counters"] == {}
        assert metrics.counter_value("tripgraph_step_executions_total", {"agent": "weather", "status": "success"}) == 0


# ============================================================================
# Step boundary
# ============================================================================


class TestStepBoundaryReporting:
    def _run(self, step, neutral, tracer, metrics):
        node = create_step_node("weather", step, neutral, create_mock_providers(), tracer=tracer, metrics=metrics)
        trace_id = tracer.start_trace("trip_planner")
        config = {"configurable": {"thread_id": "t1", "trace_id": trace_id}}
        update = asyncio.run(node(make_state(thread_id="t1"), config))
        return update, tracer.get_trace(trace_id)

    def test_success_span_and_step_metric(self):
        async def step(state, ctx):
            return {"weather": {"source": "rules"}}

        tracer, metrics = InMemoryTracer(), MetricsCollector()
        update, trace = self._run(step, lambda state: {"weather": None}, tracer, metrics)

        assert update["weather"] == {"source": "rules"}
        assert update["meta"]["agent_executions"][0]["status"] == "success"
        assert trace["spans"][0]["name"] == "weather"
        assert trace["spans"][0]["input"] == {"attempt": 0}
        assert trace["spans"][0]["status"] == "completed"
        assert metrics.counter_value(
            "tripgraph_step_executions_total", {"agent": "weather", "status": "success"}
        ) == 1

    def test_failure_span_and_neutral_update(self):
        async def step(state, ctx):
            raise RuntimeError("forecast unavailable")

        tracer, metrics = InMemoryTracer(), MetricsCollector()
        update, trace = self._run(step, lambda state: {"weather": None}, tracer, metrics)

        assert update["weather"] is None
        assert update["meta"]["errors"][0]["agent"] == "weather"
        assert "forecast unavailable" in update["meta"]["errors"][0]["error"]
        assert trace["spans"][0]["status"] == "error"
        assert metrics.counter_value(
            "tripgraph_step_executions_total", {"agent": "weather", "status": "failed"}
        ) == 1

    def test_broken_tracer_does_not_fail_the_step(self):
        class ExplodingTracer(InMemoryTracer):
            def start_span(self, *args, **kwargs):
                raise RuntimeError("tracer down")

        async def step(state, ctx):
            return {"weather": {"source": "rules"}}

        update, trace = self._run(step, lambda state: {"weather": None}, ExplodingTracer(), None)
        assert update["weather"] == {"source": "rules"}
        assert trace["spans"] == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
