"""
Tests for the HTTP API (trips and observability routers).
"""

import pytest
from fastapi.testclient import TestClient

from tripgraph.graph import trips_api
from tripgraph.graph.runner import TripPlanningWorkflow
from tripgraph.main import app
from tripgraph.tests.fakes import failing_store


PLAN_PAYLOAD = {
    "destination": "Hangzhou",
    "start_date": "2025-06-01",
    "end_date": "2025-06-03",
    "budget": 5000,
    "travelers": 1,
}


@pytest.fixture
def client():
    return TestClient(app)


# ============================================================================
# Service endpoints
# ============================================================================


class TestService:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "TripGraph"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


# ============================================================================
# Trips
# ============================================================================


class TestPlanTrip:
    def test_plan_within_budget(self, client):
        response = client.post("/api/trips/plan", json={**PLAN_PAYLOAD, "thread_id": "api-happy"})
        assert response.status_code == 200
        body = response.json()
        assert body["thread_id"] == "api-happy"
        assert body["outcome"] == "within_budget"
        assert body["retry_count"] == 0
        assert len(body["final_itinerary"]["days"]) == 3
        assert body["budget_result"]["is_within_budget"] is True
        assert body["errors"] == []

    def test_generates_thread_id(self, client):
        body = client.post("/api/trips/plan", json=PLAN_PAYLOAD).json()
        assert body["thread_id"]
        assert client.get(f"/api/trips/{body['thread_id']}").status_code == 200

    def test_zero_budget_utilization_is_null(self, client):
        response = client.post("/api/trips/plan", json={**PLAN_PAYLOAD, "budget": 0})
        assert response.status_code == 200
        body = response.json()
        assert body["budget_result"]["budget_utilization"] is None
        assert body["budget_result"]["is_within_budget"] is False
        assert body["outcome"] == "retry_ceiling_reached"

    def test_end_before_start_rejected(self, client):
        payload = {**PLAN_PAYLOAD, "start_date": "2025-06-03", "end_date": "2025-06-01"}
        assert client.post("/api/trips/plan", json=payload).status_code == 422

    def test_negative_budget_rejected(self, client):
        assert client.post("/api/trips/plan", json={**PLAN_PAYLOAD, "budget": -1}).status_code == 422

    def test_checkpoint_failure_is_503(self, client):
        trips_api.set_workflow(TripPlanningWorkflow(store=failing_store(fail_reads=True)))
        response = client.post("/api/trips/plan", json=PLAN_PAYLOAD)
        assert response.status_code == 503

    def test_checkpoint_write_failure_is_503(self, client):
        trips_api.set_workflow(TripPlanningWorkflow(store=failing_store(fail_after=0)))
        response = client.post("/api/trips/plan", json=PLAN_PAYLOAD)
        assert response.status_code == 503
        assert "disk full" in response.json()["detail"]


class TestTripState:
    def test_state_after_plan(self, client):
        client.post("/api/trips/plan", json={**PLAN_PAYLOAD, "thread_id": "api-state"})
        response = client.get("/api/trips/api-state")
        assert response.status_code == 200
        body = response.json()
        assert body["complete"] is True
        assert body["state"]["thread_id"] == "api-state"
        assert body["state"]["final_itinerary"] is not None

    def test_unknown_thread_is_404(self, client):
        assert client.get("/api/trips/nobody").status_code == 404

    def test_store_failure_is_503(self, client):
        trips_api.set_workflow(TripPlanningWorkflow(store=failing_store(fail_reads=True)))
        assert client.get("/api/trips/anything").status_code == 503


class TestResumeTrip:
    def test_resume_unknown_thread_is_404(self, client):
        assert client.post("/api/trips/nobody/resume").status_code == 404

    def test_resume_finished_thread(self, client):
        first = client.post("/api/trips/plan", json={**PLAN_PAYLOAD, "thread_id": "api-resume"}).json()
        response = client.post("/api/trips/api-resume/resume")
        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == first["outcome"]
        assert body["final_itinerary"] == first["final_itinerary"]

    def test_resume_store_failure_is_503(self, client):
        trips_api.set_workflow(TripPlanningWorkflow(store=failing_store(fail_reads=True)))
        assert client.post("/api/trips/anything/resume").status_code == 503


class TestWorkflowNodes:
    def test_lists_nodes(self, client):
        nodes = client.get("/api/trips/workflow/nodes").json()["nodes"]
        assert len(nodes) == 7
        assert nodes[0]["id"] == "weather"
        assert nodes[-1]["id"] == "finalize"
        assert all(node["description"] for node in nodes)


# ============================================================================
# Observability
# ============================================================================


class TestObservabilityEndpoints:
    def test_traces_recorded_for_runs(self, client):
        client.post("/api/trips/plan", json={**PLAN_PAYLOAD, "thread_id": "api-traced"})
        traces = client.get("/api/observability/traces").json()["traces"]
        assert len(traces) == 1
        assert traces[0]["metadata"]["thread_id"] == "api-traced"

        trace = client.get(f"/api/observability/traces/{traces[0]['id']}").json()
        assert len(trace["spans"]) == 7

    def test_unknown_trace_is_404(self, client):
        assert client.get("/api/observability/traces/missing").status_code == 404

    def test_clear_traces(self, client):
        client.post("/api/trips/plan", json=PLAN_PAYLOAD)
        assert client.delete("/api/observability/traces").json() == {"status": "cleared"}
        assert client.get("/api/observability/traces").json()["traces"] == []

    def test_metrics_text(self, client):
        client.post("/api/trips/plan", json=PLAN_PAYLOAD)
        response = client.get("/api/observability/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'tripgraph_workflow_executions_total{outcome="within_budget"} 1' in response.text
        assert "tripgraph_step_duration_milliseconds_bucket" in response.text

    def test_metrics_summary(self, client):
        client.post("/api/trips/plan", json=PLAN_PAYLOAD)
        summary = client.get("/api/observability/metrics/summary").json()
        assert summary["counters"]["tripgraph_workflow_executions_total"] == {"outcome=within_budget": 1.0}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
