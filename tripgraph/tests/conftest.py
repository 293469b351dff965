import pytest

from tripgraph.graph import trips_api
from tripgraph.observability.metrics import reset_metrics_collector
from tripgraph.observability.tracer import reset_default_tracer


@pytest.fixture(autouse=True)
def offline_environment(monkeypatch):
    """No credentials, no process-wide leftovers between tests."""
    for name in ("OPENAI_API_KEY", "OPENAI_BASE_URL", "AMAP_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TRIPGRAPH_CHECKPOINT_BACKEND", "memory")
    reset_default_tracer()
    reset_metrics_collector()
    trips_api.set_workflow(None)
    yield
    trips_api.set_workflow(None)
