"""
Tests for the checkpoint backends and thread persistence.
"""

import asyncio
import math
import sqlite3

import pytest
from langgraph.checkpoint.memory import MemorySaver
from langgraph.checkpoint.sqlite.aio import AsyncSqliteSaver

from tripgraph.graph.checkpoint import (
    InMemoryCheckpointStore,
    SqliteCheckpointStore,
    create_checkpoint_store,
)
from tripgraph.graph.config import get_config
from tripgraph.graph.runner import TripPlanningWorkflow
from tripgraph.shared.exceptions import CheckpointError
from tripgraph.tests.fakes import make_request


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return SqliteCheckpointStore(str(tmp_path / "checkpoints.db"))
    return InMemoryCheckpointStore()


def _workflow(store, max_retries=1):
    return TripPlanningWorkflow(config=get_config(max_retries=max_retries), store=store)


# ============================================================================
# Backends
# ============================================================================


class TestStoreSavers:
    def test_memory_store_keeps_one_saver(self):
        store = InMemoryCheckpointStore()

        async def open_twice():
            async with store.open() as first:
                pass
            async with store.open() as second:
                pass
            return first, second

        first, second = asyncio.run(open_twice())
        assert isinstance(first, MemorySaver)
        assert first is second

    def test_sqlite_store_opens_async_saver(self, tmp_path):
        store = SqliteCheckpointStore(str(tmp_path / "checkpoints.db"))

        async def open_saver():
            async with store.open() as saver:
                return saver

        assert isinstance(asyncio.run(open_saver()), AsyncSqliteSaver)

    def test_sqlite_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "checkpoints.db"
        SqliteCheckpointStore(str(path))
        assert path.parent.is_dir()

    def test_sqlite_errors_become_checkpoint_errors(self, tmp_path):
        store = SqliteCheckpointStore(str(tmp_path / "checkpoints.db"))
        error = store.as_checkpoint_error("t1", sqlite3.OperationalError("database is locked"))
        assert isinstance(error, CheckpointError)
        assert error.thread_id == "t1"
        assert "database is locked" in str(error)
        assert store.as_checkpoint_error("t1", ValueError("bad draft")) is None

    def test_checkpoint_errors_pass_through(self):
        error = CheckpointError("t1", "disk full")
        assert InMemoryCheckpointStore().as_checkpoint_error("t1", error) is error
        assert InMemoryCheckpointStore().as_checkpoint_error("t1", RuntimeError("x")) is None

    def test_unopenable_database(self, tmp_path):
        # a directory cannot be opened as a database file
        workflow = _workflow(SqliteCheckpointStore(str(tmp_path)))
        with pytest.raises(CheckpointError) as exc_info:
            asyncio.run(workflow.load_state("t1"))
        assert exc_info.value.thread_id == "t1"


class TestFactory:
    def test_memory_backend(self):
        assert isinstance(create_checkpoint_store("memory"), InMemoryCheckpointStore)

    def test_sqlite_backend(self, tmp_path):
        store = create_checkpoint_store("sqlite", str(tmp_path / "c.db"))
        assert isinstance(store, SqliteCheckpointStore)

    def test_sqlite_requires_path(self):
        with pytest.raises(ValueError):
            create_checkpoint_store("sqlite", None)


# ============================================================================
# Threads
# ============================================================================


class TestThreads:
    def test_run_then_load(self, store):
        workflow = _workflow(store)
        state = asyncio.run(workflow.run(make_request(), thread_id="t1"))
        loaded = asyncio.run(workflow.load_state("t1"))
        assert loaded["thread_id"] == "t1"
        assert loaded["user_input"]["destination"] == "Hangzhou"
        assert loaded["final_itinerary"] == state["final_itinerary"]

    def test_unknown_thread_loads_none(self, store):
        assert asyncio.run(_workflow(store).load_state("nobody")) is None

    def test_threads_are_isolated(self, store):
        workflow = _workflow(store)
        asyncio.run(workflow.run(make_request(budget=5000.0), thread_id="a"))
        asyncio.run(workflow.run(make_request(budget=100.0), thread_id="b"))
        assert asyncio.run(workflow.load_state("a"))["retry_count"] == 0
        assert asyncio.run(workflow.load_state("b"))["retry_count"] == 1

    def test_non_finite_utilization_survives(self, store):
        workflow = _workflow(store)
        asyncio.run(workflow.run(make_request(budget=0.0), thread_id="free"))
        loaded = asyncio.run(workflow.load_state("free"))
        assert math.isinf(loaded["budget_result"]["budget_utilization"])

    def test_loaded_state_is_a_copy(self, store):
        workflow = _workflow(store)
        asyncio.run(workflow.run(make_request(), thread_id="t1"))
        loaded = asyncio.run(workflow.load_state("t1"))
        loaded["meta"]["errors"].append({"agent": "weather"})
        assert asyncio.run(workflow.load_state("t1"))["meta"]["errors"] == []


class TestDurableRuns:
    def test_run_visible_to_a_new_workflow(self, tmp_path):
        path = str(tmp_path / "runs.db")

        first = _workflow(SqliteCheckpointStore(path), max_retries=3)
        state = asyncio.run(first.run(make_request(), thread_id="durable"))

        second = _workflow(SqliteCheckpointStore(path), max_retries=3)
        loaded = asyncio.run(second.load_state("durable"))
        assert loaded["final_itinerary"] == state["final_itinerary"]

        resumed = asyncio.run(second.resume("durable"))
        assert resumed["final_itinerary"] == state["final_itinerary"]
        assert len(resumed["meta"]["agent_executions"]) == len(state["meta"]["agent_executions"])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
