"""
Workflow runner.

Owns the graph builder plus its collaborators and drives runs through it:
opens the checkpointer, starts the trace, streams supersteps and records
run metrics. LangGraph saves a checkpoint after every superstep, keyed by
thread id, and continues an unfinished thread from its last checkpoint.
A failure outside the step boundary (recursion limit, critic error) still
produces a best-effort itinerary; only checkpoint failures reach the caller.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from tripgraph.finalize.assembly import OUTCOME_INCOMPLETE, build_final_itinerary, minimal_itinerary
from tripgraph.graph.build import WORKFLOW_NODES, build_trip_planning_graph
from tripgraph.graph.checkpoint import CheckpointStore, InMemoryCheckpointStore
from tripgraph.graph.config import DEFAULT_CONFIG, WorkflowConfig
from tripgraph.graph.stages import Stage
from tripgraph.graph.state import TripState, create_initial_state, merge_meta
from tripgraph.observability.metrics import MetricsCollector
from tripgraph.observability.tracer import ExecutionTracer, NullTracer, safe_call
from tripgraph.providers.interfaces import Providers
from tripgraph.providers.mock_data import create_mock_providers
from tripgraph.shared.contracts.execution_meta import AgentError
from tripgraph.shared.contracts.trip_request import TripRequest
from tripgraph.shared.exceptions import CheckpointError, ThreadNotFoundError
from tripgraph.shared.llm.client import LLMClient
from tripgraph.shared.logging.config import log_state_transition


logger = logging.getLogger(__name__)

WORKFLOW_NAME = "trip_planner"


class TripPlanningWorkflow:
    """
    Entry point for planning runs.

    Args:
        config: Workflow configuration
        providers: POI, routing and weather collaborators (offline mocks by default)
        llm: Optional LLM client
        tracer: Execution tracer (records nothing by default)
        metrics: Optional metrics collector
        store: Checkpoint backend (in-memory MemorySaver by default)
    """

    def __init__(
        self,
        config: WorkflowConfig = DEFAULT_CONFIG,
        providers: Optional[Providers] = None,
        llm: Optional[LLMClient] = None,
        tracer: Optional[ExecutionTracer] = None,
        metrics: Optional[MetricsCollector] = None,
        store: Optional[CheckpointStore] = None,
    ):
        self.config = config
        self.providers = providers or create_mock_providers()
        self.llm = llm
        self.tracer = tracer or NullTracer()
        self.metrics = metrics
        self.store = store or InMemoryCheckpointStore()
        self._node_ids = {node["id"] for node in WORKFLOW_NODES}
        self.builder = build_trip_planning_graph(
            self.providers,
            llm=llm,
            config=config,
            tracer=self.tracer,
            metrics=metrics,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, request: TripRequest, thread_id: Optional[str] = None) -> TripState:
        """
        Plan a trip and return the final state.

        When `thread_id` already has a checkpoint, the stored run is resumed
        and `request` is ignored.
        """
        return await self._drain(self.stream(request, thread_id))

    async def resume(self, thread_id: str) -> TripState:
        """Continue a checkpointed run from its last completed superstep."""
        return await self._drain(self._execute(thread_id, request=None))

    async def stream(
        self, request: TripRequest, thread_id: Optional[str] = None
    ) -> AsyncIterator[Dict[str, Any]]:
        """Run the workflow, yielding one progress event per node update."""
        thread_id = thread_id or str(uuid.uuid4())
        async for event in self._execute(thread_id, request=request):
            yield event

    async def load_state(self, thread_id: str) -> Optional[TripState]:
        """Latest checkpointed state for a thread, or None."""
        async with self._session(thread_id) as graph:
            snapshot = await graph.aget_state(self._thread_config(thread_id))
        return dict(snapshot.values) if snapshot.values else None

    async def save_state(
        self, thread_id: str, values: Dict[str, Any], as_node: Optional[str] = None
    ) -> None:
        """
        Write `values` into a thread's latest checkpoint.

        Values go through the state reducers as if `as_node` had returned
        them, so the thread continues from that node's outgoing edges.
        """
        async with self._session(thread_id) as graph:
            await graph.aupdate_state(self._thread_config(thread_id), values, as_node=as_node)

    def workflow_nodes(self) -> List[Dict[str, str]]:
        return [dict(node) for node in WORKFLOW_NODES]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @staticmethod
    def _thread_config(thread_id: str) -> Dict[str, Any]:
        return {"configurable": {"thread_id": thread_id}}

    @asynccontextmanager
    async def _session(self, thread_id: str):
        """Compiled graph bound to an open checkpointer; backend failures become CheckpointError."""
        try:
            async with self.store.open() as saver:
                yield self.builder.compile(checkpointer=saver)
        except Exception as e:
            checkpoint_error = self.store.as_checkpoint_error(thread_id, e)
            if checkpoint_error is None or checkpoint_error is e:
                raise
            raise checkpoint_error from e

    async def _drain(self, events: AsyncIterator[Dict[str, Any]]) -> TripState:
        final_state: Optional[TripState] = None
        async for event in events:
            if event["node"] == "__end__":
                final_state = event["state"]
        return final_state

    async def _execute(
        self, thread_id: str, request: Optional[TripRequest]
    ) -> AsyncIterator[Dict[str, Any]]:
        """
        Drive the graph for one run.

        A thread with a checkpoint continues from it (`astream(None, ...)`);
        otherwise `request` starts a new run. Yields `{node, update, timestamp}`
        for every node update and a final `{node: "__end__", state, timestamp}`
        event carrying the final state.
        """
        _log = f"[run={thread_id}] [graph={WORKFLOW_NAME}] "

        async with self._session(thread_id) as graph:
            snapshot = await graph.aget_state(self._thread_config(thread_id))
            if snapshot.values:
                state: TripState = dict(snapshot.values)
                # A recovered run holds an itinerary even if a failed node is still pending
                if not snapshot.next or state.get("final_itinerary") is not None:
                    logger.info(f"{_log}Thread already finished, returning stored state")
                    yield {"node": "__end__", "state": state, "timestamp": time.time()}
                    return
                logger.info(f"{_log}Checkpoint found, resuming at {list(snapshot.next)}")
                graph_input, resumed = None, True
            elif request is None:
                raise ThreadNotFoundError(thread_id)
            else:
                state = create_initial_state(request, thread_id)
                graph_input, resumed = state, False

            async for event in self._stream_graph(graph, graph_input, state, thread_id, resumed):
                yield event

    async def _stream_graph(
        self,
        graph: Any,
        graph_input: Optional[TripState],
        state: TripState,
        thread_id: str,
        resumed: bool,
    ) -> AsyncIterator[Dict[str, Any]]:
        _log = f"[run={thread_id}] [graph={WORKFLOW_NAME}] "
        started = time.perf_counter()
        request = state.get("user_input") or {}

        trace_id = safe_call(
            self.tracer.start_trace,
            WORKFLOW_NAME,
            {"destination": request.get("destination"), "budget": request.get("budget")},
            {"thread_id": thread_id, "resumed": resumed},
        ) or None
        if self.metrics is not None:
            safe_call(self.metrics.workflow_started)

        run_config = {
            "configurable": {"thread_id": thread_id, "trace_id": trace_id},
            "recursion_limit": self.config.effective_recursion_limit,
        }
        log_state_transition(
            "run_resumed" if resumed else "run_started", state, {"thread_id": thread_id, "trace_id": trace_id}, logger
        )

        latest: TripState = state
        try:
            async for mode, chunk in graph.astream(graph_input, run_config, stream_mode=["updates", "values"]):
                if mode == "values":
                    latest = chunk
                    continue
                for node, update in chunk.items():
                    if node not in self._node_ids:
                        continue
                    yield {"node": node, "update": update, "timestamp": time.time()}
        except Exception as e:
            checkpoint_error = self.store.as_checkpoint_error(thread_id, e)
            if checkpoint_error is not None:
                logger.error(f"{_log}Checkpoint failed, aborting run: {checkpoint_error}")
                self._finish(trace_id, latest, started, error=str(checkpoint_error), outcome="checkpoint_error")
                if checkpoint_error is e:
                    raise
                raise checkpoint_error from e

            logger.exception(f"{_log}Workflow failed outside the step boundary: {e}")
            latest, recovery = self._recover(latest, e)
            try:
                await graph.aupdate_state(self._thread_config(thread_id), recovery, as_node=Stage.FINALIZE.value)
            except Exception as save_error:
                checkpoint_error = self.store.as_checkpoint_error(thread_id, save_error)
                if checkpoint_error is None:
                    raise
                self._finish(trace_id, latest, started, error=str(checkpoint_error), outcome="checkpoint_error")
                if checkpoint_error is save_error:
                    raise
                raise checkpoint_error from save_error

        outcome = (latest.get("meta") or {}).get("outcome") or OUTCOME_INCOMPLETE
        self._finish(trace_id, latest, started, outcome=outcome)
        log_state_transition(
            "run_finished", latest, {"thread_id": thread_id, "trace_id": trace_id, "outcome": outcome}, logger
        )
        yield {"node": "__end__", "state": latest, "timestamp": time.time()}

    def _recover(self, state: TripState, error: Exception):
        """
        Best-effort finalization after the graph itself failed.

        Returns the recovered state and the update that produces it from
        `state` through the reducers.
        """
        message = f"{type(error).__name__}: {error}"
        record = AgentError(agent="workflow", error=message, timestamp=time.time()).model_dump()
        update: Dict[str, Any] = {
            "meta": {"errors": [record], "outcome": OUTCOME_INCOMPLETE, "finished_at": time.time()},
        }

        if state.get("final_itinerary") is None:
            try:
                itinerary = build_final_itinerary(state, OUTCOME_INCOMPLETE)
            except Exception as build_error:
                logger.warning(f"[run={state.get('thread_id')}] Full assembly failed, using minimal plan: {build_error}")
                itinerary = minimal_itinerary(state, OUTCOME_INCOMPLETE)
            update["final_itinerary"] = itinerary.model_dump()

        recovered: TripState = dict(state)
        recovered.update({k: v for k, v in update.items() if k != "meta"})
        recovered["meta"] = merge_meta(state.get("meta"), update["meta"])
        return recovered, update

    def _finish(
        self,
        trace_id: Optional[str],
        state: TripState,
        started: float,
        outcome: str,
        error: Optional[str] = None,
    ) -> None:
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        meta = state.get("meta") or {}
        if trace_id:
            final = state.get("final_itinerary") or {}
            safe_call(
                self.tracer.end_trace,
                trace_id,
                {
                    "outcome": outcome,
                    "retry_count": state.get("retry_count"),
                    "total_cost": (final.get("estimated_cost") or {}).get("total"),
                    "errors": len(meta.get("errors") or []),
                },
                error,
            )
        if self.metrics is not None:
            safe_call(
                self.metrics.record_workflow,
                outcome,
                duration_ms,
                int(state.get("retry_count") or 0),
                len(meta.get("agent_executions") or []),
            )
