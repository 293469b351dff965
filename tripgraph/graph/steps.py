"""
Step boundary.

Every graph node runs through `create_step_node`, which times the step,
hands it a StepContext, turns unexpected failures into the step's neutral
output plus an entry in meta.errors, and reports to the tracer and
metrics collector. One step failing never stops the workflow.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from langchain_core.runnables import RunnableConfig

from tripgraph.graph.state import TripState
from tripgraph.observability.metrics import MetricsCollector
from tripgraph.observability.tracer import ExecutionTracer, NullTracer, safe_call
from tripgraph.providers.interfaces import Providers, Venue
from tripgraph.shared.contracts.execution_meta import (
    AgentError,
    AgentExecution,
    ExecutionStatus,
    ToolCall,
)
from tripgraph.shared.llm.client import LLMClient


logger = logging.getLogger(__name__)


def _summarize(value: Any) -> str:
    if value is None:
        return "none"
    if isinstance(value, (list, tuple)):
        return f"{len(value)} item(s)"
    text = str(value)
    return text if len(text) <= 120 else text[:117] + "..."


@dataclass
class StepContext:
    """What a step gets besides the state: collaborators and a place to record side facts."""

    agent: str
    thread_id: str
    providers: Providers
    llm: Optional[LLMClient] = None
    metrics: Optional[MetricsCollector] = None
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    skipped: bool = False

    @property
    def log_prefix(self) -> str:
        return f"[run={self.thread_id}] [graph=trip_planner] [node={self.agent}] "

    async def call_tool(self, tool: str, func: Callable[..., Awaitable[Any]], **kwargs: Any) -> Any:
        """Await a provider call and record it in the execution log."""
        started = time.time()
        perf = time.perf_counter()
        status = "success"
        result: Any = None
        try:
            result = await func(**kwargs)
            return result
        except Exception:
            status = "error"
            raise
        finally:
            duration_ms = round((time.perf_counter() - perf) * 1000, 2)
            self.tool_calls.append(
                ToolCall(
                    tool=tool,
                    input={k: v for k, v in kwargs.items() if isinstance(v, (str, int, float, bool, tuple))},
                    output_summary=_summarize(result) if status == "success" else None,
                    duration_ms=duration_ms,
                    timestamp=started,
                    status=status,
                ).model_dump()
            )
            if self.metrics is not None:
                safe_call(self.metrics.record_tool_call, tool, status, duration_ms)

    async def search_venues(
        self,
        category: str,
        keywords: str,
        city: str,
        near: Optional[Tuple[float, float]] = None,
        radius: int = 3000,
        limit: int = 10,
    ) -> List[Venue]:
        """Proximity search around `near` when given, falling back to keyword search in the city."""
        if near is not None:
            venues = await self.call_tool(
                "poi.search_nearby",
                self.providers.poi.search_nearby,
                lat=near[0],
                lng=near[1],
                keywords=keywords,
                category=category,
                radius=radius,
                limit=limit,
            )
            if venues:
                return venues
            logger.info(f"{self.log_prefix}No {category} within {radius}m, falling back to keyword search")
        return await self.call_tool(
            "poi.search_keyword",
            self.providers.poi.search_keyword,
            keywords=keywords,
            city=city,
            category=category,
            limit=limit,
        )

    def record_error(self, message: str) -> None:
        """Record a failure the step recovered from by itself."""
        logger.warning(f"{self.log_prefix}{message}")
        self.errors.append(AgentError(agent=self.agent, error=message, timestamp=time.time()).model_dump())


StepFunc = Callable[[TripState, StepContext], Awaitable[Dict[str, Any]]]
NeutralFunc = Callable[[TripState], Dict[str, Any]]


def create_step_node(
    name: str,
    step: StepFunc,
    neutral: Optional[NeutralFunc],
    providers: Providers,
    llm: Optional[LLMClient] = None,
    tracer: Optional[ExecutionTracer] = None,
    metrics: Optional[MetricsCollector] = None,
) -> Callable[[TripState, RunnableConfig], Awaitable[Dict[str, Any]]]:
    """
    Wrap a step function as a LangGraph node.

    Args:
        name: Node name, also used as the agent name in meta records
        step: The step implementation
        neutral: Builds the fallback update when the step fails. None means
            the failure propagates (for steps with no meaningful fallback).
        providers: Injected collaborators
        llm: Optional LLM client
        tracer: Tracer receiving one span per execution
        metrics: Collector receiving step timings

    Returns:
        Async node function taking (state, config)
    """
    tracer = tracer or NullTracer()

    async def node(state: TripState, config: RunnableConfig) -> Dict[str, Any]:
        configurable = (config or {}).get("configurable", {})
        thread_id = state.get("thread_id") or configurable.get("thread_id") or "unknown"
        trace_id = configurable.get("trace_id")
        attempt = int(state.get("retry_count") or 0)
        ctx = StepContext(agent=name, thread_id=thread_id, providers=providers, llm=llm, metrics=metrics)
        _log = ctx.log_prefix

        logger.info(f"{_log}Entering node | attempt={attempt}")
        span_id = safe_call(tracer.start_span, trace_id, name, "node", {"attempt": attempt}) if trace_id else None

        started = time.time()
        perf = time.perf_counter()
        error_message: Optional[str] = None
        try:
            update = await step(state, ctx)
        except Exception as e:
            error_message = f"{type(e).__name__}: {e}"
            if neutral is None:
                logger.exception(f"{_log}Step failed with no fallback: {e}")
                if span_id:
                    safe_call(tracer.end_span, trace_id, span_id, None, error_message)
                if metrics is not None:
                    safe_call(metrics.record_step, name, ExecutionStatus.FAILED.value,
                              round((time.perf_counter() - perf) * 1000, 2))
                raise
            logger.exception(f"{_log}Step failed, using neutral result: {e}")
            update = neutral(state)

        duration_ms = round((time.perf_counter() - perf) * 1000, 2)
        if error_message:
            status = ExecutionStatus.FAILED
        elif ctx.skipped:
            status = ExecutionStatus.SKIPPED
        else:
            status = ExecutionStatus.SUCCESS

        errors = list(ctx.errors)
        if error_message:
            errors.append(AgentError(agent=name, error=error_message, timestamp=time.time()).model_dump())

        execution = AgentExecution(
            agent=name,
            start_time=started,
            end_time=time.time(),
            duration_ms=duration_ms,
            status=status,
            attempt=attempt,
            tool_calls=ctx.tool_calls,
            error=error_message,
        ).model_dump()

        meta_update = dict(update.get("meta") or {})
        meta_update["agent_executions"] = list(meta_update.get("agent_executions") or []) + [execution]
        meta_update["errors"] = list(meta_update.get("errors") or []) + errors
        update = {**update, "meta": meta_update}

        if metrics is not None:
            safe_call(metrics.record_step, name, status.value, duration_ms)
        if span_id:
            safe_call(
                tracer.end_span,
                trace_id,
                span_id,
                {"status": status.value, "tool_calls": len(ctx.tool_calls), "keys": sorted(update.keys())},
                error_message,
            )

        logger.info(f"{_log}Exiting node | status={status.value}, duration={duration_ms}ms, errors={len(errors)}")
        return update

    node.__name__ = f"{name}_node"
    return node
