"""
Trip planning graph construction.

    START -> weather -> itinerary_draft
    itinerary_draft -> accommodation | transport | dining   (one superstep)
    accommodation, transport, dining -> budget_check
    budget_check -(next_stage)-> finalize | itinerary_draft
    finalize -> END

Every node is a step function wrapped by the step boundary, so collaborators
(providers, LLM, tracer, metrics) are injected here rather than imported by
the steps. Resuming a thread is left to the checkpointer the graph is
compiled with.
"""

import logging
from typing import Any, Dict, List, Optional

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.graph import END, START, StateGraph

from tripgraph.accommodation.nodes.accommodation import accommodation_neutral, accommodation_node
from tripgraph.budget.nodes.budget_critic import budget_critic_node
from tripgraph.dining.nodes.dining import dining_neutral, dining_node
from tripgraph.finalize.nodes.finalize import create_finalize_neutral, create_finalize_node
from tripgraph.graph.config import DEFAULT_CONFIG, WorkflowConfig
from tripgraph.graph.router import create_budget_router
from tripgraph.graph.stages import FAN_OUT_NODES, Stage
from tripgraph.graph.state import TripState
from tripgraph.graph.steps import create_step_node
from tripgraph.itinerary.nodes.itinerary import itinerary_neutral, itinerary_node
from tripgraph.observability.metrics import MetricsCollector
from tripgraph.observability.tracer import ExecutionTracer
from tripgraph.providers.interfaces import Providers
from tripgraph.shared.llm.client import LLMClient
from tripgraph.transport.nodes.transport import transport_neutral, transport_node
from tripgraph.weather.nodes.weather import weather_neutral, weather_node


logger = logging.getLogger(__name__)

WORKFLOW_NODES: List[Dict[str, str]] = [
    {"id": Stage.WEATHER.value, "name": "Weather", "description": "Fetch the forecast and derive strategy tags"},
    {"id": Stage.DRAFT.value, "name": "Itinerary draft", "description": "Draft attractions and meal slots per day"},
    {"id": "accommodation", "name": "Accommodation", "description": "Recommend hotels near the attractions"},
    {"id": "transport", "name": "Transport", "description": "Plan and cost moves between attractions"},
    {"id": "dining", "name": "Dining", "description": "Recommend a restaurant per meal slot"},
    {"id": Stage.BUDGET_CHECK.value, "name": "Budget critic", "description": "Check total cost and request changes"},
    {"id": Stage.FINALIZE.value, "name": "Finalize", "description": "Assemble the final itinerary"},
]


def build_trip_planning_graph(
    providers: Providers,
    llm: Optional[LLMClient] = None,
    config: WorkflowConfig = DEFAULT_CONFIG,
    tracer: Optional[ExecutionTracer] = None,
    metrics: Optional[MetricsCollector] = None,
) -> StateGraph:
    """
    Wire the trip planning graph without compiling it.

    Args:
        providers: POI, routing and weather collaborators
        llm: Optional LLM client for the weather and itinerary steps
        config: Workflow configuration (retry ceiling)
        tracer: Receives one span per step execution
        metrics: Receives step and tool timings

    Returns:
        StateGraph builder; compile it with the checkpointer of the run
    """
    logger.info(f"[graph=trip_planner] Building graph | max_retries={config.max_retries}, llm={llm is not None}")

    def wrap(name, step, neutral):
        return create_step_node(name, step, neutral, providers=providers, llm=llm, tracer=tracer, metrics=metrics)

    graph = StateGraph(TripState)

    graph.add_node(Stage.WEATHER.value, wrap(Stage.WEATHER.value, weather_node, weather_neutral))
    graph.add_node(Stage.DRAFT.value, wrap(Stage.DRAFT.value, itinerary_node, itinerary_neutral))
    graph.add_node("accommodation", wrap("accommodation", accommodation_node, accommodation_neutral))
    graph.add_node("transport", wrap("transport", transport_node, transport_neutral))
    graph.add_node("dining", wrap("dining", dining_node, dining_neutral))
    # No neutral budget verdict exists; a critic failure surfaces to the runner
    graph.add_node(Stage.BUDGET_CHECK.value, wrap(Stage.BUDGET_CHECK.value, budget_critic_node, None))
    graph.add_node(
        Stage.FINALIZE.value,
        wrap(
            Stage.FINALIZE.value,
            create_finalize_node(config.max_retries),
            create_finalize_neutral(config.max_retries),
        ),
    )

    graph.add_edge(START, Stage.WEATHER.value)
    graph.add_edge(Stage.WEATHER.value, Stage.DRAFT.value)
    for name in FAN_OUT_NODES:
        graph.add_edge(Stage.DRAFT.value, name)
        graph.add_edge(name, Stage.BUDGET_CHECK.value)
    graph.add_conditional_edges(
        Stage.BUDGET_CHECK.value,
        create_budget_router(config.max_retries),
        {"finalize": Stage.FINALIZE.value, "itinerary_draft": Stage.DRAFT.value},
    )
    graph.add_edge(Stage.FINALIZE.value, END)

    return graph


def create_trip_planning_graph(
    providers: Providers,
    llm: Optional[LLMClient] = None,
    config: WorkflowConfig = DEFAULT_CONFIG,
    tracer: Optional[ExecutionTracer] = None,
    metrics: Optional[MetricsCollector] = None,
    checkpointer: Optional[BaseCheckpointSaver] = None,
) -> Any:
    """
    Create and compile the trip planning graph.

    With a checkpointer every superstep is saved per `configurable.thread_id`
    and `astream(None, config)` continues a thread from its last checkpoint.

    Returns:
        Compiled StateGraph ready for ainvoke/astream
    """
    graph = build_trip_planning_graph(providers, llm=llm, config=config, tracer=tracer, metrics=metrics)
    compile_kwargs = {}
    if checkpointer is not None:
        compile_kwargs["checkpointer"] = checkpointer
    return graph.compile(**compile_kwargs)
