"""
Multi-agent trip planner built on LangGraph.

This package contains:
- shared/: Common infrastructure (LLM client, logging, contracts, exceptions)
- providers/: POI, routing and weather collaborators (AMap and offline)
- weather/, itinerary/, accommodation/, transport/, dining/: specialist steps
- budget/: Budget critic
- finalize/: Final itinerary assembly
- graph/: Workflow graph, runner, checkpointing and HTTP API
- observability/: Tracing and metrics
"""

from tripgraph.graph import TripPlanningWorkflow, create_trip_planning_graph

__all__ = ["TripPlanningWorkflow", "create_trip_planning_graph"]
