"""
Trip planning workflow graph.

Wires the specialist steps into a LangGraph state machine:
    weather -> itinerary_draft -> (accommodation | transport | dining) -> budget_check
    budget_check -> finalize, or back to itinerary_draft while over budget and retries remain

The runner compiles it with a LangGraph checkpointer, so every superstep is
saved per thread and an unfinished thread resumes from its last checkpoint.
"""

from tripgraph.graph.build import create_trip_planning_graph
from tripgraph.graph.runner import TripPlanningWorkflow

__all__ = ["TripPlanningWorkflow", "create_trip_planning_graph"]
