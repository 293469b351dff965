"""
Routing functions for the trip planning graph.

Thin LangGraph adapter over the pure rules in stages.py. The router is
built per graph because it closes over the retry ceiling.
"""

import logging
from typing import Callable, Literal

from tripgraph.graph.stages import Stage, ceiling_reached, next_stage
from tripgraph.graph.state import TripState


logger = logging.getLogger(__name__)


def create_budget_router(
    max_retries: int,
) -> Callable[[TripState], Literal["finalize", "itinerary_draft"]]:
    """Conditional edge after the budget critic."""

    def route_after_budget_check(state: TripState) -> Literal["finalize", "itinerary_draft"]:
        thread_id = state.get("thread_id") or "unknown"
        _log = f"[run={thread_id}] [graph=trip_planner] [router=route_after_budget_check] "
        budget_result = state.get("budget_result")
        retry_count = state.get("retry_count") or 0

        stage = next_stage(Stage.BUDGET_CHECK, budget_result, retry_count, max_retries)
        if stage == Stage.FINALIZE:
            if ceiling_reached(budget_result, retry_count, max_retries):
                logger.warning(
                    f"{_log}Retry ceiling reached ({retry_count}/{max_retries}); "
                    f"finalizing best-effort plan over budget"
                )
            else:
                logger.info(f"{_log}Within budget after {retry_count} retries; routing to 'finalize'")
            return "finalize"

        logger.info(f"{_log}Over budget; retry {retry_count}/{max_retries}, routing to 'itinerary_draft'")
        return "itinerary_draft"

    return route_after_budget_check
