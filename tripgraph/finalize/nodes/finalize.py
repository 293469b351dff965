"""
Finalize node.

Assembles the final itinerary and closes the run metadata.
"""

import logging
import time
from typing import Any, Callable, Dict

from tripgraph.finalize.assembly import (
    OUTCOME_CEILING_REACHED,
    OUTCOME_WITHIN_BUDGET,
    build_final_itinerary,
    minimal_itinerary,
)
from tripgraph.graph.stages import ceiling_reached
from tripgraph.graph.state import TripState
from tripgraph.graph.steps import StepContext


logger = logging.getLogger(__name__)


def run_outcome(state: TripState, max_retries: int) -> str:
    budget_result = state.get("budget_result")
    if ceiling_reached(budget_result, int(state.get("retry_count") or 0), max_retries):
        return OUTCOME_CEILING_REACHED
    return OUTCOME_WITHIN_BUDGET


def create_finalize_node(max_retries: int) -> Callable[[TripState, StepContext], Any]:
    """Finalize node bound to the retry ceiling (needed to label the outcome)."""

    async def finalize_node(state: TripState, ctx: StepContext) -> Dict[str, Any]:
        _log = ctx.log_prefix
        outcome = run_outcome(state, max_retries)
        if outcome == OUTCOME_CEILING_REACHED:
            logger.warning(f"{_log}Finalizing over-budget plan after {state.get('retry_count')} retries")

        itinerary = build_final_itinerary(state, outcome)
        logger.info(
            f"{_log}Final itinerary ready | days={len(itinerary.days)}, "
            f"total={itinerary.estimated_cost.total:.2f}, outcome={outcome}"
        )
        return {
            "final_itinerary": itinerary.model_dump(),
            "meta": {"outcome": outcome, "finished_at": time.time()},
        }

    return finalize_node


def create_finalize_neutral(max_retries: int) -> Callable[[TripState], Dict[str, Any]]:
    def finalize_neutral(state: TripState) -> Dict[str, Any]:
        outcome = run_outcome(state, max_retries)
        return {
            "final_itinerary": minimal_itinerary(state, outcome).model_dump(),
            "meta": {"outcome": outcome, "finished_at": time.time()},
        }

    return finalize_neutral
