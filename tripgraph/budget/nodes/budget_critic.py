"""
Budget critic node.

Judges the costed draft and either accepts it or sends remediation
feedback back to the itinerary step.
"""

import logging
from typing import Any, Dict

from tripgraph.budget.critic import build_cost_breakdown, evaluate_budget
from tripgraph.graph.state import TripState, current_attempt, get_request
from tripgraph.graph.steps import StepContext


logger = logging.getLogger(__name__)


def _slice_cost(state: TripState, key: str) -> float:
    value = state.get(key)
    return float(value.get("total_cost") or 0.0) if value else 0.0


async def budget_critic_node(state: TripState, ctx: StepContext) -> Dict[str, Any]:
    """
    Evaluate the current attempt against the user's budget.

    Returns:
        State updates with budget_result and the retry_count increment
    """
    _log = ctx.log_prefix
    request = get_request(state)
    retry_count = current_attempt(state)
    draft = state.get("draft_itinerary") or {}

    breakdown = build_cost_breakdown(
        accommodation_cost=_slice_cost(state, "accommodation"),
        transport_cost=_slice_cost(state, "transport"),
        dining_cost=_slice_cost(state, "dining"),
        attraction_cost=draft.get("estimated_attraction_cost"),
    )
    evaluation = evaluate_budget(breakdown, request.budget, retry_count)
    result = evaluation.result

    if result.is_within_budget:
        logger.info(
            f"{_log}Within budget | total={result.total_cost:.2f}, budget={request.budget:.2f}, "
            f"utilization={result.budget_utilization:.2f}"
        )
    else:
        logger.info(
            f"{_log}Over budget | total={result.total_cost:.2f}, budget={request.budget:.2f}, "
            f"tolerance={result.allowed_overage:.2f}, action={result.feedback.action}, "
            f"target_reduction={result.feedback.target_reduction:.2f}"
        )

    return {
        "budget_result": result.model_dump(),
        "retry_count": evaluation.retry_increment,
    }
