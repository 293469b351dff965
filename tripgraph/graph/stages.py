"""
Workflow stages and transition rules.

`next_stage` is the pure transition function of the planning loop; the
budget router is a thin adapter over it.
"""

from enum import Enum
from typing import Optional


class Stage(str, Enum):
    WEATHER = "weather"
    DRAFT = "itinerary_draft"
    RESOURCES = "resources"
    BUDGET_CHECK = "budget_check"
    FINALIZE = "finalize"
    END = "end"


# Graph nodes that make up the RESOURCES stage
FAN_OUT_NODES = ("accommodation", "transport", "dining")


def next_stage(
    stage: Stage,
    budget_result: Optional[dict],
    retry_count: int,
    max_retries: int,
) -> Stage:
    """
    Transition function of the planning loop.

    Args:
        stage: Stage that just completed
        budget_result: Latest budget critic output (only read after BUDGET_CHECK)
        retry_count: Retry counter after the critic's update
        max_retries: Retry ceiling

    Returns:
        The stage to run next
    """
    if stage == Stage.WEATHER:
        return Stage.DRAFT
    if stage == Stage.DRAFT:
        return Stage.RESOURCES
    if stage == Stage.RESOURCES:
        return Stage.BUDGET_CHECK
    if stage == Stage.BUDGET_CHECK:
        if budget_result and budget_result.get("is_within_budget"):
            return Stage.FINALIZE
        if retry_count >= max_retries:
            return Stage.FINALIZE
        return Stage.DRAFT
    return Stage.END


def ceiling_reached(budget_result: Optional[dict], retry_count: int, max_retries: int) -> bool:
    """True when the plan is finalized because retries ran out, not because it fit."""
    within = bool(budget_result and budget_result.get("is_within_budget"))
    return not within and retry_count >= max_retries
