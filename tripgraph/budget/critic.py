"""
Budget evaluation for the budget critic.

Aggregates the cost slices, applies a tolerance that widens with each
retry, and picks the remediation for the next attempt. Everything here is
deterministic; the critic never calls an LLM or a provider.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from tripgraph.shared.contracts.budget_result import (
    BudgetFeedback,
    BudgetFeedbackAction,
    BudgetResult,
    CostBreakdown,
)


@dataclass
class BudgetPolicy:
    """
    Tolerance settings for the critic.

    A plan passes when total_cost <= budget * (1 + BASE_TOLERANCE +
    TOLERANCE_STEP * retry_count).
    """

    BASE_TOLERANCE: float = 0.10
    TOLERANCE_STEP: float = 0.05


DEFAULT_BUDGET_POLICY = BudgetPolicy()

# Cost category -> remediation, in tie-break order
REMEDIATIONS: Tuple[Tuple[str, BudgetFeedbackAction], ...] = (
    ("accommodation", BudgetFeedbackAction.DOWNGRADE_HOTEL),
    ("transport", BudgetFeedbackAction.CHEAPER_TRANSPORT),
    ("dining", BudgetFeedbackAction.ADJUST_MEALS),
    ("attractions", BudgetFeedbackAction.REDUCE_ATTRACTIONS),
)

SUGGESTIONS: Dict[BudgetFeedbackAction, str] = {
    BudgetFeedbackAction.DOWNGRADE_HOTEL: "Choose a lower hotel tier or a cheaper hotel in the same area",
    BudgetFeedbackAction.CHEAPER_TRANSPORT: "Prefer walking and public transit over taxis",
    BudgetFeedbackAction.ADJUST_MEALS: "Pick more affordable restaurants and local eateries",
    BudgetFeedbackAction.REDUCE_ATTRACTIONS: "Drop paid attractions or swap them for free ones",
}


@dataclass
class BudgetEvaluation:
    """
    Critic verdict plus the retry_count increment to emit.

    retry_increment is 1 when the plan must be redrafted and 0 when it is
    accepted; the state reducer adds it to the running counter.
    """

    result: BudgetResult
    retry_increment: int


def allowed_overage(retry_count: int, policy: BudgetPolicy = DEFAULT_BUDGET_POLICY) -> float:
    """Tolerance ratio above budget for the given attempt (0.10, 0.15, 0.20, ...)."""
    return policy.BASE_TOLERANCE + policy.TOLERANCE_STEP * max(retry_count, 0)


def build_cost_breakdown(
    accommodation_cost: Optional[float],
    transport_cost: Optional[float],
    dining_cost: Optional[float],
    attraction_cost: Optional[float],
) -> CostBreakdown:
    """Absent slices count as zero."""
    return CostBreakdown(
        accommodation=float(accommodation_cost or 0.0),
        transport=float(transport_cost or 0.0),
        dining=float(dining_cost or 0.0),
        attractions=float(attraction_cost or 0.0),
    )


def budget_utilization(total_cost: float, budget: float) -> float:
    """total_cost / budget, or +inf for a zero budget."""
    if budget == 0:
        return math.inf
    return total_cost / budget


def rank_remediations(breakdown: CostBreakdown) -> List[BudgetFeedbackAction]:
    """Remediations ordered by the cost of their category, highest first."""
    costs = breakdown.model_dump()
    ranked = sorted(REMEDIATIONS, key=lambda item: costs[item[0]], reverse=True)
    return [action for _, action in ranked]


def select_remediation(breakdown: CostBreakdown, retry_count: int) -> BudgetFeedbackAction:
    """
    Pick the remediation for the next attempt.

    Attempt 0 targets the most expensive category, attempt 1 the second,
    and so on, cycling when retries outnumber categories.
    """
    ranked = rank_remediations(breakdown)
    return ranked[retry_count % len(ranked)]


def evaluate_budget(
    breakdown: CostBreakdown,
    budget: float,
    retry_count: int,
    policy: BudgetPolicy = DEFAULT_BUDGET_POLICY,
) -> BudgetEvaluation:
    """
    Evaluate a costed plan against the budget.

    Args:
        breakdown: Per-category costs of the current attempt
        budget: User budget
        retry_count: Retries taken so far (the attempt being judged)
        policy: Tolerance settings

    Returns:
        BudgetEvaluation with the BudgetResult and the retry increment
    """
    total_cost = breakdown.accommodation + breakdown.transport + breakdown.dining + breakdown.attractions
    overage = allowed_overage(retry_count, policy)
    within = total_cost <= budget * (1 + overage)

    feedback = None
    if not within:
        action = select_remediation(breakdown, retry_count)
        feedback = BudgetFeedback(
            action=action,
            target_reduction=total_cost - budget,
            suggestion=SUGGESTIONS[action],
        )

    result = BudgetResult(
        total_cost=total_cost,
        budget=budget,
        budget_utilization=budget_utilization(total_cost, budget),
        is_within_budget=within,
        allowed_overage=overage,
        cost_breakdown=breakdown,
        feedback=feedback,
        attempt=retry_count,
    )
    return BudgetEvaluation(result=result, retry_increment=0 if within else 1)
