"""
Budget critic.

Deterministic evaluation of the costed plan: aggregation, retry-widening
tolerance and remediation selection.
"""

from tripgraph.budget.critic import (
    BudgetEvaluation,
    BudgetPolicy,
    allowed_overage,
    evaluate_budget,
    select_remediation,
)

__all__ = [
    "BudgetEvaluation",
    "BudgetPolicy",
    "allowed_overage",
    "evaluate_budget",
    "select_remediation",
]
