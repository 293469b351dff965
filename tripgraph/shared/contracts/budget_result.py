"""
Budget critic output contract.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BudgetFeedbackAction(str, Enum):
    """Remediation the critic asks the next attempt to apply."""

    DOWNGRADE_HOTEL = "downgrade_hotel"
    REDUCE_ATTRACTIONS = "reduce_attractions"
    CHEAPER_TRANSPORT = "cheaper_transport"
    ADJUST_MEALS = "adjust_meals"


class BudgetFeedback(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    action: BudgetFeedbackAction
    target_reduction: float = Field(description="total_cost - budget")
    suggestion: str


class CostBreakdown(BaseModel):
    accommodation: float = 0.0
    transport: float = 0.0
    dining: float = 0.0
    attractions: float = 0.0


class BudgetResult(BaseModel):
    """Contract for the budget critic output."""

    total_cost: float
    budget: float
    budget_utilization: float = Field(description="total_cost / budget; inf when budget is 0")
    is_within_budget: bool
    allowed_overage: float = Field(description="Tolerance ratio applied on this attempt")
    cost_breakdown: CostBreakdown
    feedback: Optional[BudgetFeedback] = None
    attempt: int = Field(default=0, ge=0)
