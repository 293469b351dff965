"""
Dining step output contract.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tripgraph.shared.contracts.itinerary_draft import Location, MealType


class DiningRecommendation(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    day: int = Field(ge=1)
    meal_type: MealType
    time: str
    name: str
    cuisine: Optional[str] = Field(default=None, description="Inferred from the venue category; unset when unknown")
    address: Optional[str] = None
    location: Optional[Location] = None
    rating: Optional[float] = None
    avg_price: float = Field(ge=0, description="Per-person price for this meal")


class DiningResult(BaseModel):
    """Contract for the dining step output."""

    recommendations: List[DiningRecommendation] = Field(default_factory=list)
    total_cost: float = Field(default=0.0, ge=0)
    attempt: int = Field(default=0, ge=0)
