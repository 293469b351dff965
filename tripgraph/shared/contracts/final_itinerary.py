"""
Final itinerary contract.

The user-facing plan assembled by the finalizer.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class PlannedActivity(BaseModel):
    time: str
    name: str
    duration: int = 0
    type: Optional[str] = None
    ticket_price: float = 0.0


class PlannedMeal(BaseModel):
    time: str
    meal_type: str
    name: Optional[str] = Field(default=None, description="Restaurant, when one was found")
    cuisine: Optional[str] = None
    avg_price: Optional[float] = None


class FinalDay(BaseModel):
    day: int
    date: str
    activities: List[PlannedActivity] = Field(default_factory=list)
    meals: List[PlannedMeal] = Field(default_factory=list)


class FinalAccommodation(BaseModel):
    name: str
    address: Optional[str] = None
    price_per_night: float
    nights: int
    total_cost: float


class FinalTransport(BaseModel):
    modes: List[str] = Field(default_factory=list)
    segments: int = 0
    total_cost: float = 0.0


class EstimatedCost(BaseModel):
    accommodation: float = 0.0
    transport: float = 0.0
    dining: float = 0.0
    attractions: float = 0.0
    other: float = Field(default=0.0, description="Contingency allowance")
    total: float = 0.0


class BudgetVerdict(BaseModel):
    budget: float
    within_budget: Optional[bool] = None
    utilization: Optional[float] = None
    retry_count: int = 0
    outcome: str


class FinalItinerary(BaseModel):
    """Contract for the finalizer output."""

    destination: str
    start_date: str
    end_date: str
    travelers: int
    summary: str
    days: List[FinalDay] = Field(default_factory=list)
    accommodation: Optional[FinalAccommodation] = None
    transport: FinalTransport = Field(default_factory=FinalTransport)
    estimated_cost: EstimatedCost = Field(default_factory=EstimatedCost)
    weather_notes: List[str] = Field(default_factory=list)
    budget: BudgetVerdict
