"""
Itinerary draft contract.

The draft is the per-day skeleton of attractions and meal slots that the
accommodation, transport and dining steps work from. Each retry replaces
it wholesale.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class Location(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class AttractionSlot(BaseModel):
    """A planned visit."""

    time: str = Field(description="Start time (HH:MM)")
    name: str
    duration: int = Field(default=120, ge=0, description="Visit length in minutes")
    location: Optional[Location] = None
    type: Optional[str] = Field(default=None, description="Category, e.g. 'museum', 'park'")
    ticket_price: float = Field(default=0.0, ge=0, description="Per-person ticket price")
    indoor: Optional[bool] = None


class MealSlot(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    time: str = Field(description="Meal time (HH:MM)")
    meal_type: MealType
    cuisine: Optional[str] = None


class DraftDay(BaseModel):
    day: int = Field(ge=1)
    date: str
    attractions: List[AttractionSlot] = Field(default_factory=list)
    meal_slots: List[MealSlot] = Field(default_factory=list)


class DraftItinerary(BaseModel):
    """Contract for the itinerary draft step output."""

    days: List[DraftDay] = Field(default_factory=list)
    total_attractions: int = Field(default=0, ge=0)
    total_meals: int = Field(default=0, ge=0)
    estimated_attraction_cost: float = Field(default=0.0, ge=0)
    attempt: int = Field(default=0, ge=0, description="retry_count when this draft was produced")
    feedback_applied: Optional[str] = Field(
        default=None, description="Budget feedback action this draft responded to"
    )
    source: str = Field(default="rules", description="'llm', 'rules' or 'neutral'")
