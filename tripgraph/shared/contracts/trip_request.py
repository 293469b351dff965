"""
Trip request contract.

The validated user input every step reads from `user_input` in the
workflow state.
"""

from datetime import date, timedelta
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def trip_dates(start_date: str, end_date: str) -> List[str]:
    """Every calendar date of the trip, inclusive, as YYYY-MM-DD strings."""
    start = date.fromisoformat(start_date)
    end = date.fromisoformat(end_date)
    return [(start + timedelta(days=i)).isoformat() for i in range((end - start).days + 1)]


class TripRequest(BaseModel):
    """Validated trip planning request."""

    destination: str = Field(min_length=1, description="Destination city")
    origin: Optional[str] = Field(default=None, description="Departure city")
    start_date: str = Field(description="First day of the trip (YYYY-MM-DD)")
    end_date: str = Field(description="Last day of the trip (YYYY-MM-DD)")
    start_time: Optional[str] = Field(default=None, description="Arrival time on day one (HH:MM)")
    end_time: Optional[str] = Field(default=None, description="Departure time on the last day (HH:MM)")
    budget: float = Field(ge=0, description="Total trip budget")
    travelers: int = Field(default=1, ge=1, description="Number of travelers")
    adult_count: Optional[int] = Field(default=None, ge=0)
    child_count: int = Field(default=0, ge=0)
    preferences: List[str] = Field(
        default_factory=list,
        description="Free-form preference tags (e.g., 'museum', 'relaxed', 'budget')",
    )
    hotel_preferences: List[str] = Field(
        default_factory=list,
        description="Accommodation preference tags (e.g., 'luxury', 'near metro')",
    )
    additional_notes: Optional[str] = Field(default=None)

    @field_validator("start_date", "end_date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value

    @model_validator(mode="after")
    def _date_order(self) -> "TripRequest":
        if date.fromisoformat(self.end_date) < date.fromisoformat(self.start_date):
            raise ValueError("end_date must not be before start_date")
        return self

    @property
    def dates(self) -> List[str]:
        return trip_dates(self.start_date, self.end_date)

    @property
    def num_days(self) -> int:
        return len(self.dates)

    @property
    def all_tags(self) -> List[str]:
        return [t.strip().lower() for t in self.preferences + self.hotel_preferences if t.strip()]
