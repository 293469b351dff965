"""
Accommodation step output contract.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tripgraph.shared.contracts.itinerary_draft import Location


class PriceTier(str, Enum):
    ECONOMY = "economy"
    MID = "mid"
    LUXURY = "luxury"


class HotelRecommendation(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str
    address: Optional[str] = None
    location: Optional[Location] = None
    price_per_night: float = Field(ge=0)
    rating: Optional[float] = None
    distance_km: Optional[float] = Field(
        default=None, description="Distance to the attraction centroid, when known"
    )
    tier: PriceTier


class AccommodationResult(BaseModel):
    """Contract for the accommodation step output."""

    model_config = ConfigDict(use_enum_values=True)

    recommendations: List[HotelRecommendation] = Field(default_factory=list)
    selected: Optional[HotelRecommendation] = None
    nights: int = Field(default=0, ge=0)
    rooms: int = Field(default=0, ge=0)
    total_cost: float = Field(default=0.0, ge=0)
    centroid: Optional[Location] = None
    tier: Optional[PriceTier] = None
    attempt: int = Field(default=0, ge=0)
