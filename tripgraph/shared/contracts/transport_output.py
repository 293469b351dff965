"""
Transport step output contract.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TransportMode(str, Enum):
    WALKING = "walking"
    CYCLING = "cycling"
    TRANSIT = "transit"
    DRIVING = "driving"


class TransportSegment(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    day: int = Field(ge=1)
    origin: str
    destination: str
    mode: TransportMode
    duration_min: float = Field(ge=0)
    distance_m: float = Field(ge=0)
    cost: float = Field(ge=0, description="Cost for the whole party")


class TransportResult(BaseModel):
    """Contract for the transport step output."""

    model_config = ConfigDict(use_enum_values=True)

    segments: List[TransportSegment] = Field(default_factory=list)
    total_time_min: float = Field(default=0.0, ge=0)
    total_distance_m: float = Field(default=0.0, ge=0)
    total_cost: float = Field(default=0.0, ge=0)
    recommended_modes: List[TransportMode] = Field(default_factory=list)
    attempt: int = Field(default=0, ge=0)
