"""
Weather step output contract.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StrategyTag(str, Enum):
    """Planning hints derived from the forecast."""

    INDOOR_PRIORITY = "indoor_priority"
    OUTDOOR_FRIENDLY = "outdoor_friendly"
    RAIN_PREPARED = "rain_prepared"
    COLD_WEATHER = "cold_weather"
    HOT_WEATHER = "hot_weather"


class DayForecast(BaseModel):
    """Forecast for a single day."""

    date: str
    day_weather: str = ""
    night_weather: str = ""
    day_temp: Optional[float] = None
    night_temp: Optional[float] = None
    day_wind: Optional[str] = None
    night_wind: Optional[str] = None


class WeatherOutput(BaseModel):
    """Contract for the weather step output."""

    model_config = ConfigDict(use_enum_values=True)

    forecasts: List[DayForecast] = Field(default_factory=list)
    strategy_tags: List[StrategyTag] = Field(default_factory=list)
    clothing_advice: str = ""
    warnings: List[str] = Field(default_factory=list)
    source: str = Field(default="rules", description="'rules', 'llm' or 'neutral'")
