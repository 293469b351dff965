"""Prompt templates for the weather analysis."""

import json
from typing import List

from tripgraph.shared.contracts.weather_output import DayForecast

WEATHER_SYSTEM_PROMPT = """You are a travel weather analyst.
Given a daily forecast for a trip, decide how the itinerary should adapt.

Respond with a single JSON object and nothing else:
{
  "strategy_tags": [...],      // any of: indoor_priority, outdoor_friendly, rain_prepared, cold_weather, hot_weather
  "clothing_advice": "...",    // one or two sentences
  "warnings": ["..."]          // severe weather by date, empty if none
}
"""


def build_weather_user_prompt(destination: str, start_date: str, end_date: str, forecasts: List[DayForecast]) -> str:
    days = [f.model_dump() for f in forecasts]
    return (
        f"Destination: {destination}\n"
        f"Trip dates: {start_date} to {end_date}\n"
        f"Forecast:\n{json.dumps(days, ensure_ascii=False, indent=2)}"
    )
