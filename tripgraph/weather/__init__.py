"""Weather step: forecast retrieval and strategy tags."""

from tripgraph.weather.analysis import analyze_forecasts, neutral_weather
from tripgraph.weather.nodes.weather import weather_neutral, weather_node

__all__ = ["analyze_forecasts", "neutral_weather", "weather_neutral", "weather_node"]
