"""
Rule-based weather analysis.

Turns daily forecasts into strategy tags, clothing advice and warnings.
Used directly when no LLM is configured and as the fallback when the LLM
analysis fails.
"""

from typing import Iterable, List, Optional

from tripgraph.shared.contracts.weather_output import DayForecast, StrategyTag, WeatherOutput

HOT_THRESHOLD = 30.0
COLD_THRESHOLD = 10.0
WIDE_SPREAD = 10.0

RAIN_KEYWORDS = ("雨", "rain", "shower", "drizzle", "storm", "thunder")
SEVERE_KEYWORDS = ("暴雨", "大雨", "heavy rain", "storm", "thunderstorm", "typhoon", "台风")

DEFAULT_ADVICE = "Dress for local conditions and check the forecast before heading out"


def _conditions(forecast: DayForecast) -> str:
    return f"{forecast.day_weather} {forecast.night_weather}".lower()


def _severe_term(text: str) -> Optional[str]:
    for term in SEVERE_KEYWORDS:
        if term in text:
            return term
    return None


def analyze_forecasts(forecasts: Iterable[DayForecast]) -> WeatherOutput:
    """
    Derive strategy tags and advice from forecasts.

    Args:
        forecasts: Daily forecasts; days may be missing and temperatures may be None

    Returns:
        WeatherOutput with source='rules'
    """
    forecasts = list(forecasts)
    tags: List[StrategyTag] = []
    warnings: List[str] = []

    has_rain = False
    day_temps = [f.day_temp for f in forecasts if f.day_temp is not None]
    night_temps = [f.night_temp for f in forecasts if f.night_temp is not None]

    for forecast in forecasts:
        text = _conditions(forecast)
        if any(keyword in text for keyword in RAIN_KEYWORDS):
            has_rain = True
            severe = _severe_term(text)
            if severe:
                warnings.append(f"{forecast.date}: {severe} expected, keep outdoor plans flexible")

    max_temp = max(day_temps) if day_temps else None
    min_temp = min(night_temps) if night_temps else None
    is_hot = max_temp is not None and max_temp > HOT_THRESHOLD
    is_cold = min_temp is not None and min_temp < COLD_THRESHOLD

    if has_rain:
        tags.extend([StrategyTag.INDOOR_PRIORITY, StrategyTag.RAIN_PREPARED])
    if is_hot:
        tags.append(StrategyTag.HOT_WEATHER)
    if is_cold:
        tags.append(StrategyTag.COLD_WEATHER)
    if not tags:
        tags.append(StrategyTag.OUTDOOR_FRIENDLY)

    if is_hot:
        advice = "Hot weather: wear light breathable clothing and bring sun protection"
    elif is_cold:
        advice = "Cold weather: bring a warm coat and layers"
    elif has_rain:
        advice = "Rain expected: pack an umbrella and a waterproof jacket"
    elif forecasts:
        advice = "Pleasant weather: comfortable casual clothing is fine"
    else:
        advice = DEFAULT_ADVICE

    if max_temp is not None and min_temp is not None and max_temp - min_temp > WIDE_SPREAD:
        advice += "; mornings and evenings are much cooler, bring a light jacket"

    return WeatherOutput(
        forecasts=forecasts,
        strategy_tags=tags,
        clothing_advice=advice,
        warnings=warnings,
        source="rules",
    )


def neutral_weather() -> WeatherOutput:
    """Result used when no forecast can be obtained."""
    return WeatherOutput(
        forecasts=[],
        strategy_tags=[StrategyTag.OUTDOOR_FRIENDLY],
        clothing_advice=DEFAULT_ADVICE,
        warnings=[],
        source="neutral",
    )


def filter_tags(raw_tags: Iterable[object]) -> List[StrategyTag]:
    """Keep only known tags, preserving order and dropping duplicates."""
    known = {tag.value: tag for tag in StrategyTag}
    result: List[StrategyTag] = []
    for raw in raw_tags:
        tag = known.get(str(raw).strip().lower())
        if tag is not None and tag not in result:
            result.append(tag)
    return result
