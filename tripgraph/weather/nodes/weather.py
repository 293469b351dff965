"""
Weather node.

Fetches the forecast for the trip dates and derives strategy tags that
the itinerary step plans around.
"""

import logging
from typing import Any, Dict

from tripgraph.graph.state import TripState, get_request
from tripgraph.graph.steps import StepContext
from tripgraph.shared.contracts.weather_output import StrategyTag, WeatherOutput
from tripgraph.shared.exceptions import ParseError
from tripgraph.shared.llm.client import complete_json
from tripgraph.weather.analysis import analyze_forecasts, filter_tags, neutral_weather
from tripgraph.weather.prompts import WEATHER_SYSTEM_PROMPT, build_weather_user_prompt


logger = logging.getLogger(__name__)


def weather_neutral(state: TripState) -> Dict[str, Any]:
    return {"weather": neutral_weather().model_dump()}


async def weather_node(state: TripState, ctx: StepContext) -> Dict[str, Any]:
    """
    Produce the weather slice.

    Rules always run; an LLM analysis, when configured, replaces their tags
    and advice. A failing LLM is recorded and the rule result is kept.
    """
    _log = ctx.log_prefix
    request = get_request(state)

    forecasts = await ctx.call_tool(
        "weather.get_forecast",
        ctx.providers.weather.get_forecast,
        city=request.destination,
        start_date=request.start_date,
        end_date=request.end_date,
    )
    logger.info(f"{_log}Got {len(forecasts)} day(s) of forecast for {request.destination}")

    if not forecasts:
        logger.warning(f"{_log}No forecast available, using neutral weather")
        return weather_neutral(state)

    weather = analyze_forecasts(forecasts)

    if ctx.llm is not None:
        try:
            parsed = await complete_json(
                ctx.llm,
                WEATHER_SYSTEM_PROMPT,
                build_weather_user_prompt(request.destination, request.start_date, request.end_date, forecasts),
            )
            tags = filter_tags(parsed.get("strategy_tags") or [])
            warnings = parsed.get("warnings")
            weather = WeatherOutput(
                forecasts=forecasts,
                strategy_tags=tags or [StrategyTag.OUTDOOR_FRIENDLY],
                clothing_advice=str(parsed.get("clothing_advice") or weather.clothing_advice),
                warnings=[str(w) for w in warnings] if isinstance(warnings, list) else weather.warnings,
                source="llm",
            )
        except (ParseError, ValueError) as e:
            ctx.record_error(f"LLM weather analysis unusable, keeping rule-based tags: {e}")
        except Exception as e:
            ctx.record_error(f"LLM weather analysis failed, keeping rule-based tags: {type(e).__name__}: {e}")

    logger.info(f"{_log}Strategy tags: {', '.join(weather.strategy_tags)} | source={weather.source}")
    return {"weather": weather.model_dump()}
