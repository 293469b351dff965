"""
Itinerary draft node.

Produces the per-day skeleton the resource steps work from. Every attempt
builds a fresh draft; on a retry the previous budget feedback steers it.
"""

import logging
from typing import Any, Dict, List, Optional

from tripgraph.graph.state import TripState, current_attempt, get_request
from tripgraph.graph.steps import StepContext
from tripgraph.itinerary.drafting import parse_llm_draft, plan_from_venues, skeleton_draft, trim_to_cost
from tripgraph.itinerary.prompts import ITINERARY_SYSTEM_PROMPT, build_itinerary_user_prompt
from tripgraph.providers.interfaces import CATEGORY_ATTRACTION
from tripgraph.shared.contracts.itinerary_draft import DraftItinerary, Location
from tripgraph.shared.contracts.trip_request import TripRequest
from tripgraph.shared.exceptions import ParseError
from tripgraph.shared.llm.client import complete_json


logger = logging.getLogger(__name__)

# Search terms per preference tag for the rule-based planner
_PREFERENCE_KEYWORDS = {
    "history": "museum historic",
    "culture": "museum gallery theater",
    "art": "gallery museum",
    "nature": "park garden lake",
    "family": "park science amusement",
    "shopping": "market district",
    "night": "tower theater",
}


def itinerary_neutral(state: TripState) -> Dict[str, Any]:
    request = get_request(state)
    return {"draft_itinerary": skeleton_draft(request, attempt=current_attempt(state)).model_dump()}


def pending_feedback(state: TripState) -> Optional[dict]:
    """Feedback from a failed budget check, if the previous attempt had one."""
    budget_result = state.get("budget_result")
    if not budget_result or budget_result.get("is_within_budget"):
        return None
    return budget_result.get("feedback")


def _search_keywords(request: TripRequest) -> str:
    terms: List[str] = []
    for tag in request.all_tags:
        terms.append(_PREFERENCE_KEYWORDS.get(tag, tag))
    return " ".join(terms) or "attraction"


async def _draft_with_llm(
    ctx: StepContext,
    request: TripRequest,
    weather: dict,
    feedback: Optional[dict],
    attempt: int,
) -> DraftItinerary:
    user_prompt = build_itinerary_user_prompt(
        request,
        strategy_tags=weather.get("strategy_tags") or [],
        clothing_advice=weather.get("clothing_advice") or "",
        warnings=weather.get("warnings") or [],
        feedback=feedback,
    )
    payload = await complete_json(ctx.llm, ITINERARY_SYSTEM_PROMPT, user_prompt)
    return parse_llm_draft(payload, request, feedback.get("action") if feedback else None, attempt)


async def _draft_with_rules(
    ctx: StepContext,
    request: TripRequest,
    weather: dict,
    feedback: Optional[dict],
    attempt: int,
) -> DraftItinerary:
    venues = await ctx.call_tool(
        "poi.search_keyword",
        ctx.providers.poi.search_keyword,
        keywords=_search_keywords(request),
        city=request.destination,
        category=CATEGORY_ATTRACTION,
        limit=25,
    )
    return plan_from_venues(
        request,
        venues,
        strategy_tags=weather.get("strategy_tags") or [],
        feedback_action=feedback.get("action") if feedback else None,
        attempt=attempt,
    )


async def enrich_locations(ctx: StepContext, draft: DraftItinerary, city: str) -> int:
    """
    Fill missing attraction coordinates by POI search, then geocoding.

    Lookup failures are recorded and leave the attraction unlocated.

    Returns:
        Number of attractions that gained a location
    """
    enriched = 0
    for day in draft.days:
        for attraction in day.attractions:
            if attraction.location is not None:
                continue
            try:
                matches = await ctx.call_tool(
                    "poi.search_keyword",
                    ctx.providers.poi.search_keyword,
                    keywords=attraction.name,
                    city=city,
                    category=CATEGORY_ATTRACTION,
                    limit=1,
                )
                located = next((m for m in matches if m.has_location), None)
                if located is not None:
                    attraction.location = Location(lat=located.lat, lng=located.lng)
                else:
                    coords = await ctx.call_tool(
                        "poi.geocode", ctx.providers.poi.geocode, address=attraction.name, city=city
                    )
                    if coords:
                        attraction.location = Location(lat=coords[0], lng=coords[1])
            except Exception as e:
                ctx.record_error(f"Could not locate '{attraction.name}': {type(e).__name__}: {e}")
                continue
            if attraction.location is not None:
                enriched += 1
    return enriched


async def itinerary_node(state: TripState, ctx: StepContext) -> Dict[str, Any]:
    """
    Draft the itinerary for the current attempt.

    Returns:
        State updates with draft_itinerary
    """
    _log = ctx.log_prefix
    request = get_request(state)
    weather = state.get("weather") or {}
    attempt = current_attempt(state)
    feedback = pending_feedback(state)

    if feedback:
        logger.info(f"{_log}Redrafting with feedback | action={feedback.get('action')}, attempt={attempt}")

    draft: Optional[DraftItinerary] = None
    if ctx.llm is not None:
        try:
            draft = await _draft_with_llm(ctx, request, weather, feedback, attempt)
        except ParseError as e:
            ctx.record_error(f"LLM draft unusable, falling back to rule-based planner: {e}")
        except Exception as e:
            ctx.record_error(f"LLM draft failed, falling back to rule-based planner: {type(e).__name__}: {e}")

    if draft is None:
        draft = await _draft_with_rules(ctx, request, weather, feedback, attempt)

    enriched = await enrich_locations(ctx, draft, request.destination)

    previous = state.get("draft_itinerary")
    if feedback and feedback.get("action") == "reduce_attractions" and previous:
        ceiling = previous.get("estimated_attraction_cost", 0.0)
        if draft.estimated_attraction_cost > ceiling:
            logger.info(
                f"{_log}New draft costs more than the previous one "
                f"({draft.estimated_attraction_cost:.2f} > {ceiling:.2f}); dropping its priciest paid attractions"
            )
            draft = trim_to_cost(draft, ceiling, request.travelers)

    logger.info(
        f"{_log}Draft ready | source={draft.source}, days={len(draft.days)}, "
        f"attractions={draft.total_attractions}, meals={draft.total_meals}, "
        f"attraction_cost={draft.estimated_attraction_cost:.2f}, enriched={enriched}"
    )
    return {"draft_itinerary": draft.model_dump()}
