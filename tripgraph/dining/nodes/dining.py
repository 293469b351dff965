"""
Dining node.

Finds a restaurant for every meal slot of the draft, near where the
travellers will be at that time, and prices each meal from the budget.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from tripgraph.dining.pricing import (
    DEFAULT_POLICY,
    MEAL_KEYWORDS,
    daily_dining_budget,
    infer_cuisine,
    meal_price,
)
from tripgraph.graph.state import TripState, current_attempt, get_request, usable_draft
from tripgraph.graph.steps import StepContext
from tripgraph.providers.interfaces import CATEGORY_RESTAURANT
from tripgraph.shared.contracts.dining_output import DiningRecommendation, DiningResult
from tripgraph.shared.contracts.itinerary_draft import Location, MealType


logger = logging.getLogger(__name__)


def dining_neutral(state: TripState) -> Dict[str, Any]:
    return {"dining": DiningResult(attempt=current_attempt(state)).model_dump()}


def _targets_dining(state: TripState) -> bool:
    budget_result = state.get("budget_result") or {}
    feedback = budget_result.get("feedback") or {}
    return not budget_result.get("is_within_budget", True) and feedback.get("action") == "adjust_meals"


def anchor_location(day: dict, meal_time: str) -> Optional[Tuple[float, float]]:
    """Location of the latest located attraction starting at or before the meal."""
    anchor = None
    for attraction in day.get("attractions") or []:
        if attraction.get("location") and attraction["time"] <= meal_time:
            anchor = (attraction["location"]["lat"], attraction["location"]["lng"])
    return anchor


async def dining_node(state: TripState, ctx: StepContext) -> Dict[str, Any]:
    """
    Recommend restaurants for every meal slot.

    Returns:
        State updates with dining
    """
    _log = ctx.log_prefix
    attempt = current_attempt(state)
    draft = usable_draft(state)
    if draft is None:
        logger.warning(f"{_log}No usable draft, skipping dining")
        ctx.skipped = True
        return dining_neutral(state)

    request = get_request(state)
    cheaper = _targets_dining(state)
    discount = DEFAULT_POLICY.FEEDBACK_DISCOUNT if cheaper else 1.0
    if cheaper:
        logger.info(f"{_log}Applying adjust_meals feedback | discount={discount}")

    daily_budget = daily_dining_budget(request.budget, len(draft["days"]))
    recommendations: List[DiningRecommendation] = []

    for day in draft["days"]:
        slots = day.get("meal_slots") or []
        meals_per_day = len(slots) or DEFAULT_POLICY.DEFAULT_MEALS_PER_DAY
        for slot in slots:
            meal_type = MealType(slot["meal_type"])
            keywords = slot.get("cuisine") or MEAL_KEYWORDS[meal_type]
            venues = await ctx.search_venues(
                category=CATEGORY_RESTAURANT,
                keywords=keywords,
                city=request.destination,
                near=anchor_location(day, slot["time"]),
                radius=DEFAULT_POLICY.SEARCH_RADIUS_M,
                limit=5,
            )
            if not venues:
                logger.info(f"{_log}No restaurant for day {day['day']} {meal_type.value}")
                continue

            venue = max(venues, key=lambda v: v.rating or 0.0)
            recommendations.append(
                DiningRecommendation(
                    day=day["day"],
                    meal_type=meal_type,
                    time=slot["time"],
                    name=venue.name,
                    cuisine=infer_cuisine(venue.category),
                    address=venue.address,
                    location=Location(lat=venue.lat, lng=venue.lng) if venue.has_location else None,
                    rating=venue.rating,
                    avg_price=meal_price(meal_type, daily_budget, meals_per_day, discount),
                )
            )

    total = round(sum(r.avg_price for r in recommendations) * request.travelers, 2)
    result = DiningResult(recommendations=recommendations, total_cost=total, attempt=attempt)

    previous = state.get("dining")
    if cheaper and previous and previous.get("recommendations") and result.total_cost > previous.get("total_cost", 0.0):
        logger.info(f"{_log}Adjusted meals are not cheaper than before; keeping previous plan")
        result = DiningResult.model_validate({**previous, "attempt": attempt})

    logger.info(f"{_log}Recommended {len(result.recommendations)} meal(s) | total_cost={result.total_cost:.2f}")
    return {"dining": result.model_dump()}
