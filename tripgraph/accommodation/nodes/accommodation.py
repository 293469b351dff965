"""
Accommodation node.

Finds hotels near the centre of the drafted attractions and prices the
stay for the chosen tier.
"""

import logging
from typing import Any, Dict, List, Optional

from tripgraph.accommodation.pricing import (
    DEFAULT_POLICY,
    TIER_KEYWORDS,
    downgrade,
    nightly_price,
    rooms_needed,
    select_tier,
    stay_nights,
)
from tripgraph.graph.state import TripState, current_attempt, get_request, usable_draft
from tripgraph.graph.steps import StepContext
from tripgraph.providers.interfaces import CATEGORY_HOTEL, Venue
from tripgraph.shared.contracts.accommodation_output import (
    AccommodationResult,
    HotelRecommendation,
    PriceTier,
)
from tripgraph.shared.contracts.itinerary_draft import Location
from tripgraph.shared.geo import centroid, haversine_km


logger = logging.getLogger(__name__)


def accommodation_neutral(state: TripState) -> Dict[str, Any]:
    return {"accommodation": AccommodationResult(attempt=current_attempt(state)).model_dump()}


def attraction_centroid(draft: dict) -> Optional[Location]:
    """Mean position of every located attraction in the draft."""
    points = [
        (a["location"]["lat"], a["location"]["lng"])
        for day in draft.get("days") or []
        for a in day.get("attractions") or []
        if a.get("location")
    ]
    center = centroid(points)
    return Location(lat=center[0], lng=center[1]) if center else None


def _targets_accommodation(state: TripState) -> bool:
    budget_result = state.get("budget_result") or {}
    feedback = budget_result.get("feedback") or {}
    return not budget_result.get("is_within_budget", True) and feedback.get("action") == "downgrade_hotel"


def build_recommendations(
    venues: List[Venue],
    tier: PriceTier,
    center: Optional[Location],
    limit: int,
) -> List[HotelRecommendation]:
    """Price each venue for the tier; sort by distance to the centre when it is known."""
    recommendations = []
    for venue in venues:
        location = Location(lat=venue.lat, lng=venue.lng) if venue.has_location else None
        distance = None
        if center is not None and location is not None:
            distance = round(haversine_km(center.lat, center.lng, location.lat, location.lng), 2)
        recommendations.append(
            HotelRecommendation(
                name=venue.name,
                address=venue.address,
                location=location,
                price_per_night=nightly_price(tier, venue.price, venue.rating),
                rating=venue.rating,
                distance_km=distance,
                tier=tier,
            )
        )
    if center is not None:
        recommendations.sort(key=lambda r: (r.distance_km is None, r.distance_km or 0.0, -(r.rating or 0.0)))
    return recommendations[:limit]


async def accommodation_node(state: TripState, ctx: StepContext) -> Dict[str, Any]:
    """
    Recommend hotels and cost the stay.

    Returns:
        State updates with accommodation
    """
    _log = ctx.log_prefix
    attempt = current_attempt(state)
    draft = usable_draft(state)
    if draft is None:
        logger.warning(f"{_log}No usable draft, skipping accommodation")
        ctx.skipped = True
        return accommodation_neutral(state)

    request = get_request(state)
    nights = stay_nights(len(draft["days"]))
    rooms = rooms_needed(request.travelers)
    tier = select_tier(request.budget, nights, request.travelers, request.all_tags)

    downgrading = _targets_accommodation(state)
    if downgrading:
        tier = downgrade(tier)
        logger.info(f"{_log}Applying downgrade_hotel feedback | tier={tier.value}")

    center = attraction_centroid(draft)
    venues = await ctx.search_venues(
        category=CATEGORY_HOTEL,
        keywords=TIER_KEYWORDS[tier],
        city=request.destination,
        near=(center.lat, center.lng) if center else None,
        radius=DEFAULT_POLICY.SEARCH_RADIUS_M,
        limit=10,
    )
    if not venues:
        logger.warning(f"{_log}No hotels found in {request.destination}")
        return accommodation_neutral(state)

    recommendations = build_recommendations(venues, tier, center, DEFAULT_POLICY.MAX_RECOMMENDATIONS)
    if downgrading:
        selected = min(recommendations, key=lambda r: r.price_per_night)
    else:
        selected = recommendations[0]

    result = AccommodationResult(
        recommendations=recommendations,
        selected=selected,
        nights=nights,
        rooms=rooms,
        total_cost=round(selected.price_per_night * nights * rooms, 2),
        centroid=center,
        tier=tier,
        attempt=attempt,
    )

    previous = state.get("accommodation")
    if downgrading and previous and result.total_cost > previous.get("total_cost", 0.0):
        logger.info(f"{_log}Downgraded stay is not cheaper than the previous one; keeping previous selection")
        result = AccommodationResult.model_validate({**previous, "attempt": attempt})

    logger.info(
        f"{_log}Selected '{result.selected.name if result.selected else None}' | tier={result.tier}, "
        f"nights={nights}, rooms={rooms}, total={result.total_cost:.2f}"
    )
    return {"accommodation": result.model_dump()}
