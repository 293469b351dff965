"""
Transport node.

Costs the moves between consecutive attractions of each day, choosing
the cheapest sensible mode for the distance.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

from tripgraph.graph.state import TripState, current_attempt, get_request, usable_draft
from tripgraph.graph.steps import StepContext
from tripgraph.shared.contracts.transport_output import TransportMode, TransportResult, TransportSegment
from tripgraph.shared.geo import haversine_m
from tripgraph.transport.routing import (
    DEFAULT_POLICY,
    cycling_fare,
    direct_estimate,
    taxi_fare,
    transit_fare,
)


logger = logging.getLogger(__name__)


def transport_neutral(state: TripState) -> Dict[str, Any]:
    return {"transport": TransportResult(attempt=current_attempt(state)).model_dump()}


def _targets_transport(state: TripState) -> bool:
    budget_result = state.get("budget_result") or {}
    feedback = budget_result.get("feedback") or {}
    return not budget_result.get("is_within_budget", True) and feedback.get("action") == "cheaper_transport"


def day_legs(draft: dict) -> List[Tuple[int, dict, dict]]:
    """Consecutive pairs of located attractions, per day."""
    legs = []
    for day in draft.get("days") or []:
        located = [a for a in day.get("attractions") or [] if a.get("location")]
        for origin, destination in zip(located, located[1:]):
            legs.append((day["day"], origin, destination))
    return legs


async def _route(ctx: StepContext, mode: str, origin: Tuple[float, float], destination: Tuple[float, float], city: str):
    return await ctx.call_tool(
        f"route.{mode}",
        ctx.providers.routes.estimate,
        origin=origin,
        destination=destination,
        mode=mode,
        city=city,
    )


async def plan_leg(
    ctx: StepContext,
    day: int,
    origin: dict,
    destination: dict,
    city: str,
    travelers: int,
    cheaper: bool,
) -> TransportSegment:
    """
    Choose a mode for one leg.

    Walking under the walking limit, cycling up to 5 km, then transit, with a
    taxi as the last resort (never when cheaper transport was requested).
    Provider failures fall back to the straight-line estimate.
    """
    start = (origin["location"]["lat"], origin["location"]["lng"])
    end = (destination["location"]["lat"], destination["location"]["lng"])
    walking_limit = DEFAULT_POLICY.CHEAP_WALKING_LIMIT_M if cheaper else DEFAULT_POLICY.WALKING_LIMIT_M

    def segment(mode: TransportMode, duration: float, distance: float, fare: float) -> TransportSegment:
        return TransportSegment(
            day=day,
            origin=origin["name"],
            destination=destination["name"],
            mode=mode,
            duration_min=round(duration, 1),
            distance_m=round(distance, 1),
            cost=round(fare * travelers, 2),
        )

    try:
        walking = await _route(ctx, "walking", start, end, city)
        if walking is not None and walking.distance_m < walking_limit:
            return segment(TransportMode.WALKING, walking.duration_min, walking.distance_m, 0.0)

        if walking is not None and walking.distance_m < DEFAULT_POLICY.CYCLING_LIMIT_M:
            cycling = await _route(ctx, "cycling", start, end, city)
            if cycling is not None:
                return segment(TransportMode.CYCLING, cycling.duration_min, cycling.distance_m,
                               cycling_fare(cycling.duration_min))

        transit = await _route(ctx, "transit", start, end, city)
        if transit is not None:
            fare = transit.cost if transit.cost is not None else transit_fare(transit.distance_m)
            return segment(TransportMode.TRANSIT, transit.duration_min + DEFAULT_POLICY.TRANSIT_WAIT_MIN,
                           transit.distance_m, fare)

        if not cheaper:
            driving = await _route(ctx, "driving", start, end, city)
            if driving is not None:
                fare = driving.cost if driving.cost else taxi_fare(driving.distance_m)
                return segment(TransportMode.DRIVING, driving.duration_min + DEFAULT_POLICY.TAXI_WAIT_MIN,
                               driving.distance_m, fare)
    except Exception as e:
        ctx.record_error(
            f"Route lookup {origin['name']} -> {destination['name']} failed, "
            f"using straight-line estimate: {type(e).__name__}: {e}"
        )

    distance = haversine_m(start[0], start[1], end[0], end[1])
    mode, duration, fare = direct_estimate(distance, walking_limit)
    return segment(mode, duration, distance, fare)


def summarize_segments(segments: List[TransportSegment], attempt: int) -> TransportResult:
    counts = Counter(s.mode for s in segments)
    return TransportResult(
        segments=segments,
        total_time_min=round(sum(s.duration_min for s in segments), 1),
        total_distance_m=round(sum(s.distance_m for s in segments), 1),
        total_cost=round(sum(s.cost for s in segments), 2),
        recommended_modes=[mode for mode, _ in counts.most_common()],
        attempt=attempt,
    )


async def transport_node(state: TripState, ctx: StepContext) -> Dict[str, Any]:
    """
    Plan local transport between the drafted attractions.

    Returns:
        State updates with transport
    """
    _log = ctx.log_prefix
    attempt = current_attempt(state)
    draft = usable_draft(state)
    if draft is None:
        logger.warning(f"{_log}No usable draft, skipping transport")
        ctx.skipped = True
        return transport_neutral(state)

    request = get_request(state)
    cheaper = _targets_transport(state)
    if cheaper:
        logger.info(f"{_log}Applying cheaper_transport feedback")

    segments = []
    for day, origin, destination in day_legs(draft):
        segments.append(
            await plan_leg(ctx, day, origin, destination, request.destination, request.travelers, cheaper)
        )

    result = summarize_segments(segments, attempt)

    previous: Optional[dict] = state.get("transport")
    if cheaper and previous and previous.get("segments") and result.total_cost > previous.get("total_cost", 0.0):
        logger.info(f"{_log}New routes are not cheaper than the previous ones; keeping previous plan")
        result = TransportResult.model_validate({**previous, "attempt": attempt})

    logger.info(
        f"{_log}Planned {len(result.segments)} segment(s) | total_cost={result.total_cost:.2f}, "
        f"modes={', '.join(result.recommended_modes) or 'none'}"
    )
    return {"transport": result.model_dump()}
