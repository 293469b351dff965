"""
Draft construction helpers.

Builds itinerary drafts three ways: the neutral skeleton, the
deterministic planner over POI search results, and validation of an LLM
JSON payload. All of them end in `with_totals`, which recomputes the
counts and the attraction cost from the days.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from tripgraph.providers.interfaces import Venue
from tripgraph.shared.contracts.itinerary_draft import (
    AttractionSlot,
    DraftDay,
    DraftItinerary,
    Location,
    MealSlot,
    MealType,
)
from tripgraph.shared.contracts.trip_request import TripRequest
from tripgraph.shared.contracts.weather_output import StrategyTag
from tripgraph.shared.exceptions import ParseError

DEFAULT_MEALS = (
    ("08:00", MealType.BREAKFAST),
    ("12:00", MealType.LUNCH),
    ("18:00", MealType.DINNER),
)

ATTRACTION_TIMES = ("09:00", "13:30", "15:30", "19:00")

RELAXED_TAGS = {"relaxed", "slow", "leisure", "悠闲"}
INTENSE_TAGS = {"intense", "packed", "fast", "紧凑"}

# Per-person cost used for attractions whose provider gives no price
UNKNOWN_TICKET_PRICE = 0.0


def default_meal_slots() -> List[MealSlot]:
    return [MealSlot(time=time, meal_type=meal_type) for time, meal_type in DEFAULT_MEALS]


def _within_window(time: str, day_index: int, num_days: int, request: TripRequest) -> bool:
    """Drop slots before arrival on day one and after departure on the last day."""
    if day_index == 0 and request.start_time and time < request.start_time:
        return False
    if day_index == num_days - 1 and request.end_time and time > request.end_time:
        return False
    return True


def with_totals(draft: DraftItinerary, travelers: int) -> DraftItinerary:
    """Recompute counts and the party's attraction cost."""
    draft.total_attractions = sum(len(day.attractions) for day in draft.days)
    draft.total_meals = sum(len(day.meal_slots) for day in draft.days)
    per_person = sum(a.ticket_price for day in draft.days for a in day.attractions)
    draft.estimated_attraction_cost = round(per_person * travelers, 2)
    return draft


def trim_to_cost(draft: DraftItinerary, max_cost: float, travelers: int) -> DraftItinerary:
    """Drop the priciest paid attractions until the party's attraction cost fits max_cost."""
    paid = [
        (attraction.ticket_price, day)
        for day in draft.days
        for attraction in day.attractions
        if attraction.ticket_price > 0
    ]
    paid.sort(key=lambda item: item[0], reverse=True)

    with_totals(draft, travelers)
    for price, day in paid:
        if draft.estimated_attraction_cost <= max_cost:
            break
        index = next(i for i, a in enumerate(day.attractions) if a.ticket_price == price)
        day.attractions.pop(index)
        with_totals(draft, travelers)
    return draft


def skeleton_draft(request: TripRequest, attempt: int = 0) -> DraftItinerary:
    """One empty day per date with the default meal slots."""
    days = [
        DraftDay(day=i + 1, date=day_date, attractions=[], meal_slots=default_meal_slots())
        for i, day_date in enumerate(request.dates)
    ]
    return with_totals(DraftItinerary(days=days, attempt=attempt, source="neutral"), request.travelers)


def attractions_per_day(request: TripRequest) -> int:
    tags = set(request.all_tags)
    if tags & RELAXED_TAGS:
        return 2
    if tags & INTENSE_TAGS:
        return 4
    return 3


def _venue_to_slot(venue: Venue, time: str) -> AttractionSlot:
    location = Location(lat=venue.lat, lng=venue.lng) if venue.has_location else None
    category = venue.category.lower()
    duration = 150 if "museum" in category or "博物馆" in category else 120
    return AttractionSlot(
        time=time,
        name=venue.name,
        duration=duration,
        location=location,
        type=venue.category or None,
        ticket_price=venue.price if venue.price is not None else UNKNOWN_TICKET_PRICE,
        indoor=venue.indoor,
    )


def plan_from_venues(
    request: TripRequest,
    venues: List[Venue],
    strategy_tags: List[str],
    feedback_action: Optional[str] = None,
    attempt: int = 0,
) -> DraftItinerary:
    """
    Deterministic draft from attraction search results.

    Attractions are spread over the days without repeats. Indoor venues go
    first under indoor_priority; reduce_attractions drops one visit per day
    and prefers the cheapest tickets.
    """
    per_day = attractions_per_day(request)
    reduce = feedback_action == "reduce_attractions"
    if reduce:
        per_day = max(1, per_day - 1)

    indoor_first = StrategyTag.INDOOR_PRIORITY.value in strategy_tags

    def sort_key(venue: Venue):
        indoor_rank = 0 if (indoor_first and venue.indoor) else 1
        price = venue.price or 0.0
        rating = venue.rating or 0.0
        if reduce:
            return (price, indoor_rank, -rating)
        return (indoor_rank, -rating, price)

    pool = sorted(venues, key=sort_key)
    num_days = request.num_days
    days: List[DraftDay] = []
    cursor = 0
    for i, day_date in enumerate(request.dates):
        times = [t for t in ATTRACTION_TIMES[:per_day] if _within_window(t, i, num_days, request)]
        attractions = []
        for time in times:
            if cursor >= len(pool):
                break
            attractions.append(_venue_to_slot(pool[cursor], time))
            cursor += 1
        meals = [m for m in default_meal_slots() if _within_window(m.time, i, num_days, request)]
        days.append(DraftDay(day=i + 1, date=day_date, attractions=attractions, meal_slots=meals))

    draft = DraftItinerary(days=days, attempt=attempt, feedback_applied=feedback_action, source="rules")
    return with_totals(draft, request.travelers)


def _coerce_duration(value: Any) -> int:
    if isinstance(value, (int, float)):
        return int(value)
    digits = "".join(ch for ch in str(value or "") if ch.isdigit() or ch == ".")
    if not digits:
        return 120
    number = float(digits)
    # "2 hours" / "2小时" style values
    return int(number * 60) if number <= 12 else int(number)


def parse_llm_draft(
    payload: Dict[str, Any],
    request: TripRequest,
    feedback_action: Optional[str] = None,
    attempt: int = 0,
) -> DraftItinerary:
    """
    Validate an LLM draft payload.

    Days are re-dated against the trip dates; extra days are dropped and
    missing days get default meals.

    Raises:
        ParseError: If the payload has no usable days
    """
    raw_days = payload.get("days")
    if not isinstance(raw_days, list) or not raw_days:
        raise ParseError("LLM draft contains no days")

    dates = request.dates
    days: List[DraftDay] = []
    try:
        for i, day_date in enumerate(dates):
            raw = raw_days[i] if i < len(raw_days) and isinstance(raw_days[i], dict) else {}
            attractions = []
            for item in raw.get("attractions") or []:
                if not isinstance(item, dict) or not item.get("name"):
                    continue
                attractions.append(AttractionSlot(
                    time=str(item.get("time") or "09:00"),
                    name=str(item["name"]),
                    duration=_coerce_duration(item.get("duration")),
                    type=item.get("type"),
                    ticket_price=float(item.get("ticket_price") or 0.0),
                    indoor=item.get("indoor"),
                    location=item.get("location") or None,
                ))
            raw_meals = raw.get("meal_slots") or raw.get("mealSlots") or []
            meals = [
                MealSlot(
                    time=str(m.get("time") or "12:00"),
                    meal_type=m.get("meal_type") or m.get("mealType"),
                    cuisine=m.get("cuisine"),
                )
                for m in raw_meals
                if isinstance(m, dict)
            ] or default_meal_slots()
            days.append(DraftDay(day=i + 1, date=day_date, attractions=attractions, meal_slots=meals))
    except (ValidationError, TypeError, ValueError) as e:
        raise ParseError(f"LLM draft failed validation: {e}") from e

    draft = DraftItinerary(days=days, attempt=attempt, feedback_applied=feedback_action, source="llm")
    return with_totals(draft, request.travelers)
