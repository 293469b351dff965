"""
Final itinerary assembly.

Pure functions that merge whatever the state holds into the user-facing
plan. Missing slices produce empty sections, never errors, so a run that
lost every provider still ends with an itinerary.
"""

from typing import Dict, List, Optional

from tripgraph.shared.contracts.final_itinerary import (
    BudgetVerdict,
    EstimatedCost,
    FinalAccommodation,
    FinalDay,
    FinalItinerary,
    FinalTransport,
    PlannedActivity,
    PlannedMeal,
)
from tripgraph.shared.contracts.trip_request import TripRequest

CONTINGENCY_SHARE = 0.05

OUTCOME_WITHIN_BUDGET = "within_budget"
OUTCOME_CEILING_REACHED = "retry_ceiling_reached"
OUTCOME_INCOMPLETE = "incomplete"


def _meals_by_day(dining: Optional[dict]) -> Dict[int, List[dict]]:
    grouped: Dict[int, List[dict]] = {}
    for rec in (dining or {}).get("recommendations") or []:
        grouped.setdefault(rec["day"], []).append(rec)
    return grouped


def build_days(request: TripRequest, draft: Optional[dict], dining: Optional[dict]) -> List[FinalDay]:
    """Activities from the draft plus that day's restaurants, or the bare meal slots."""
    meals_by_day = _meals_by_day(dining)
    days: List[FinalDay] = []
    draft_days = (draft or {}).get("days") or []
    if not draft_days:
        return [FinalDay(day=i + 1, date=d) for i, d in enumerate(request.dates)]

    for day in draft_days:
        activities = [
            PlannedActivity(
                time=a["time"],
                name=a["name"],
                duration=a.get("duration") or 0,
                type=a.get("type"),
                ticket_price=a.get("ticket_price") or 0.0,
            )
            for a in day.get("attractions") or []
        ]
        picks = meals_by_day.get(day["day"])
        if picks:
            meals = [
                PlannedMeal(
                    time=m["time"],
                    meal_type=m["meal_type"],
                    name=m["name"],
                    cuisine=m.get("cuisine"),
                    avg_price=m.get("avg_price"),
                )
                for m in picks
            ]
        else:
            meals = [
                PlannedMeal(time=s["time"], meal_type=s["meal_type"], cuisine=s.get("cuisine"))
                for s in day.get("meal_slots") or []
            ]
        meals.sort(key=lambda m: m.time)
        days.append(FinalDay(day=day["day"], date=day["date"], activities=activities, meals=meals))
    return days


def estimate_costs(
    accommodation: Optional[dict],
    transport: Optional[dict],
    dining: Optional[dict],
    draft: Optional[dict],
    budget_result: Optional[dict],
) -> EstimatedCost:
    """Cost lines plus a contingency allowance on top of the computed total."""
    if budget_result:
        breakdown = budget_result["cost_breakdown"]
    else:
        breakdown = {
            "accommodation": (accommodation or {}).get("total_cost") or 0.0,
            "transport": (transport or {}).get("total_cost") or 0.0,
            "dining": (dining or {}).get("total_cost") or 0.0,
            "attractions": (draft or {}).get("estimated_attraction_cost") or 0.0,
        }
    subtotal = sum(breakdown[k] for k in ("accommodation", "transport", "dining", "attractions"))
    other = round(subtotal * CONTINGENCY_SHARE, 2)
    return EstimatedCost(
        accommodation=round(breakdown["accommodation"], 2),
        transport=round(breakdown["transport"], 2),
        dining=round(breakdown["dining"], 2),
        attractions=round(breakdown["attractions"], 2),
        other=other,
        total=round(subtotal + other, 2),
    )


def build_summary(request: TripRequest, days: List[FinalDay], accommodation: Optional[FinalAccommodation],
                  total: float) -> str:
    highlights = [a.name for day in days for a in day.activities][:3]
    parts = [f"{len(days)}-day trip to {request.destination}"]
    if highlights:
        parts.append(f"visiting {', '.join(highlights)}")
    if accommodation:
        parts.append(f"staying at {accommodation.name}")
    return f"{', '.join(parts)}; estimated total {total:.0f}."


def build_final_itinerary(state: dict, outcome: str) -> FinalItinerary:
    """
    Assemble the final itinerary from the current state.

    Args:
        state: Workflow state (any slice may be missing)
        outcome: Why the run is finishing (within_budget, retry_ceiling_reached, incomplete)

    Returns:
        FinalItinerary
    """
    request = TripRequest.model_validate(state["user_input"])
    draft = state.get("draft_itinerary")
    accommodation = state.get("accommodation")
    transport = state.get("transport")
    dining = state.get("dining")
    weather = state.get("weather")
    budget_result = state.get("budget_result")

    days = build_days(request, draft, dining)

    final_accommodation = None
    selected = (accommodation or {}).get("selected")
    if selected:
        final_accommodation = FinalAccommodation(
            name=selected["name"],
            address=selected.get("address"),
            price_per_night=selected["price_per_night"],
            nights=accommodation.get("nights") or 0,
            total_cost=accommodation.get("total_cost") or 0.0,
        )

    final_transport = FinalTransport(
        modes=list((transport or {}).get("recommended_modes") or []),
        segments=len((transport or {}).get("segments") or []),
        total_cost=(transport or {}).get("total_cost") or 0.0,
    )

    costs = estimate_costs(accommodation, transport, dining, draft, budget_result)

    weather_notes: List[str] = []
    if weather:
        if weather.get("clothing_advice"):
            weather_notes.append(weather["clothing_advice"])
        weather_notes.extend(weather.get("warnings") or [])

    verdict = BudgetVerdict(
        budget=request.budget,
        within_budget=budget_result.get("is_within_budget") if budget_result else None,
        utilization=budget_result.get("budget_utilization") if budget_result else None,
        retry_count=int(state.get("retry_count") or 0),
        outcome=outcome,
    )

    return FinalItinerary(
        destination=request.destination,
        start_date=request.start_date,
        end_date=request.end_date,
        travelers=request.travelers,
        summary=build_summary(request, days, final_accommodation, costs.total),
        days=days,
        accommodation=final_accommodation,
        transport=final_transport,
        estimated_cost=costs,
        weather_notes=weather_notes,
        budget=verdict,
    )


def minimal_itinerary(state: dict, outcome: str) -> FinalItinerary:
    """Bare itinerary when full assembly is impossible."""
    request = TripRequest.model_validate(state["user_input"])
    return FinalItinerary(
        destination=request.destination,
        start_date=request.start_date,
        end_date=request.end_date,
        travelers=request.travelers,
        summary="The itinerary could not be fully assembled; please try again.",
        days=[FinalDay(day=i + 1, date=d) for i, d in enumerate(request.dates)],
        budget=BudgetVerdict(budget=request.budget, retry_count=int(state.get("retry_count") or 0), outcome=outcome),
    )
