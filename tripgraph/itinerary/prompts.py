"""
Prompt templates for itinerary drafting.
"""

from typing import List, Optional

from tripgraph.shared.contracts.trip_request import TripRequest

ITINERARY_SYSTEM_PROMPT = """You are a professional travel planner. Draft the day-by-day
skeleton of a trip: which attractions to visit when, and when to eat.

## Weather strategy tags
- indoor_priority: schedule at least one indoor attraction every day
- hot_weather: avoid outdoor visits between 12:00 and 14:00
- cold_weather: keep early-morning and evening activities indoors
- rain_prepared: prefer places with indoor alternatives
- outdoor_friendly: outdoor sights are fine

## Scheduling rules
- Morning 09:00-12:00, afternoon 14:00-18:00, evening 18:00-21:00
- Keep each day's attractions geographically close
- Three meals a day: breakfast ~08:00, lunch ~12:00, dinner ~18:00
- Respect the arrival time on the first day and the departure time on the last day
- ticket_price is the per-person price in local currency, 0 for free sights

## Output
Return a single JSON object and nothing else:
{
  "days": [
    {
      "day": 1,
      "date": "YYYY-MM-DD",
      "attractions": [
        {"time": "09:00", "name": "...", "duration": 120, "type": "museum", "ticket_price": 40, "indoor": true}
      ],
      "meal_slots": [
        {"time": "12:00", "meal_type": "lunch", "cuisine": "local"}
      ]
    }
  ]
}
meal_type is one of breakfast, lunch, dinner, snack. duration is in minutes.
"""

FEEDBACK_INSTRUCTIONS = {
    "reduce_attractions": "Schedule fewer paid attractions and favour free sights.",
    "downgrade_hotel": "Accommodation is being downgraded; keep the attraction plan lean.",
    "cheaper_transport": "Cluster each day's attractions tightly so they can be reached on foot or by transit.",
    "adjust_meals": "Leave room for casual, inexpensive meals.",
}


def build_itinerary_user_prompt(
    request: TripRequest,
    strategy_tags: List[str],
    clothing_advice: str = "",
    warnings: Optional[List[str]] = None,
    feedback: Optional[dict] = None,
) -> str:
    """Describe the trip, the weather strategy and any budget feedback."""
    lines = [
        "Draft an itinerary skeleton for this trip:",
        f"- Destination: {request.destination}",
    ]
    if request.origin:
        lines.append(f"- Origin: {request.origin}")
    lines.append(f"- Dates: {request.start_date} to {request.end_date} ({request.num_days} days)")
    if request.start_time:
        lines.append(f"- Arrival time on day 1: {request.start_time}")
    if request.end_time:
        lines.append(f"- Departure time on the last day: {request.end_time}")
    adults = request.adult_count if request.adult_count is not None else request.travelers - request.child_count
    lines.append(f"- Budget: {request.budget:.0f} for {request.travelers} traveler(s) ({adults} adults, {request.child_count} children)")
    lines.append(f"- Preferences: {', '.join(request.preferences) if request.preferences else 'none'}")
    if request.additional_notes:
        lines.append(f"- Notes: {request.additional_notes}")

    lines.append("")
    lines.append(f"Weather strategy tags: {', '.join(strategy_tags) or 'outdoor_friendly'}")
    if clothing_advice:
        lines.append(f"Clothing advice: {clothing_advice}")
    for warning in warnings or []:
        lines.append(f"Weather warning: {warning}")

    if feedback:
        action = feedback.get("action")
        lines.append("")
        lines.append("## Budget feedback from the previous draft")
        lines.append(f"The previous plan was over budget by {feedback.get('target_reduction', 0):.0f}.")
        lines.append(f"Requested change: {action}. {feedback.get('suggestion', '')}")
        if action in FEEDBACK_INSTRUCTIONS:
            lines.append(FEEDBACK_INSTRUCTIONS[action])

    return "\n".join(lines)
