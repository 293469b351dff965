"""
Trip planning state schema.

Defines the state that flows through the trip planning graph. Every slice
is the model_dump() of its pydantic contract, so the whole state is plain
JSON-compatible data and can be checkpointed as-is.
"""

import operator
import time
from typing import Any, Dict, Optional, TypedDict, Annotated

from tripgraph.shared.contracts.trip_request import TripRequest


def merge_meta(current: Optional[Dict[str, Any]], update: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Reducer for the run metadata.

    Execution records and errors are appended, started_at is kept from the
    first write, outcome and finished_at are last-write. The fan-out steps
    update meta in the same superstep, so this has to compose in any order.
    """
    current = current or {}
    update = update or {}
    return {
        "started_at": current.get("started_at") or update.get("started_at"),
        "finished_at": update.get("finished_at") or current.get("finished_at"),
        "outcome": update.get("outcome") or current.get("outcome"),
        "agent_executions": list(current.get("agent_executions") or [])
        + list(update.get("agent_executions") or []),
        "errors": list(current.get("errors") or []) + list(update.get("errors") or []),
    }


class TripState(TypedDict):
    """
    State schema for the trip planning graph.

    Slices written by more than one step in the same superstep (meta) or
    accumulated across attempts (retry_count) carry reducers. Everything
    else is replaced wholesale by the step that owns it.
    """

    # Input
    thread_id: Optional[str]
    user_input: dict

    # Step outputs
    weather: Optional[dict]
    draft_itinerary: Optional[dict]
    accommodation: Optional[dict]
    transport: Optional[dict]
    dining: Optional[dict]
    budget_result: Optional[dict]
    final_itinerary: Optional[dict]

    # Control
    retry_count: Annotated[int, operator.add]
    meta: Annotated[dict, merge_meta]


def create_initial_state(request: TripRequest, thread_id: Optional[str] = None) -> TripState:
    """Fresh state for a new run."""
    return {
        "thread_id": thread_id,
        "user_input": request.model_dump(),
        "weather": None,
        "draft_itinerary": None,
        "accommodation": None,
        "transport": None,
        "dining": None,
        "budget_result": None,
        "final_itinerary": None,
        "retry_count": 0,
        "meta": {
            "started_at": time.time(),
            "finished_at": None,
            "outcome": None,
            "agent_executions": [],
            "errors": [],
        },
    }


def get_request(state: TripState) -> TripRequest:
    return TripRequest.model_validate(state["user_input"])


def current_attempt(state: TripState) -> int:
    return int(state.get("retry_count") or 0)


def usable_draft(state: TripState) -> Optional[dict]:
    """The current draft when it has at least one day, otherwise None."""
    draft = state.get("draft_itinerary")
    if not draft or not draft.get("days"):
        return None
    return draft
