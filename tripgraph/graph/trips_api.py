"""
FastAPI endpoints for the trip planning workflow.

Provides the API to plan a trip, resume a checkpointed run and read
back a run's state.
"""

import logging
import math
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from tripgraph.graph.checkpoint import create_checkpoint_store
from tripgraph.graph.config import config_from_env
from tripgraph.graph.runner import TripPlanningWorkflow
from tripgraph.observability.metrics import get_metrics_collector
from tripgraph.observability.tracer import get_default_tracer
from tripgraph.providers.factory import build_llm, build_providers
from tripgraph.shared.contracts.trip_request import TripRequest
from tripgraph.shared.exceptions import CheckpointError, ThreadNotFoundError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trips", tags=["trips"])

# Workflow instance (shared across requests)
_workflow: Optional[TripPlanningWorkflow] = None


def get_workflow() -> TripPlanningWorkflow:
    """Get or create the shared workflow, configured from the environment."""
    global _workflow
    if _workflow is None:
        config = config_from_env()
        _workflow = TripPlanningWorkflow(
            config=config,
            providers=build_providers(config),
            llm=build_llm(config),
            tracer=get_default_tracer(),
            metrics=get_metrics_collector(),
            store=create_checkpoint_store(config.checkpoint_backend, config.checkpoint_path),
        )
    return _workflow


def set_workflow(workflow: Optional[TripPlanningWorkflow]) -> None:
    """Replace the shared workflow (None rebuilds it from the environment on next use)."""
    global _workflow
    _workflow = workflow


# ============================================================================
# Request/Response Models
# ============================================================================


class PlanTripRequest(TripRequest):
    """Trip request plus an optional caller-chosen thread id."""

    thread_id: Optional[str] = Field(default=None, description="Reuse to resume a previous run")


class TripPlanResponse(BaseModel):
    """Outcome of a planning run."""

    thread_id: str
    outcome: Optional[str] = Field(default=None, description="within_budget, retry_ceiling_reached or incomplete")
    retry_count: int = 0
    final_itinerary: Optional[Dict[str, Any]] = None
    budget_result: Optional[Dict[str, Any]] = None
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class TripStateResponse(BaseModel):
    """Checkpointed state of a run."""

    thread_id: str
    complete: bool
    state: Dict[str, Any]


def json_safe(value: Any) -> Any:
    """Replace non-finite floats (zero-budget utilization) with None for JSON output."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [json_safe(v) for v in value]
    return value


def _plan_response(thread_id: str, state: Dict[str, Any]) -> TripPlanResponse:
    meta = state.get("meta") or {}
    return TripPlanResponse(
        thread_id=thread_id,
        outcome=meta.get("outcome"),
        retry_count=int(state.get("retry_count") or 0),
        final_itinerary=json_safe(state.get("final_itinerary")),
        budget_result=json_safe(state.get("budget_result")),
        errors=meta.get("errors") or [],
    )


def _checkpoint_unavailable(e: CheckpointError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Checkpoint store unavailable: {e}",
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/workflow/nodes")
async def list_workflow_nodes() -> Dict[str, List[Dict[str, str]]]:
    """Describe the nodes of the planning graph."""
    return {"nodes": get_workflow().workflow_nodes()}


@router.post("/plan", response_model=TripPlanResponse)
async def plan_trip(request: PlanTripRequest) -> TripPlanResponse:
    """
    Plan a trip end to end.

    Runs weather, drafting, the resource steps and the budget loop, and
    returns the final itinerary. A thread id that already has a checkpoint
    resumes that run instead.
    """
    thread_id = request.thread_id or str(uuid.uuid4())
    _log = f"[run={thread_id}] [graph=trip_planner] [api=plan] "
    logger.info(
        f"{_log}Planning request | destination={request.destination}, "
        f"dates={request.start_date}..{request.end_date}, budget={request.budget}, "
        f"travelers={request.travelers}"
    )

    trip_request = TripRequest.model_validate(request.model_dump(exclude={"thread_id"}))
    try:
        state = await get_workflow().run(trip_request, thread_id=thread_id)
    except CheckpointError as e:
        logger.error(f"{_log}Checkpoint failure: {e}")
        raise _checkpoint_unavailable(e)

    logger.info(f"{_log}Planning finished | outcome={(state.get('meta') or {}).get('outcome')}")
    return _plan_response(thread_id, state)


@router.post("/{thread_id}/resume", response_model=TripPlanResponse)
async def resume_trip(thread_id: str) -> TripPlanResponse:
    """Resume a checkpointed run from its last completed step."""
    _log = f"[run={thread_id}] [graph=trip_planner] [api=resume] "
    try:
        state = await get_workflow().resume(thread_id)
    except ThreadNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Thread {thread_id} not found")
    except CheckpointError as e:
        logger.error(f"{_log}Checkpoint failure: {e}")
        raise _checkpoint_unavailable(e)
    return _plan_response(thread_id, state)


@router.get("/{thread_id}", response_model=TripStateResponse)
async def get_trip(thread_id: str) -> TripStateResponse:
    """Return the latest checkpointed state of a run."""
    try:
        state = await get_workflow().load_state(thread_id)
    except CheckpointError as e:
        raise _checkpoint_unavailable(e)
    if state is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Thread {thread_id} not found")
    return TripStateResponse(
        thread_id=thread_id,
        complete=state.get("final_itinerary") is not None,
        state=json_safe(state),
    )
