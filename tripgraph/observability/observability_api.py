"""
FastAPI endpoints for traces and metrics.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import PlainTextResponse

from tripgraph.observability.metrics import get_metrics_collector
from tripgraph.observability.tracer import get_default_tracer


router = APIRouter(prefix="/api/observability", tags=["observability"])


@router.get("/traces")
async def list_traces() -> Dict[str, List[Dict[str, Any]]]:
    """Recent workflow traces, oldest first."""
    return {"traces": get_default_tracer().get_traces()}


@router.get("/traces/{trace_id}")
async def get_trace(trace_id: str) -> Dict[str, Any]:
    trace = get_default_tracer().get_trace(trace_id)
    if trace is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Trace {trace_id} not found")
    return trace


@router.delete("/traces")
async def clear_traces() -> Dict[str, str]:
    get_default_tracer().clear()
    return {"status": "cleared"}


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics() -> str:
    """Prometheus text exposition of the process metrics."""
    return get_metrics_collector().export_prometheus()


@router.get("/metrics/summary")
async def metrics_summary() -> Dict[str, Any]:
    return get_metrics_collector().summary()
