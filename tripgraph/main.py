"""
FastAPI application entry point.

Assembles the FastAPI app with the trip planning and observability routers.
"""

import logging
import os
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tripgraph.graph.trips_api import router as trips_router
from tripgraph.observability.observability_api import router as observability_router
from tripgraph.shared.logging.config import setup_logging


# ============================================================================
# Logging configuration (single source of truth for all steps)
# ============================================================================
LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s"
)

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,  # Override any prior basicConfig calls
)

# Quiet noisy third-party loggers
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)

# JSON lines for the tripgraph loggers
if os.environ.get("TRIPGRAPH_LOG_JSON", "").lower() in ("1", "true", "yes"):
    setup_logging(os.environ.get("TRIPGRAPH_LOG_LEVEL", "INFO"))


# Create FastAPI app
app = FastAPI(
    title="TripGraph",
    description="Multi-agent trip planner built with LangGraph",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(trips_router)
app.include_router(observability_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "TripGraph",
        "version": "0.1.0",
        "endpoints": {
            "trips": "/api/trips",
            "observability": "/api/observability",
        },
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
