"""Finalize step: merge all slices into the user-facing itinerary."""

from tripgraph.finalize.assembly import build_final_itinerary, minimal_itinerary
from tripgraph.finalize.nodes.finalize import create_finalize_neutral, create_finalize_node

__all__ = ["build_final_itinerary", "create_finalize_neutral", "create_finalize_node", "minimal_itinerary"]
