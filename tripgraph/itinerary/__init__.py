"""Itinerary draft step: the per-day skeleton of attractions and meal slots."""

from tripgraph.itinerary.nodes.itinerary import itinerary_neutral, itinerary_node

__all__ = ["itinerary_neutral", "itinerary_node"]
