"""Accommodation step: hotel search around the attraction centroid and stay pricing."""

from tripgraph.accommodation.nodes.accommodation import accommodation_neutral, accommodation_node

__all__ = ["accommodation_neutral", "accommodation_node"]
