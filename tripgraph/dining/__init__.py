"""Dining step: restaurant per meal slot and meal pricing."""

from tripgraph.dining.nodes.dining import dining_neutral, dining_node

__all__ = ["dining_neutral", "dining_node"]
