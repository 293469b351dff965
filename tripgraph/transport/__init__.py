"""Transport step: mode choice and cost between consecutive attractions."""

from tripgraph.transport.nodes.transport import transport_neutral, transport_node

__all__ = ["transport_neutral", "transport_node"]
