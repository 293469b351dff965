"""
Shared infrastructure for all steps.

Modules:
- llm: OpenAI client with retry logic
- logging: Structured JSON logging
- contracts: Step output contracts for handoffs
- exceptions: Error hierarchy
"""

from tripgraph.shared.llm.client import get_cached_client, call_llm
from tripgraph.shared.logging.config import setup_logging, log_state_transition

__all__ = [
    "get_cached_client",
    "call_llm",
    "setup_logging",
    "log_state_transition",
]
