"""LLM client with retry logic."""

from tripgraph.shared.llm.client import (
    LLMClient,
    OpenAIChatClient,
    call_llm,
    complete_json,
    get_cached_client,
    llm_configured,
)

__all__ = [
    "LLMClient",
    "OpenAIChatClient",
    "call_llm",
    "complete_json",
    "get_cached_client",
    "llm_configured",
]
