"""
OpenAI client with retry logic.

Provides a cached async client, a chat wrapper with automatic retries using
tenacity, and a JSON helper used by the weather and itinerary steps. The LLM
is optional: without OPENAI_API_KEY the steps fall back to their rule-based
paths.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Protocol

from openai import AsyncOpenAI
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
from dotenv import load_dotenv

from tripgraph.shared.parsing import parse_json_object

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"

# Module-level cache for the OpenAI client
_client: Optional[AsyncOpenAI] = None


class LLMClient(Protocol):
    """Anything that can answer a chat completion request."""

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        ...


def llm_configured() -> bool:
    return bool(os.environ.get("OPENAI_API_KEY"))


def get_cached_client(timeout: float = 60.0) -> AsyncOpenAI:
    """
    Returns a cached instance of the async OpenAI client.

    Uses OPENAI_API_KEY (and OPENAI_BASE_URL for compatible endpoints).
    """
    global _client
    if _client is None:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it to your OpenAI API key."
            )
        _client = AsyncOpenAI(
            api_key=api_key,
            base_url=os.environ.get("OPENAI_BASE_URL") or None,
            timeout=timeout,
        )
    return _client


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((Exception,)),
    reraise=True,
)
async def call_llm(
    messages: List[Dict[str, str]],
    model: str = DEFAULT_MODEL,
    client: Optional[AsyncOpenAI] = None,
    temperature: float = 0.7,
) -> str:
    """
    Call the OpenAI Chat Completion API with automatic retries.

    Args:
        messages: List of message dicts with 'role' and 'content' keys
        model: Model identifier to use
        client: Optional client instance. If not provided, uses cached client.
        temperature: Sampling temperature

    Returns:
        The assistant's response content as a string.
    """
    if client is None:
        client = get_cached_client()

    response = await client.chat.completions.create(
        model=model,
        messages=messages,
        temperature=temperature,
    )

    content = response.choices[0].message.content or ""
    if response.usage is not None:
        logger.debug(
            f"LLM usage | model={model}, input={response.usage.prompt_tokens}, "
            f"output={response.usage.completion_tokens}"
        )
    return content.strip()


class OpenAIChatClient:
    """LLMClient backed by the OpenAI API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        timeout: float = 60.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.temperature = temperature
        self._client = client or get_cached_client(timeout=timeout)

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        return await call_llm(
            messages,
            model=self.model,
            client=self._client,
            temperature=self.temperature,
        )


async def complete_json(
    llm: LLMClient,
    system_prompt: str,
    user_prompt: str,
) -> Dict[str, Any]:
    """
    Ask the LLM for a JSON object and parse it.

    Raises:
        ParseError: If the response is not a JSON object
    """
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]
    raw = await llm.complete(messages)
    return parse_json_object(raw)
