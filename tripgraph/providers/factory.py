"""Provider and LLM selection from configuration and credentials."""

import logging
import os
from typing import Optional

from tripgraph.graph.config import WorkflowConfig
from tripgraph.providers.amap import AmapClient
from tripgraph.providers.interfaces import Providers
from tripgraph.providers.mock_data import create_mock_providers
from tripgraph.shared.llm.client import LLMClient, OpenAIChatClient, llm_configured


logger = logging.getLogger(__name__)


def build_providers(config: WorkflowConfig) -> Providers:
    """AMap when AMAP_API_KEY is set (and mocks are not forced), otherwise offline providers."""
    api_key = os.environ.get("AMAP_API_KEY")
    if api_key and not config.use_mock_providers:
        logger.info("Using AMap providers")
        client = AmapClient(api_key, timeout=config.provider_timeout)
        return Providers(poi=client, routes=client, weather=client)
    logger.info("Using offline mock providers")
    return create_mock_providers()


def build_llm(config: WorkflowConfig) -> Optional[LLMClient]:
    """OpenAI chat client when credentials exist, otherwise None (rule-based steps)."""
    if not config.use_llm or not llm_configured():
        logger.info("No LLM configured; steps use their rule-based paths")
        return None
    return OpenAIChatClient(
        model=config.model,
        temperature=config.llm_temperature,
        timeout=config.llm_timeout,
    )
