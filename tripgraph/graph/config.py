"""
Workflow configuration.

Centralizes the knobs of the trip planning graph so behaviour can be tuned
without touching the wiring. Values can come from code (get_config) or
from the environment (config_from_env).
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Optional

from dotenv import load_dotenv


@dataclass
class WorkflowConfig:
    """
    Configuration for the trip planning graph.

    Attributes:
        max_retries: Budget retries allowed before finalizing best effort
        recursion_limit: Floor for LangGraph's superstep limit
        model: LLM model used by the weather and itinerary steps
        llm_timeout: LLM call timeout in seconds
        llm_temperature: Sampling temperature for itinerary drafting
        provider_timeout: HTTP timeout for AMap calls in seconds
        checkpoint_backend: 'memory' or 'sqlite'
        checkpoint_path: SQLite file used by the sqlite backend
        use_mock_providers: Force the offline providers even if AMAP_API_KEY is set
        use_llm: Allow LLM calls when OPENAI_API_KEY is set
    """

    # Graph execution limits
    max_retries: int = 3
    recursion_limit: int = 25

    # LLM configuration
    model: str = "gpt-4.1-mini"
    llm_timeout: int = 60  # seconds
    llm_temperature: float = 0.7

    # Providers
    provider_timeout: float = 10.0  # seconds
    use_mock_providers: bool = False
    use_llm: bool = True

    # Persistence
    checkpoint_backend: str = "memory"
    checkpoint_path: str = "data/checkpoints.db"

    @property
    def effective_recursion_limit(self) -> int:
        # weather + finalize, then draft/fan-out/budget_check per attempt
        needed = 2 + 3 * (self.max_retries + 1) + 2
        return max(self.recursion_limit, needed)


# Default configuration instance
DEFAULT_CONFIG = WorkflowConfig()


def get_config(
    max_retries: Optional[int] = None,
    recursion_limit: Optional[int] = None,
    model: Optional[str] = None,
    checkpoint_backend: Optional[str] = None,
    checkpoint_path: Optional[str] = None,
    use_mock_providers: Optional[bool] = None,
    use_llm: Optional[bool] = None,
) -> WorkflowConfig:
    """
    Create a configuration with optional overrides.

    Args:
        max_retries: Override for the budget retry ceiling
        recursion_limit: Override for the recursion limit floor
        model: Override for LLM model
        checkpoint_backend: Override for the checkpoint backend
        checkpoint_path: Override for the SQLite checkpoint file
        use_mock_providers: Override for provider selection
        use_llm: Override for LLM usage

    Returns:
        WorkflowConfig with specified overrides applied
    """
    overrides: dict[str, Any] = {
        "max_retries": max_retries,
        "recursion_limit": recursion_limit,
        "model": model,
        "checkpoint_backend": checkpoint_backend,
        "checkpoint_path": checkpoint_path,
        "use_mock_providers": use_mock_providers,
        "use_llm": use_llm,
    }
    config = replace(DEFAULT_CONFIG, **{k: v for k, v in overrides.items() if v is not None})
    if config.max_retries < 0:
        raise ValueError("max_retries must be >= 0")
    if config.checkpoint_backend not in ("memory", "sqlite"):
        raise ValueError(f"Unknown checkpoint backend '{config.checkpoint_backend}'")
    return config


def _env_bool(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None:
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    return int(value) if value else None


def config_from_env() -> WorkflowConfig:
    """Build a configuration from TRIPGRAPH_* environment variables (and .env)."""
    load_dotenv()
    return get_config(
        max_retries=_env_int("TRIPGRAPH_MAX_RETRIES"),
        recursion_limit=_env_int("TRIPGRAPH_RECURSION_LIMIT"),
        model=os.environ.get("TRIPGRAPH_MODEL") or None,
        checkpoint_backend=os.environ.get("TRIPGRAPH_CHECKPOINT_BACKEND") or None,
        checkpoint_path=os.environ.get("TRIPGRAPH_CHECKPOINT_PATH") or None,
        use_mock_providers=_env_bool("TRIPGRAPH_USE_MOCK_PROVIDERS"),
        use_llm=_env_bool("TRIPGRAPH_USE_LLM"),
    )
