"""
Run metadata records appended to `meta` by the step boundary.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExecutionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class ToolCall(BaseModel):
    tool: str
    input: Dict[str, Any] = Field(default_factory=dict)
    output_summary: Optional[str] = None
    duration_ms: float = 0.0
    timestamp: float
    status: str = "success"


class AgentError(BaseModel):
    agent: str
    error: str
    timestamp: float


class AgentExecution(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    agent: str
    start_time: float
    end_time: float
    duration_ms: float
    status: ExecutionStatus
    attempt: int = 0
    tool_calls: List[ToolCall] = Field(default_factory=list)
    error: Optional[str] = None
