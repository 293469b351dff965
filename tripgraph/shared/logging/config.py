"""
Structured logging configuration.

JSON lines for the tripgraph loggers. Records that carry run identifiers
(thread, trace, event, outcome) have them lifted to top-level keys, so one
thread can be followed through a log file with a single filter.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

# Record attributes promoted to top-level JSON keys when present
RUN_FIELDS = ("event", "thread_id", "trace_id", "outcome")


class StructuredFormatter(logging.Formatter):
    """
    Render a record as one JSON object.

    Base keys are timestamp, level, logger and message. Run identifiers come
    from record attributes, usually set through ``extra=`` on the logging call.
    The state summary and any leftover context written by
    log_state_transition go under ``state`` and ``context``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in RUN_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        summary = getattr(record, "state_summary", None)
        if summary:
            entry["state"] = summary
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    logger_name: str = "tripgraph",
) -> logging.Logger:
    """
    Send a logger's records to stdout (and optionally a file) as JSON lines.

    The logger stops propagating so basicConfig's plain-text handler does not
    print the same record twice. ``level`` accepts a name such as "DEBUG".
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.handlers = []
    logger.propagate = False

    formatter = StructuredFormatter()
    handlers: list = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def summarize_state(state: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the fields that matter when following a run through the logs."""
    budget = state.get("budget_result") or {}
    meta = state.get("meta") or {}
    return {
        "retry_count": state.get("retry_count"),
        "has_weather": state.get("weather") is not None,
        "has_draft": state.get("draft_itinerary") is not None,
        "within_budget": budget.get("is_within_budget"),
        "total_cost": budget.get("total_cost"),
        "errors": len(meta.get("errors") or []),
        "finalized": state.get("final_itinerary") is not None,
    }


def log_state_transition(
    event: str,
    state: Dict[str, Any],
    extra: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a workflow state transition event.

    Args:
        event: Name of the event (e.g., "run_started", "run_finished")
        state: Current trip state; summarized, and its thread_id used when extra has none
        extra: Run identifiers and any other context for the record
        logger: Logger instance to use. If not provided, uses "tripgraph".
    """
    if logger is None:
        logger = logging.getLogger("tripgraph")

    context = dict(extra or {})
    fields = {field: context.pop(field, None) for field in RUN_FIELDS if field != "event"}
    if fields["thread_id"] is None:
        fields["thread_id"] = state.get("thread_id")

    logger.info(
        f"State transition: {event}",
        extra={"event": event, **fields, "state_summary": summarize_state(state), "context": context},
    )
