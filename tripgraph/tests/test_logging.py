"""
Tests for structured logging helpers.
"""

import json
import logging
import sys

import pytest

from tripgraph.shared.logging.config import (
    StructuredFormatter,
    log_state_transition,
    setup_logging,
    summarize_state,
)
from tripgraph.tests.fakes import make_state, over_budget_result


def _record(msg="hello %s", args=("world",), level=logging.INFO, exc_info=None, **attrs):
    return logging.getLogger("tripgraph.test").makeRecord(
        "tripgraph.test", level, "", 0, msg, args, exc_info, extra=attrs or None
    )


# ============================================================================
# Formatter
# ============================================================================


class TestStructuredFormatter:
    def test_json_line(self):
        entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "tripgraph.test"
        assert entry["message"] == "hello world"
        assert "timestamp" in entry
        assert "thread_id" not in entry

    def test_run_fields_are_top_level(self):
        record = _record(thread_id="t1", trace_id="tr-9", event="run_finished", outcome="within_budget")
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["thread_id"] == "t1"
        assert entry["trace_id"] == "tr-9"
        assert entry["event"] == "run_finished"
        assert entry["outcome"] == "within_budget"

    def test_summary_and_context(self):
        record = _record(state_summary={"retry_count": 1}, context={"resumed": True})
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["state"] == {"retry_count": 1}
        assert entry["context"] == {"resumed": True}

    def test_exception_included(self):
        try:
            raise ValueError("bad draft")
        except ValueError:
            record = _record("failed", (), logging.ERROR, sys.exc_info())
        entry = json.loads(StructuredFormatter().format(record))
        assert "ValueError: bad draft" in entry["exception"]


# ============================================================================
# State transitions
# ============================================================================


class TestStateSummary:
    def test_fresh_state(self):
        summary = summarize_state(make_state())
        assert summary["retry_count"] == 0
        assert summary["has_weather"] is False
        assert summary["within_budget"] is None
        assert summary["finalized"] is False

    def test_after_budget_check(self):
        summary = summarize_state(make_state(budget_result=over_budget_result("adjust_meals"), retry_count=1))
        assert summary["within_budget"] is False
        assert summary["total_cost"] == 9000.0
        assert summary["retry_count"] == 1

    def test_transition_record(self, caplog):
        logger = logging.getLogger("tripgraph.test.transitions")
        with caplog.at_level(logging.INFO, logger="tripgraph.test.transitions"):
            log_state_transition(
                "run_started", make_state(), {"thread_id": "t1", "trace_id": "tr-1", "resumed": False}, logger
            )
        record = caplog.records[-1]
        assert record.getMessage() == "State transition: run_started"
        assert record.event == "run_started"
        assert record.thread_id == "t1"
        assert record.trace_id == "tr-1"
        assert record.context == {"resumed": False}
        assert record.state_summary["has_draft"] is False

    def test_thread_id_falls_back_to_state(self, caplog):
        logger = logging.getLogger("tripgraph.test.transitions")
        with caplog.at_level(logging.INFO, logger="tripgraph.test.transitions"):
            log_state_transition("run_finished", make_state(thread_id="from-state"), None, logger)
        entry = json.loads(StructuredFormatter().format(caplog.records[-1]))
        assert entry["thread_id"] == "from-state"
        assert entry["event"] == "run_finished"
        assert "trace_id" not in entry


# ============================================================================
# Setup
# ============================================================================


class TestSetupLogging:
    def test_configures_named_logger(self, tmp_path):
        log_file = tmp_path / "run.log"
        logger = setup_logging(level="debug", log_file=str(log_file), logger_name="tripgraph.test.setup")
        try:
            assert logger.level == logging.DEBUG
            assert logger.propagate is False
            assert len(logger.handlers) == 2
            logger.info("written", extra={"thread_id": "t7"})
            for handler in logger.handlers:
                handler.flush()
            entry = json.loads(log_file.read_text().strip())
            assert entry["message"] == "written"
            assert entry["thread_id"] == "t7"
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers = []
            logger.propagate = True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
