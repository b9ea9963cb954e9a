"""Tests for log formatting."""

import json
import logging
import sys

from comfyrun.logging_utils import JsonFormatter, setup_logging


def test_json_formatter_includes_event_fields():
    """Test that structured extras are emitted as JSON keys."""
    record = logging.LogRecord("comfyrun.remote.poller", logging.INFO, __file__, 1, "Execution completed", None, None)
    record.event = "job_completed"
    record.prompt_id = "p1"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "comfyrun.remote.poller"
    assert payload["msg"] == "Execution completed"
    assert payload["event"] == "job_completed"
    assert payload["prompt_id"] == "p1"
    assert "artifact" not in payload


def test_setup_logging_replaces_handlers():
    """Test that repeated setup leaves one handler with the requested formatter."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        setup_logging("warning", json_output=True)

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_json_formatter_includes_traceback():
    try:
        raise ValueError("bad graph")
    except ValueError:
        record = logging.LogRecord("comfyrun", logging.ERROR, __file__, 1, "boom", None, sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: bad graph" in payload["exc_info"]
