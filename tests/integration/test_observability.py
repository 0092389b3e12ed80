from __future__ import annotations

import json
import logging
import sys

from time_oracle.integration.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="time_oracle.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="update rejected: %s",
        args=("paused",),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_base_fields() -> None:
    out = json.loads(JSONFormatter().format(_record()))
    assert out["level"] == "WARNING"
    assert out["logger"] == "time_oracle.test"
    assert out["message"] == "update rejected: paused"
    assert "timestamp" in out
    assert "caller" not in out


def test_json_formatter_surfaces_oracle_extras() -> None:
    caller = "0x" + "bb" * 20
    out = json.loads(
        JSONFormatter().format(
            _record(caller=caller, action="update", rejection="paused", timestamp_ms=2**70, unrelated="x")
        )
    )
    assert out["caller"] == caller
    assert out["action"] == "update"
    assert out["rejection"] == "paused"
    assert out["timestamp_ms"] == 2**70
    assert "unrelated" not in out


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()
    out = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in out["exception"]


def test_setup_logging_replaces_its_own_handler() -> None:
    root = logging.getLogger()
    saved_level = root.level
    try:
        first = setup_logging("debug", "json")
        second = setup_logging("WARNING", "text")
        assert first not in root.handlers
        assert second in root.handlers
        assert not isinstance(second.formatter, JSONFormatter)
        assert root.level == logging.WARNING
    finally:
        for handler in list(root.handlers):
            if getattr(handler, "_time_oracle_handler", False):
                root.removeHandler(handler)
        root.setLevel(saved_level)
