"""Structured logging for the oracle shell.

Invariants:
    - All records include timestamp, level, logger name and message
    - Oracle extras (caller, action, rejection, timestamp_ms) surfaced when present
    - JSON format for deployments, human-readable text for local runs

The kernel (`time_oracle.core`) never logs; only the shell does.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone


_EXTRA_KEYS = ("caller", "action", "rejection", "timestamp_ms", "block_time", "event")


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging once; calling again replaces the handler installed earlier."""
    for existing in list(logging.root.handlers):
        if getattr(existing, "_time_oracle_handler", False):
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
    handler._time_oracle_handler = True  # type: ignore[attr-defined]
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
