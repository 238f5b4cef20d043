"""Structured logging utilities."""
from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, Optional

import orjson

# Attributes present on every LogRecord; anything else came from ``extra=``.
_RESERVED = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        return orjson.dumps(payload, default=str).decode()


def setup_logging(level: Optional[str] = None) -> None:
    """Install a JSON formatter on the root logger.

    ``level`` falls back to ``LOG_LEVEL`` and then ``WARNING`` so that the
    CLI output is not interleaved with request chatter by default.
    """

    level_name = (level or os.getenv("LOG_LEVEL") or "WARNING").upper()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, level_name, logging.WARNING))
    root.addHandler(handler)


__all__ = ["JsonFormatter", "setup_logging"]
