"""Structured logging configuration utilities."""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RESERVED_FIELDS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_FIELDS or key.startswith("_"):
                continue
            payload[key] = sorted(value) if isinstance(value, (set, frozenset)) else value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info

        return json.dumps(payload, ensure_ascii=False, default=str)


def _resolve_level(level_name: str) -> int:
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """Configure root logging from ``ADAPTIVE_NEWS_LOG_LEVEL`` / ``ADAPTIVE_NEWS_LOG_FORMAT``.

    Output goes to stderr by default so stdout stays free for extraction results.
    """

    resolved = _resolve_level(level or os.getenv("ADAPTIVE_NEWS_LOG_LEVEL", "INFO"))
    fmt = os.getenv("ADAPTIVE_NEWS_LOG_FORMAT", "plain").lower()

    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt in {"json", "structured"}:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)
    root_logger.handlers = [handler]


__all__ = ["configure_logging", "StructuredFormatter"]
