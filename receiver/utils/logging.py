"""Central logging configuration for the webhook receiver.

Every record is rendered as a single JSON object per line. Structured fields
are attached through ``extra={...}`` and end up as top-level keys.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO, Any, Optional

_ROOT_LOGGER_NAME = "receiver"
_DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Render log records as compact JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_stream_handler(stream: Optional[IO[str]] = None) -> logging.StreamHandler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())
    return handler


def build_logger(level: Optional[str] = None, stream: Optional[IO[str]] = None) -> logging.Logger:
    """Construct the service logger once at startup.

    Existing handlers are replaced so repeated construction (tests, reloads)
    never duplicates output.
    """

    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    logger.setLevel((level or _DEFAULT_LOG_LEVEL).upper())
    logger.addHandler(_build_stream_handler(stream))
    logger.propagate = False
    return logger


__all__ = ["JSONFormatter", "build_logger"]
