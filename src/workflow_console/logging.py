"""Structured logging configuration.

Log records are written as JSON lines to stderr so that command output on
stdout (tables, JSON reports) stays machine readable.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

_QUIET_LOGGERS = ("urllib3", "uvicorn.access")


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object.

    Keys: ``timestamp``, ``level``, ``logger``, ``message``, then ``extra`` when
    the call passed any, and ``exception`` / ``errorCode`` for failures. The
    error code is taken from console errors (``WorkflowConsoleError.code``).
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
            code = getattr(record.exc_info[1], "code", None)
            if isinstance(code, str):
                payload["errorCode"] = code

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str, *, stream: TextIO | None = None) -> None:
    """Route all logging through one JSON handler at `level` (stderr by default)."""

    root = logging.getLogger()

    # Re-configuring must not stack handlers.
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream=stream or sys.stderr)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())

    floor = max(root.level, logging.INFO)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(floor)
