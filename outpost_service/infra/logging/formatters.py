"""JSON Lines formatter."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

# Attributes every LogRecord carries; anything else arrived through ``extra=``
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object.

    Keys are ``timestamp`` (UTC, millisecond precision), ``level``, ``logger``
    and ``message``, then the static fields, then whatever the caller passed
    through ``extra=``. The exception handler relies on the latter to attach
    ``status_code``, ``path`` and the ``problem_*`` members. Tracebacks land
    under ``exception``; json.dumps escapes their newlines, so every record
    stays on one line.

    Example output:
        {"timestamp": "2025-01-01T00:00:00.123Z", "level": "WARNING", "logger": "outpost_service.app.exception_handlers", "message": "Application exception occurred", "service": "outpost-service", "status_code": 400}
    """

    def __init__(self, static: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self.static = dict(static or {})

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self._timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self.static,
        }
        data.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED and key not in data
        )
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            data["stack_trace"] = self.formatStack(record.stack_info)
        return json.dumps(data, ensure_ascii=False, default=str)

    @staticmethod
    def _timestamp(record: logging.LogRecord) -> str:
        moment = datetime.fromtimestamp(record.created, tz=UTC)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
