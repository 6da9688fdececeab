"""Logging setup: dictConfig-declared handlers served from a background queue.

``configure_logging`` describes the console and rotating-file handlers as a
dictConfig document, then detaches whatever dictConfig attached to the root
logger and hands those handlers to a ``QueueListener`` thread. The root
logger keeps a single ``QueueHandler``, so coroutines serving a page never
block on log I/O.
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from outpost_service.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from outpost_service.core.settings.logs import LoggingSettings

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_listener: QueueListener | None = None
_configured = False


def shutdown() -> None:
    """Stop the queue listener, flushing records still queued."""
    global _listener

    if _listener is not None:
        _listener.stop()
        _listener = None


atexit.register(shutdown)


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **overrides: Any,
) -> None:
    """Configure logging once per process from LOG_* settings.

    Args:
        log_settings: Settings to apply; defaults to ``get_logging_settings()``
        force: Reconfigure even if logging was already set up
        **overrides: ``configure_logging`` arguments taking precedence over
            the settings
    """
    global _configured

    if _configured and not force:
        return

    if log_settings is None:
        from outpost_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**{**log_settings.to_logging_kwargs(), **overrides})
    _configured = True


def configure_logging(
    log_level: str = "INFO",
    *,
    json_logs: bool = True,
    service_name: str = "outpost-service",
    console_enabled: bool = True,
    file_path: str | Path | None = None,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    capture_warnings: bool = True,
) -> None:
    """Replace the root logger's handlers.

    Example:
        configure_logging("DEBUG", json_logs=False)  # local debugging
    """
    shutdown()
    logging.captureWarnings(capture_warnings)

    handlers: dict[str, dict[str, Any]] = {}
    if console_enabled:
        handlers["console"] = {"class": "logging.StreamHandler", "formatter": "default"}
    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filename": str(path),
            "maxBytes": file_max_bytes,
            "backupCount": file_backup_count,
            "encoding": "utf-8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": _formatter_config(json_logs, service_name)},
            "handlers": handlers,
            "root": {"level": log_level.upper(), "handlers": list(handlers)},
        }
    )
    _serve_from_queue(logging.getLogger())


def _formatter_config(json_logs: bool, service_name: str) -> dict[str, Any]:
    if json_logs:
        return {"()": JSONFormatter, "static": {"service": service_name}}
    return {"format": TEXT_FORMAT, "datefmt": DATE_FORMAT}


def _serve_from_queue(root: logging.Logger) -> None:
    global _listener

    handlers = list(root.handlers)
    if not handlers:
        return

    queue: Queue[logging.LogRecord] = Queue()
    for handler in handlers:
        root.removeHandler(handler)
    root.addHandler(QueueHandler(queue))

    _listener = QueueListener(queue, *handlers, respect_handler_level=True)
    _listener.start()
