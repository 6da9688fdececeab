"""Logging infrastructure.

Basic usage:
    import logging

    from outpost_service.infra.logging import setup_logging

    setup_logging()  # reads LOG_* settings once
    logger = logging.getLogger(__name__)
    logger.info("Service started")

    # Lazy evaluation for expensive debug output
    from outpost_service.infra.logging import get_lazy_logger

    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"Expensive: {compute_heavy_data()}")
"""

from outpost_service.infra.logging.config import configure_logging, setup_logging, shutdown
from outpost_service.infra.logging.formatters import JSONFormatter
from outpost_service.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "configure_logging",
    "get_lazy_logger",
    "setup_logging",
    "shutdown",
]
