"""Deferred log message construction.

Store adapters describe every query at DEBUG. Rendering a filter or a
pipeline is not free, so they pass callables that only run when DEBUG is
actually enabled.
"""

from __future__ import annotations

import logging
from typing import Any


class LazyLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter evaluating callable messages and arguments on demand.

    ``debug``/``info``/``warning``/``error`` all funnel into ``log``, so only
    ``log`` needs the level check.

    Example:
        logger = get_lazy_logger(__name__)
        logger.debug(lambda: f"db.find: {render(filter)}")
        logger.debug("db.count: %s", lambda: expensive_total())
    """

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return
        if callable(msg):
            msg = msg()
        args = tuple(arg() if callable(arg) else arg for arg in args)
        super().log(level, msg, *args, **kwargs)


def get_lazy_logger(name: str, **context: Any) -> LazyLoggerAdapter:
    """Lazy adapter over ``logging.getLogger(name)``, binding ``context`` as extra."""
    return LazyLoggerAdapter(logging.getLogger(name), context)
