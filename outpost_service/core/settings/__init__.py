"""Pydantic Settings v2 configuration.

Settings are split by domain, read from environment variables (or a local
``.env`` file), frozen after validation and cached by the loaders:

    from outpost_service.core.settings import get_pagination_settings

    settings = get_pagination_settings()
    print(settings.default_limit, settings.max_limit)
"""

from __future__ import annotations

from .loader import clear_all_caches, get_logging_settings, get_pagination_settings
from .logs import LoggingSettings
from .pagination import PaginationSettings

__all__ = [
    "LoggingSettings",
    "PaginationSettings",
    "clear_all_caches",
    "get_logging_settings",
    "get_pagination_settings",
]
