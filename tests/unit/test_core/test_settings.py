"""Unit tests for Pydantic settings."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from outpost_service.core.pagination import SortOrder
from outpost_service.core.settings import (
    LoggingSettings,
    PaginationSettings,
    clear_all_caches,
    get_logging_settings,
    get_pagination_settings,
)


@pytest.mark.unit
class TestPaginationSettings:
    """Test suite for PaginationSettings."""

    def test_defaults(self):
        """Defaults should be limit 20 of max 100, offset strategy, _id ascending."""
        settings = PaginationSettings()

        assert settings.default_limit == 20
        assert settings.max_limit == 100
        assert settings.default_sort_field == "_id"
        assert settings.default_sort_order == "asc"
        assert settings.default_strategy == "offset"
        assert settings.tiebreak_field is None

    def test_reads_environment(self, monkeypatch):
        """PAGINATION_ prefixed variables should be applied."""
        monkeypatch.setenv("PAGINATION_DEFAULT_LIMIT", "50")
        monkeypatch.setenv("PAGINATION_MAX_LIMIT", "500")
        monkeypatch.setenv("PAGINATION_DEFAULT_STRATEGY", "cursor")

        settings = PaginationSettings()

        assert settings.default_limit == 50
        assert settings.max_limit == 500
        assert settings.default_strategy == "cursor"

    def test_default_limit_above_max_rejected(self):
        """default_limit may not exceed max_limit."""
        with pytest.raises(ValidationError):
            PaginationSettings(default_limit=200, max_limit=100)

    def test_unknown_strategy_rejected(self):
        """Only the three strategies are valid configuration."""
        with pytest.raises(ValidationError):
            PaginationSettings(default_strategy="random")

    def test_frozen(self):
        """Settings instances are immutable."""
        settings = PaginationSettings()

        with pytest.raises(ValidationError):
            settings.default_limit = 5

    def test_to_paginator_config(self):
        """Settings should map onto the paginator configuration."""
        settings = PaginationSettings(
            default_limit=10,
            max_limit=40,
            default_sort_field="created_at",
            default_sort_order="desc",
            tiebreak_field="_id",
        )

        config = settings.to_paginator_config()

        assert config.default_limit == 10
        assert config.max_limit == 40
        assert config.default_sort_field == "created_at"
        assert config.default_sort_order is SortOrder.DESC
        assert config.tiebreak_field == "_id"


@pytest.mark.unit
class TestLoggingSettings:
    """Test suite for LoggingSettings."""

    def test_level_normalized(self):
        """Lower-case levels should be accepted and upper-cased."""
        settings = LoggingSettings(level="debug")

        assert settings.level == "DEBUG"

    def test_file_path_only_when_enabled(self, tmp_path):
        """effective_file_path is None unless file logging is enabled."""
        path = tmp_path / "out.jsonl"

        assert LoggingSettings(file_path=path).effective_file_path is None
        assert LoggingSettings(file_path=path, file_enabled=True).effective_file_path == path

    def test_json_alias_from_environment(self, monkeypatch):
        """LOG_JSON should toggle structured output."""
        monkeypatch.setenv("LOG_JSON", "false")

        assert LoggingSettings().json_logs is False

    def test_to_logging_kwargs(self):
        """Disabled file logging should hand no path to configure_logging."""
        kwargs = LoggingSettings(level="WARNING", service_name="svc").to_logging_kwargs()

        assert kwargs["log_level"] == "WARNING"
        assert kwargs["file_path"] is None
        assert kwargs["service_name"] == "svc"


@pytest.mark.unit
class TestSettingsLoader:
    """Test suite for the cached loaders."""

    def test_loaders_cache_instances(self):
        """Repeated calls should return the same instance."""
        assert get_pagination_settings() is get_pagination_settings()
        assert get_logging_settings() is get_logging_settings()

    def test_clear_all_caches_reloads(self, monkeypatch):
        """Clearing caches should pick up new environment values."""
        first = get_pagination_settings()
        monkeypatch.setenv("PAGINATION_DEFAULT_LIMIT", "7")

        clear_all_caches()
        second = get_pagination_settings()

        assert first.default_limit == 20
        assert second.default_limit == 7
