"""Logging configuration settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Where log records go and how they are rendered.

    Environment variables use the LOG_ prefix, e.g. ``LOG_LEVEL=DEBUG`` to
    see every store query, ``LOG_JSON=false`` for plain text while
    developing locally.
    """

    level: LogLevel = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(
        default=True,
        validation_alias=AliasChoices("LOG_JSON", "json_logs"),
        description="Render records as JSON Lines instead of plain text",
    )
    service_name: str = Field(
        default="outpost-service",
        description="Value of the static ``service`` key in JSON records",
    )

    console_enabled: bool = Field(default=True, description="Write records to stderr")
    file_enabled: bool = Field(default=False, description="Also write records to file_path")
    file_path: Path = Field(default=Path("logs/outpost-service.jsonl"))
    file_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    file_backup_count: int = Field(default=5, ge=0, le=100)

    capture_warnings: bool = Field(
        default=True,
        description="Route the ``warnings`` module through logging",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        env_ignore_empty=True,
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @property
    def effective_file_path(self) -> Path | None:
        """The log file, or None while file logging is disabled."""
        return self.file_path if self.file_enabled else None

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``configure_logging``."""
        return {
            "log_level": self.level,
            "json_logs": self.json_logs,
            "service_name": self.service_name,
            "console_enabled": self.console_enabled,
            "file_path": self.effective_file_path,
            "file_max_bytes": self.file_max_bytes,
            "file_backup_count": self.file_backup_count,
            "capture_warnings": self.capture_warnings,
        }
