"""Process-wide pagination defaults.

Route dependencies start from these values and layer route and per-call
overrides on top. Environment variables use the PAGINATION_ prefix, e.g.
``PAGINATION_DEFAULT_LIMIT=50 PAGINATION_DEFAULT_STRATEGY=cursor``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from outpost_service.core.pagination.schemas import PaginatorConfig, SortOrder


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_limit: Default number of items per page when not specified.
        max_limit: Maximum allowed items per page (hard limit).
        default_sort_field: Field used for ordering when the request names none.
        default_sort_order: Direction used when the request names none.
        default_strategy: Strategy used by request dependencies that don't pick one.
        tiebreak_field: Secondary key for cursor pagination (None disables it).

    Example:
        settings = PaginationSettings()
        paginator = create_paginator(store, settings.default_strategy,
                                     settings.to_paginator_config())
    """

    default_limit: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Default page size when limit not specified",
    )
    max_limit: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum allowed page size (hard limit)",
    )
    default_sort_field: str = Field(
        default="_id",
        min_length=1,
        description="Field to sort and seek on when not specified",
    )
    default_sort_order: Literal["asc", "desc"] = Field(
        default="asc",
        description="Sort direction when not specified",
    )
    default_strategy: Literal["cursor", "offset", "aggregation"] = Field(
        default="offset",
        description="Pagination strategy used when a route doesn't choose one",
    )
    tiebreak_field: str | None = Field(
        default=None,
        description="Secondary cursor key making duplicate sort values safe",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_limits(self) -> PaginationSettings:
        if self.default_limit > self.max_limit:
            msg = "default_limit must not exceed max_limit"
            raise ValueError(msg)
        return self

    def to_paginator_config(self) -> PaginatorConfig:
        """Build the static configuration handed to paginators."""
        return PaginatorConfig(
            default_limit=self.default_limit,
            max_limit=self.max_limit,
            default_sort_field=self.default_sort_field,
            default_sort_order=SortOrder.parse(self.default_sort_order),
            tiebreak_field=self.tiebreak_field,
        )
