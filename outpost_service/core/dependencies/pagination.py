"""Pagination dependencies for FastAPI routes.

Reads ``page``, ``limit``, ``cursor``, ``sortField`` and ``sortOrder`` from
the query string and hands the route a paginator bound to those values.
Malformed values are not rejected here: the paginators fall back to their
defaults, so ``?limit=abc`` behaves like no limit at all.

Usage:
    from outpost_service.core.dependencies.pagination import (
        CursorPagination,
        OffsetPagination,
    )

    @router.get("/items")
    async def list_items(pagination: OffsetPagination) -> dict[str, Any]:
        page = await pagination.paginate(item_store, {"show": True})
        return page.model_dump(by_alias=True)

    # Per-call values win over the request's:
    @router.get("/items/latest")
    async def latest(pagination: CursorPagination) -> dict[str, Any]:
        page = await pagination.paginate(
            item_store,
            {"show": True},
            sort_field="created_at",
            default_limit=5,
        )
        return page.model_dump(by_alias=True)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, Request
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from outpost_service.core.pagination import (
    CursorPageResult,
    DocumentStore,
    OffsetPageResult,
    PaginationStrategy,
    PaginatorConfig,
    SortOrder,
    build_config,
    create_paginator,
)
from outpost_service.core.settings import get_pagination_settings

_CONFIG_KEYS = {
    key
    for name in PaginatorConfig.model_fields
    for key in (name, to_camel(name))
}


class PageParams(BaseModel):
    """Raw pagination values read from a request's query string.

    Attributes:
        page: Page number as sent (offset and aggregation strategies)
        limit: Page size as sent
        cursor: Opaque continuation token (cursor strategy)
        sort_field: Field to order on
        sort_order: DESC when the request sent ``desc``, ASC for any other
            value or when absent
    """

    page: str | None = None
    limit: str | None = None
    cursor: str | None = None
    sort_field: str | None = Field(default=None, alias="sortField")
    sort_order: SortOrder = Field(default=SortOrder.ASC, alias="sortOrder")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("sort_order", mode="before")
    @classmethod
    def _parse_sort_order(cls, value: Any) -> SortOrder:
        return SortOrder.parse(value)

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> PageParams:
        """Extract the pagination keys from a query-parameter mapping."""
        return cls(
            page=query.get("page"),
            limit=query.get("limit"),
            cursor=query.get("cursor"),
            sort_field=query.get("sortField"),
            sort_order=query.get("sortOrder"),
        )

    def as_options(self) -> dict[str, Any]:
        """Options for ``paginate()``; the sort order is always set, other unsent values are omitted."""
        return self.model_dump(exclude_none=True)


@dataclass(slots=True, frozen=True)
class RequestPaginator:
    """Request-bound pagination helper.

    Performs no I/O itself; ``paginate`` builds a paginator for the given
    store and runs it with the request's values.

    Attributes:
        params: Values read from the request
        strategy: Strategy the route was declared with
        config: Paginator configuration (settings merged with route config)
    """

    params: PageParams
    strategy: PaginationStrategy
    config: PaginatorConfig

    async def paginate(
        self,
        store: DocumentStore,
        query: Any = None,
        **overrides: Any,
    ) -> CursorPageResult[Any] | OffsetPageResult[Any]:
        """Paginate ``query`` on ``store``.

        Args:
            store: Document store to query
            query: Filter (cursor/offset) or base pipeline (aggregation)
            **overrides: Page options (``limit``, ``sort_field``, ...) and
                configuration values (``default_limit``, ``max_limit``, ...);
                both take precedence over the request

        Returns:
            The paginator's page result
        """
        config_overrides = {k: v for k, v in overrides.items() if k in _CONFIG_KEYS}
        option_overrides = {k: v for k, v in overrides.items() if k not in _CONFIG_KEYS}
        paginator = create_paginator(store, self.strategy, self.config, **config_overrides)
        return await paginator.paginate(query, self.params.as_options(), **option_overrides)


def pagination_dependency(
    strategy: str | PaginationStrategy | None = None,
    config: PaginatorConfig | Mapping[str, Any] | None = None,
) -> Callable[[Request], RequestPaginator]:
    """Build a dependency yielding a RequestPaginator.

    Args:
        strategy: Strategy name; None uses ``PaginationSettings.default_strategy``
        config: Route-level configuration merged over the settings defaults

    Returns:
        A FastAPI dependency callable
    """

    def dependency(request: Request) -> RequestPaginator:
        settings = get_pagination_settings()
        if isinstance(config, PaginatorConfig):
            paginator_config = config
        else:
            paginator_config = build_config(settings.to_paginator_config(), **dict(config or {}))
        return RequestPaginator(
            params=PageParams.from_query(request.query_params),
            strategy=PaginationStrategy.parse(strategy or settings.default_strategy),
            config=paginator_config,
        )

    return dependency


get_request_paginator = pagination_dependency()

# Type aliases for cleaner route signatures
Pagination = Annotated[RequestPaginator, Depends(get_request_paginator)]
CursorPagination = Annotated[
    RequestPaginator, Depends(pagination_dependency(PaginationStrategy.CURSOR))
]
OffsetPagination = Annotated[
    RequestPaginator, Depends(pagination_dependency(PaginationStrategy.OFFSET))
]
AggregationPagination = Annotated[
    RequestPaginator, Depends(pagination_dependency(PaginationStrategy.AGGREGATION))
]

__all__ = [
    "AggregationPagination",
    "CursorPagination",
    "OffsetPagination",
    "PageParams",
    "Pagination",
    "RequestPaginator",
    "get_request_paginator",
    "pagination_dependency",
]
