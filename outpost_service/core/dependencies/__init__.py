"""FastAPI dependencies."""

from outpost_service.core.dependencies.pagination import (
    AggregationPagination,
    CursorPagination,
    OffsetPagination,
    PageParams,
    Pagination,
    RequestPaginator,
    get_request_paginator,
    pagination_dependency,
)

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
