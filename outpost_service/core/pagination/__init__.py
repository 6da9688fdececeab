"""Pagination strategies over a document store.

Three interchangeable strategies return bounded, ordered slices of a
larger result set together with the metadata needed to fetch the next one:

- CursorPaginator: keyset pagination driven by an opaque cursor
- OffsetPaginator: page numbers with skip/limit plus a total count
- AggregationPaginator: page numbers over an aggregation pipeline, page and
  total computed in one execution via a facet stage

Direct use:
    paginator = create_paginator(store, "cursor", default_limit=20)
    page = await paginator.paginate({"category": category_id}, limit=10)
    return page.model_dump(by_alias=True)

From a FastAPI route, see ``outpost_service.core.dependencies.pagination``.
"""

from outpost_service.core.pagination.aggregation import AggregationPaginator, facet_stage
from outpost_service.core.pagination.base import Paginator
from outpost_service.core.pagination.cursor import CursorCodec, read_field
from outpost_service.core.pagination.factory import (
    AnyPaginator,
    PaginationStrategy,
    build_config,
    create_paginator,
)
from outpost_service.core.pagination.filters import build_seek_filter, seek_condition
from outpost_service.core.pagination.keyset import CursorPaginator
from outpost_service.core.pagination.offset import OffsetPaginator
from outpost_service.core.pagination.params import sanitize_limit, sanitize_page
from outpost_service.core.pagination.schemas import (
    AggregationOptions,
    CursorOptions,
    CursorPageInfo,
    CursorPageResult,
    OffsetOptions,
    OffsetPageInfo,
    OffsetPageResult,
    PaginatorConfig,
    SortOrder,
)
from outpost_service.core.pagination.store import DocumentStore

__all__ = [
    "AggregationOptions",
    # Strategies
    "AggregationPaginator",
    "AnyPaginator",
    # Cursor utilities
    "CursorCodec",
    "CursorOptions",
    "CursorPageInfo",
    "CursorPageResult",
    "CursorPaginator",
    # Store port
    "DocumentStore",
    "OffsetOptions",
    "OffsetPageInfo",
    "OffsetPageResult",
    "OffsetPaginator",
    "PaginationStrategy",
    "Paginator",
    "PaginatorConfig",
    "SortOrder",
    "build_config",
    "build_seek_filter",
    "create_paginator",
    "facet_stage",
    "read_field",
    "sanitize_limit",
    "sanitize_page",
    "seek_condition",
]
