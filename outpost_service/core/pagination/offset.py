"""Offset (page-number) pagination.

Each call issues two independent reads concurrently and joins them:

    1. the page window: ``find(filter, sort, skip=(page - 1) * limit, limit)``
    2. the total: ``count(filter)``

Because these are two separate queries against a live store, a write that
lands between them can make ``total_count`` and the returned window
mutually inconsistent (for example an insert before the window shifts
which records land on the page while the count already includes it).
That weak consistency is accepted. Use AggregationPaginator when both
numbers must come from one execution, or CursorPaginator when pages must
not shift under concurrent inserts.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from outpost_service.core.pagination.base import resolve_options, store_errors
from outpost_service.core.pagination.params import page_skip, sanitize_limit, sanitize_page
from outpost_service.core.pagination.schemas import (
    OffsetOptions,
    OffsetPageInfo,
    OffsetPageResult,
    PaginatorConfig,
)
from outpost_service.core.pagination.store import DocumentStore, Filter


class OffsetPaginator:
    """Page-number paginator bound to one store and one configuration."""

    strategy = "offset"

    def __init__(self, store: DocumentStore, config: PaginatorConfig | None = None) -> None:
        self.store = store
        self.config = config or PaginatorConfig()

    async def paginate(
        self,
        query: Filter | None = None,
        options: OffsetOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> OffsetPageResult[Any]:
        """Return page ``options.page`` of the records matching ``query``.

        Raises:
            PaginationFailedError: If either the data or the count query fails
        """
        opts = resolve_options(OffsetOptions, options, overrides)
        page = sanitize_page(opts.page)
        limit = sanitize_limit(
            opts.limit,
            default=self.config.default_limit,
            maximum=self.config.max_limit,
        )
        sort_field = opts.sort_field or self.config.default_sort_field
        sort_order = (
            opts.sort_order if opts.sort_order is not None else self.config.default_sort_order
        )
        query = dict(query or {})

        with store_errors(self.strategy):
            records, total_count = await asyncio.gather(
                self.store.find(
                    query,
                    sort=[(sort_field, sort_order)],
                    skip=page_skip(page, limit),
                    limit=limit,
                    expand=opts.expand,
                    projection=opts.projection,
                ),
                self.store.count(query),
            )

        return OffsetPageResult(
            data=list(records),
            pagination=OffsetPageInfo.build(page, limit, int(total_count)),
        )


__all__ = ["OffsetPaginator"]
