"""Cursor-based (keyset) pagination.

Keyset pagination is:
- Stable: later pages don't shift when rows are inserted or deleted
  before the cursor position
- Performant: the store seeks on an indexed field instead of skipping rows
- Forward-only: a cursor only says "continue strictly after this value"

Usage:
    paginator = CursorPaginator(store, PaginatorConfig(default_limit=10))

    first = await paginator.paginate({"show": True}, limit=10)
    if first.pagination.has_next_page:
        second = await paginator.paginate(
            {"show": True},
            limit=10,
            cursor=first.pagination.next_cursor,
        )

The store is asked for ``limit + 1`` records; the extra record only
signals that another page exists and is never returned.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from outpost_service.core.pagination.base import resolve_options, store_errors
from outpost_service.core.pagination.cursor import CursorCodec
from outpost_service.core.pagination.filters import build_seek_filter, sort_spec
from outpost_service.core.pagination.params import sanitize_limit
from outpost_service.core.pagination.schemas import (
    CursorOptions,
    CursorPageInfo,
    CursorPageResult,
    PaginatorConfig,
)
from outpost_service.core.pagination.store import DocumentStore, Filter


class CursorPaginator:
    """Keyset paginator bound to one store and one configuration.

    Instances hold only immutable configuration and may serve concurrent
    calls without coordination.

    Attributes:
        store: Document store the queries run against
        config: Default/max limit and default sort settings
    """

    strategy = "cursor"

    def __init__(self, store: DocumentStore, config: PaginatorConfig | None = None) -> None:
        self.store = store
        self.config = config or PaginatorConfig()

    async def paginate(
        self,
        query: Filter | None = None,
        options: CursorOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> CursorPageResult[Any]:
        """Return the page following ``options.cursor`` (or the first page).

        Args:
            query: Caller filter, passed to the store without inspection
            options: Cursor options (limit, cursor, sort_field, sort_order, ...)
            **overrides: Individual options taking precedence over ``options``

        Returns:
            CursorPageResult with at most ``limit`` records

        Raises:
            InvalidCursorError: If the cursor cannot be decoded (no query is run)
            PaginationFailedError: If the store query fails
        """
        opts = resolve_options(CursorOptions, options, overrides)
        limit = sanitize_limit(
            opts.limit,
            default=self.config.default_limit,
            maximum=self.config.max_limit,
        )
        sort_field = opts.sort_field or self.config.default_sort_field
        sort_order = (
            opts.sort_order if opts.sort_order is not None else self.config.default_sort_order
        )
        fields = self.seek_fields(sort_field)

        effective_query: dict[str, Any] = dict(query or {})
        if opts.cursor:
            values = self.decode_cursor(opts.cursor, len(fields))
            effective_query = build_seek_filter(query, fields, values, sort_order)

        with store_errors(self.strategy):
            records = list(
                await self.store.find(
                    effective_query,
                    sort=sort_spec(fields, sort_order),
                    limit=limit + 1,
                    expand=opts.expand,
                    projection=opts.projection,
                )
            )

            has_next_page = len(records) > limit
            if has_next_page:
                records = records[:limit]

            next_cursor = None
            if has_next_page and records:
                next_cursor = CursorCodec.from_record(records[-1], fields)

        return CursorPageResult(
            data=records,
            pagination=CursorPageInfo(
                has_next_page=has_next_page,
                next_cursor=next_cursor,
                limit=limit,
                sort_field=sort_field,
                sort_order=sort_order,
            ),
        )

    def seek_fields(self, sort_field: str) -> list[str]:
        """Fields the cursor orders and seeks on, tie-break key last."""
        tiebreak = self.config.tiebreak_field
        if tiebreak and tiebreak != sort_field:
            return [sort_field, tiebreak]
        return [sort_field]

    @staticmethod
    def decode_cursor(cursor: str, size: int) -> list[Any]:
        """Decode a token into the boundary values for ``size`` seek fields."""
        if size == 1:
            return [CursorCodec.decode(cursor)]
        return CursorCodec.decode_composite(cursor, size)


__all__ = ["CursorPaginator"]
