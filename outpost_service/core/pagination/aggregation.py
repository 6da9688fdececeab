"""Pagination over a caller-supplied aggregation pipeline.

The caller assembles the pipeline (matching, grouping, projecting,
sorting) in the store's aggregation language. The paginator appends one
fan-out stage producing two branches from the same upstream output:

    {"$facet": {
        "data": [{"$skip": skip}, {"$limit": limit}],
        "totalCount": [{"$count": "count"}],
    }}

so the page and its total come from a single execution of the (possibly
expensive) upstream pipeline, unlike pairing a data query with a
separate count query.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from outpost_service.core.exceptions import AggregationPaginationFailedError
from outpost_service.core.pagination.base import resolve_options, store_errors
from outpost_service.core.pagination.params import page_skip, sanitize_limit, sanitize_page
from outpost_service.core.pagination.schemas import (
    AggregationOptions,
    OffsetPageInfo,
    OffsetPageResult,
    PaginatorConfig,
)
from outpost_service.core.pagination.store import DocumentStore, Pipeline

DATA_FACET = "data"
COUNT_FACET = "totalCount"
COUNT_FIELD = "count"


def facet_stage(skip: int, limit: int) -> dict[str, Any]:
    """Build the dual-branch stage appended to the caller's pipeline."""
    return {
        "$facet": {
            DATA_FACET: [{"$skip": skip}, {"$limit": limit}],
            COUNT_FACET: [{"$count": COUNT_FIELD}],
        }
    }


class AggregationPaginator:
    """Page-number paginator over an aggregation pipeline.

    Only ``default_limit`` and ``max_limit`` of the configuration apply;
    ordering belongs in the pipeline.
    """

    strategy = "aggregation"

    def __init__(self, store: DocumentStore, config: PaginatorConfig | None = None) -> None:
        self.store = store
        self.config = config or PaginatorConfig()

    async def paginate(
        self,
        query: Pipeline | None = None,
        options: AggregationOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> OffsetPageResult[Any]:
        """Return page ``options.page`` of the pipeline's output.

        Args:
            query: Aggregation pipeline; it is copied, never mutated
            options: Page and limit
            **overrides: Individual options taking precedence over ``options``

        Raises:
            AggregationPaginationFailedError: If the pipeline fails
        """
        opts = resolve_options(AggregationOptions, options, overrides)
        page = sanitize_page(opts.page)
        limit = sanitize_limit(
            opts.limit,
            default=self.config.default_limit,
            maximum=self.config.max_limit,
        )
        pipeline = [*(query or []), facet_stage(page_skip(page, limit), limit)]

        with store_errors(self.strategy, AggregationPaginationFailedError):
            rows = await self.store.aggregate(pipeline)
            data, total_count = self._unpack(rows)

        return OffsetPageResult(
            data=data,
            pagination=OffsetPageInfo.build(page, limit, total_count),
        )

    @staticmethod
    def _unpack(rows: list[dict[str, Any]]) -> tuple[list[Any], int]:
        """Split the single facet row into (data, total_count)."""
        row = rows[0] if rows else {}
        data = list(row.get(DATA_FACET) or [])
        counts = row.get(COUNT_FACET) or []
        total_count = int(counts[0].get(COUNT_FIELD, 0)) if counts else 0
        return data, total_count


__all__ = ["AggregationPaginator", "facet_stage"]
