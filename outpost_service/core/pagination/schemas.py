"""Pagination request options, configuration and response schemas.

Every strategy takes an explicit, fully enumerated options model and
returns a ``{data, pagination}`` result whose metadata shape depends on
the strategy:

1. Cursor (keyset) strategy:
   ``{hasNextPage, nextCursor, limit, sortField, sortOrder}``

2. Offset and aggregation strategies:
   ``{currentPage, totalPages, totalCount, limit, hasNextPage,
   hasPrevPage, nextPage, prevPage}``

Attributes are snake_case in Python and serialize with camelCase aliases
(``model_dump(by_alias=True)``) so API responses keep the wire names.
"""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

Projection = str | dict[str, int]
Expansion = str | list[str]


class SortOrder(IntEnum):
    """Sort direction, valued like the store's sort direction integers."""

    ASC = 1
    DESC = -1

    @classmethod
    def parse(cls, value: Any) -> SortOrder:
        """Map loosely typed input to a sort order.

        ``"desc"`` (any case) and ``-1`` mean descending; anything else,
        including ``None``, means ascending.
        """
        if isinstance(value, SortOrder):
            return value
        if isinstance(value, str):
            return cls.DESC if value.strip().lower() == "desc" else cls.ASC
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.DESC if value == -1 else cls.ASC
        return cls.ASC

    @property
    def token(self) -> str:
        """Query-string token for this direction."""
        return "desc" if self is SortOrder.DESC else "asc"

    @property
    def seek_operator(self) -> str:
        """Comparison operator that moves strictly past a boundary value."""
        return "$lt" if self is SortOrder.DESC else "$gt"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class PaginatorConfig(_CamelModel):
    """Static configuration bound to a paginator at construction time.

    Attributes:
        default_limit: Page size used when the caller gives none (or garbage).
            Like any requested limit it is clamped to max_limit when applied.
        max_limit: Hard upper bound for the effective limit.
        default_sort_field: Field to order and seek on when none is given.
        default_sort_order: Direction used when none is given.
        tiebreak_field: Optional secondary key appended to the cursor
            strategy's sort and seek so duplicate sort values cannot be
            skipped or repeated across pages. ``None`` keeps single-field
            keyset semantics.
    """

    default_limit: int = Field(default=20, ge=1)
    max_limit: int = Field(default=100, ge=1)
    default_sort_field: str = Field(default="_id", min_length=1)
    default_sort_order: SortOrder = SortOrder.ASC
    tiebreak_field: str | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    @field_validator("default_sort_order", mode="before")
    @classmethod
    def _parse_sort_order(cls, value: Any) -> SortOrder:
        return SortOrder.parse(value)


class _PageOptions(_CamelModel):
    """Options shared by every strategy.

    ``limit`` is deliberately untyped: malformed input is not an error,
    it falls back to the configured default.
    """

    limit: Any = None
    sort_field: str | None = None
    sort_order: SortOrder | None = None
    expand: Expansion | None = Field(
        default=None,
        description="Relations to expand, passed to the store unmodified",
    )
    projection: Projection | None = Field(
        default=None,
        description="Field projection, passed to the store unmodified",
    )

    @field_validator("sort_field", mode="before")
    @classmethod
    def _blank_sort_field(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def _parse_sort_order(cls, value: Any) -> SortOrder | None:
        if value is None:
            return None
        return SortOrder.parse(value)


class CursorOptions(_PageOptions):
    """Options for the cursor (keyset) strategy."""

    cursor: str | None = None


class OffsetOptions(_PageOptions):
    """Options for the offset strategy. ``page`` is 1-based and lenient."""

    page: Any = None


class AggregationOptions(_CamelModel):
    """Options for the aggregation strategy.

    Ordering, projection and expansion belong in the caller's pipeline.
    """

    page: Any = None
    limit: Any = None


class CursorPageInfo(_CamelModel):
    """Metadata returned by the cursor strategy.

    Attributes:
        has_next_page: Whether another page exists after this one
        next_cursor: Token for the next page, None when there is none
        limit: Effective limit used for the query
        sort_field: Field the page was ordered and seeked on
        sort_order: Direction of the ordering
    """

    has_next_page: bool
    next_cursor: str | None = None
    limit: int
    sort_field: str
    sort_order: SortOrder


class OffsetPageInfo(_CamelModel):
    """Metadata returned by the offset and aggregation strategies."""

    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next_page: bool
    has_prev_page: bool
    next_page: int | None = None
    prev_page: int | None = None

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> OffsetPageInfo:
        """Derive navigation metadata from a page number and a total count."""
        total_pages = math.ceil(total_count / limit)
        has_next = page < total_pages
        has_prev = page > 1
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            limit=limit,
            has_next_page=has_next,
            has_prev_page=has_prev,
            next_page=page + 1 if has_next else None,
            prev_page=page - 1 if has_prev else None,
        )


class CursorPageResult(_CamelModel, Generic[T]):
    """One page returned by the cursor strategy."""

    data: list[T] = Field(default_factory=list)
    pagination: CursorPageInfo


class OffsetPageResult(_CamelModel, Generic[T]):
    """One page returned by the offset or aggregation strategy."""

    data: list[T] = Field(default_factory=list)
    pagination: OffsetPageInfo


__all__ = [
    "AggregationOptions",
    "CursorOptions",
    "CursorPageInfo",
    "CursorPageResult",
    "Expansion",
    "OffsetOptions",
    "OffsetPageInfo",
    "OffsetPageResult",
    "PaginatorConfig",
    "Projection",
    "SortOrder",
]
