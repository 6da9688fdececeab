"""Seek conditions for keyset pagination.

Instead of skipping rows, the cursor strategy adds a range condition on
the sort field so the query starts strictly past the last returned value:

    ORDER BY price ASC,  cursor at 4.5  ->  {"price": {"$gt": 4.5}}
    ORDER BY price DESC, cursor at 4.5  ->  {"price": {"$lt": 4.5}}

With a tie-break key the condition becomes compound:

    {"$or": [{"price": {"$gt": 4.5}},
             {"price": 4.5, "_id": {"$gt": last_id}}]}

The caller's filter is never mutated; when it is non-empty the seek
condition is AND-ed with it so existing conditions on the sort field are
preserved.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from outpost_service.core.pagination.schemas import SortOrder
from outpost_service.core.pagination.store import Filter


def combine_filters(base: Filter | None, extra: Filter) -> dict[str, Any]:
    """AND two filters without mutating either."""
    if not base:
        return dict(extra)
    return {"$and": [dict(base), dict(extra)]}


def seek_condition(
    fields: Sequence[str],
    values: Sequence[Any],
    order: SortOrder,
) -> dict[str, Any]:
    """Build the condition selecting rows strictly past ``values``.

    For fields (a, b) with boundary values (v1, v2):
        (a op v1) OR (a = v1 AND b op v2)
    """
    if len(fields) != len(values) or not fields:
        msg = "seek fields and values must be non-empty and of equal length"
        raise ValueError(msg)

    operator = order.seek_operator
    branches: list[dict[str, Any]] = []
    for index, field in enumerate(fields):
        branch: dict[str, Any] = {
            prev_field: {"$eq": prev_value}
            for prev_field, prev_value in zip(fields[:index], values[:index], strict=True)
        }
        branch[field] = {operator: values[index]}
        branches.append(branch)

    if len(branches) == 1:
        return branches[0]
    return {"$or": branches}


def build_seek_filter(
    base: Filter | None,
    fields: Sequence[str],
    values: Sequence[Any],
    order: SortOrder,
) -> dict[str, Any]:
    """Extend ``base`` so it only matches rows after the cursor position."""
    return combine_filters(base, seek_condition(fields, values, order))


def sort_spec(fields: Sequence[str], order: SortOrder) -> list[tuple[str, SortOrder]]:
    """Sort specification applying one direction to every key."""
    return [(field, order) for field in fields]


__all__ = [
    "build_seek_filter",
    "combine_filters",
    "seek_condition",
    "sort_spec",
]
