"""Strategy selection by name.

    paginator = create_paginator(store, "cursor", {"defaultLimit": 10})
    page = await paginator.paginate({"show": True}, limit=10)

Unknown or missing strategy names fall back to offset pagination.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic.alias_generators import to_camel

from outpost_service.core.pagination.aggregation import AggregationPaginator
from outpost_service.core.pagination.keyset import CursorPaginator
from outpost_service.core.pagination.offset import OffsetPaginator
from outpost_service.core.pagination.schemas import PaginatorConfig
from outpost_service.core.pagination.store import DocumentStore

AnyPaginator = CursorPaginator | OffsetPaginator | AggregationPaginator


class PaginationStrategy(StrEnum):
    """Available pagination strategies."""

    CURSOR = "cursor"
    OFFSET = "offset"
    AGGREGATION = "aggregation"

    @classmethod
    def parse(cls, value: str | PaginationStrategy | None) -> PaginationStrategy:
        """Resolve a strategy name, defaulting to OFFSET."""
        if isinstance(value, PaginationStrategy):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.OFFSET
        return cls.OFFSET


_STRATEGIES: dict[PaginationStrategy, type[AnyPaginator]] = {
    PaginationStrategy.CURSOR: CursorPaginator,
    PaginationStrategy.OFFSET: OffsetPaginator,
    PaginationStrategy.AGGREGATION: AggregationPaginator,
}


def _field_names(values: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize camelCase configuration keys to field names."""
    aliases = {to_camel(name): name for name in PaginatorConfig.model_fields}
    return {aliases.get(key, key): value for key, value in values.items()}


def build_config(
    config: PaginatorConfig | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> PaginatorConfig:
    """Build a validated configuration from a config object, mapping and overrides."""
    values: dict[str, Any] = {}
    if isinstance(config, PaginatorConfig):
        values.update(config.model_dump())
    elif config:
        values.update(_field_names(config))
    values.update(_field_names(overrides))
    return PaginatorConfig.model_validate(values)


def create_paginator(
    store: DocumentStore,
    strategy: str | PaginationStrategy | None = None,
    config: PaginatorConfig | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> AnyPaginator:
    """Create a configured, reusable paginator bound to ``store``.

    Args:
        store: Document store the paginator queries
        strategy: "cursor", "offset" or "aggregation" (anything else -> offset)
        config: Paginator configuration or mapping of configuration values
        **overrides: Configuration values taking precedence over ``config``

    Returns:
        A stateless paginator instance
    """
    paginator_cls = _STRATEGIES[PaginationStrategy.parse(strategy)]
    return paginator_cls(store, build_config(config, **overrides))


__all__ = ["AnyPaginator", "PaginationStrategy", "build_config", "create_paginator"]
