"""Document store port consumed by the paginators.

The paginators never talk to a database directly. They need a store that
can filter, sort, skip, limit, count and run an aggregation pipeline.
Concrete adapters live in ``outpost_service.core.database``:

    - MemoryDocumentStore: in-process collection of dict documents
    - SQLAlchemyDocumentStore: async SQLAlchemy session + declarative model

Any object satisfying this protocol works, including AsyncMock doubles.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from outpost_service.core.pagination.schemas import Expansion, Projection, SortOrder

Filter = Mapping[str, Any]
Pipeline = Sequence[Mapping[str, Any]]
SortSpec = Sequence[tuple[str, SortOrder]]


@runtime_checkable
class DocumentStore(Protocol):
    """Result-set query port.

    ``expand`` and ``projection`` are store-specific enrichment hooks,
    passed through from the caller unmodified.
    """

    async def find(
        self,
        filter: Filter,  # noqa: A002
        *,
        sort: SortSpec,
        skip: int = 0,
        limit: int | None = None,
        expand: Expansion | None = None,
        projection: Projection | None = None,
    ) -> list[Any]:
        """Return records matching ``filter`` in ``sort`` order."""
        ...

    async def count(self, filter: Filter) -> int:  # noqa: A002
        """Return the number of records matching ``filter``."""
        ...

    async def aggregate(self, pipeline: Pipeline) -> list[dict[str, Any]]:
        """Run an aggregation pipeline and return its output rows."""
        ...


__all__ = ["DocumentStore", "Filter", "Pipeline", "SortSpec"]
