"""Plumbing shared by the three pagination strategies.

The strategies are independent classes that satisfy the ``Paginator``
protocol; they share helpers, not a base class.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from pydantic import BaseModel

from outpost_service.core.exceptions import PaginationError, PaginationFailedError

if TYPE_CHECKING:
    from outpost_service.core.pagination.schemas import (
        CursorPageResult,
        OffsetPageResult,
        PaginatorConfig,
    )

OptionsT = TypeVar("OptionsT", bound=BaseModel)


class Paginator(Protocol):
    """Common interface of every strategy: ``paginate(input) -> PageResult``."""

    strategy: str
    config: PaginatorConfig

    async def paginate(
        self,
        query: Any = None,
        options: Any = None,
        **overrides: Any,
    ) -> CursorPageResult[Any] | OffsetPageResult[Any]:
        """Return one bounded, ordered page of the result set."""
        ...


def resolve_options(
    model: type[OptionsT],
    options: OptionsT | Mapping[str, Any] | None,
    overrides: Mapping[str, Any],
) -> OptionsT:
    """Merge an options object/mapping with keyword overrides.

    Keys may be snake_case or camelCase; overrides win.
    """
    merged: dict[str, Any] = {}
    if isinstance(options, BaseModel):
        merged.update(options.model_dump(exclude_unset=True))
    elif options:
        merged.update(model.model_validate(dict(options)).model_dump(exclude_unset=True))
    if overrides:
        merged.update(model.model_validate(dict(overrides)).model_dump(exclude_unset=True))
    return model.model_validate(merged)


@contextmanager
def store_errors(
    strategy: str,
    error_cls: type[PaginationFailedError] = PaginationFailedError,
) -> Iterator[None]:
    """Wrap any store failure in ``error_cls`` with the original as cause.

    A cancellation raised by the store client is wrapped like any other
    failure. Cancellation of the calling task itself is re-raised untouched.
    """
    try:
        yield
    except PaginationError:
        raise
    except asyncio.CancelledError as exc:
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        raise error_cls(exc, strategy=strategy) from exc
    except Exception as exc:
        raise error_cls(exc, strategy=strategy) from exc


__all__ = ["Paginator", "resolve_options", "store_errors"]
