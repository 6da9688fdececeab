"""Document store exceptions.

Adapters raise these instead of leaking KeyError, TypeError or SQLAlchemy
errors for queries they cannot express. Paginators wrap them, like any other
store failure, in ``PaginationFailedError``.
"""
from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """A store operation could not be carried out.

    Attributes:
        message: Error description
        details: Context rendered after the message, e.g. ``(filter='$near')``
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} ({rendered})"


class InvalidFilterError(RepositoryError):
    """A filter, sort, projection or pipeline the adapter cannot evaluate.

    ``filter_name`` names the offending operator, stage or field.
    """

    def __init__(self, message: str, filter_name: str | None = None):
        super().__init__(message, details={"filter": filter_name} if filter_name else None)


__all__ = ["InvalidFilterError", "RepositoryError"]
