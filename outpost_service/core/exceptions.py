"""Application exceptions, rendered as RFC 7807 problem details.

``AppException`` carries every member of a problem document; the HTTP layer
(``outpost_service.app.exception_handlers``) serializes it unchanged. The
pagination taxonomy below separates client mistakes (a bad cursor, 400) from
store failures (500) so callers can retry only the latter.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any


def default_title(status_code: int) -> str:
    """Reason phrase for ``status_code``, or ``"Error"`` for unknown codes."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


class AppException(Exception):
    """Base application exception.

    Attributes:
        status_code: HTTP status code
        detail: Human-readable explanation of this occurrence
        type: Problem type identifier
        title: Short summary of the problem type; defaults to the reason phrase
        instance: URI of this occurrence; the handler falls back to the request URL
        extra: Additional members merged into the problem document

    Example:
        raise AppException(
            status_code=503,
            detail="Item store is restarting",
            type="store-unavailable",
            extra={"store": "items"},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)


class PaginationError(AppException):
    """Base class for every error raised by the pagination subsystem."""


class InvalidCursorError(PaginationError):
    """Raised when a continuation token cannot be decoded.

    This is a client-input error: the token was tampered with, truncated,
    or was never produced by the cursor codec. It is never retried.

    Example:
        raise InvalidCursorError(cursor="not-valid-base64!!!")
    """

    def __init__(
        self,
        cursor: str | None = None,
        detail: str = "Invalid cursor provided",
        instance: str | None = None,
    ) -> None:
        """Initialize invalid cursor exception.

        Args:
            cursor: The offending token, echoed back in ``extra``.
            detail: Human-readable error message.
            instance: URI reference identifying this specific occurrence.
        """
        self.cursor = cursor
        super().__init__(
            status_code=400,
            detail=detail,
            type="invalid-cursor",
            title="Invalid Cursor",
            instance=instance,
            extra={"cursor": cursor} if cursor is not None else None,
        )


class PaginationFailedError(PaginationError):
    """Raised when the underlying store query of a paginator fails.

    The original exception is kept on ``cause`` and chained as
    ``__cause__`` so upstream handlers can log the full context.

    Example:
        try:
            rows = await store.find(...)
        except Exception as exc:
            raise PaginationFailedError(exc, strategy="offset") from exc
    """

    type_id = "pagination-failed"
    prefix = "Pagination failed"

    def __init__(
        self,
        cause: BaseException,
        strategy: str | None = None,
        instance: str | None = None,
    ) -> None:
        """Initialize pagination failure.

        Args:
            cause: Exception raised by the store client.
            strategy: Name of the paginator that failed.
            instance: URI reference identifying this specific occurrence.
        """
        self.cause = cause
        self.strategy = strategy
        message = str(cause) or type(cause).__name__
        extra: dict[str, Any] = {}
        if strategy:
            extra["strategy"] = strategy
        super().__init__(
            status_code=500,
            detail=f"{self.prefix}: {message}",
            type=self.type_id,
            title="Pagination Failed",
            instance=instance,
            extra=extra,
        )


class AggregationPaginationFailedError(PaginationFailedError):
    """Raised when an aggregation pipeline fails during pagination."""

    type_id = "aggregation-pagination-failed"
    prefix = "Aggregation pagination failed"

    def __init__(
        self,
        cause: BaseException,
        strategy: str | None = "aggregation",
        instance: str | None = None,
    ) -> None:
        super().__init__(cause, strategy=strategy, instance=instance)


__all__ = [
    "AggregationPaginationFailedError",
    "AppException",
    "InvalidCursorError",
    "PaginationError",
    "PaginationFailedError",
]
