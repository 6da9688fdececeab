"""Unit tests for the exception hierarchy."""
from __future__ import annotations

import asyncio

import pytest

from outpost_service.core.database.exceptions import InvalidFilterError, RepositoryError
from outpost_service.core.exceptions import (
    AggregationPaginationFailedError,
    AppException,
    InvalidCursorError,
    PaginationError,
    PaginationFailedError,
)


def test_app_exception_default_title():
    """Titles should default from the status code."""
    exc = AppException(status_code=404, detail="missing")

    assert exc.title == "Not Found"
    assert exc.type == "about:blank"
    assert exc.extra == {}
    assert str(exc) == "missing"


def test_app_exception_unknown_status_title():
    """Codes without a reason phrase get a generic title."""
    assert AppException(status_code=599, detail="odd").title == "Error"


def test_invalid_cursor_error():
    """Invalid cursors are 400 client errors echoing the token."""
    exc = InvalidCursorError(cursor="abc")

    assert isinstance(exc, PaginationError)
    assert exc.status_code == 400
    assert exc.type == "invalid-cursor"
    assert exc.title == "Invalid Cursor"
    assert exc.extra == {"cursor": "abc"}


def test_pagination_failed_error_keeps_cause():
    """The store's exception should be kept on the error."""
    cause = ConnectionError("refused")

    exc = PaginationFailedError(cause, strategy="offset")

    assert exc.status_code == 500
    assert exc.cause is cause
    assert exc.detail == "Pagination failed: refused"
    assert exc.extra == {"strategy": "offset"}


def test_pagination_failed_error_uses_type_name_for_empty_message():
    """Exceptions without a message are described by their type."""
    exc = PaginationFailedError(asyncio.CancelledError(), strategy="cursor")

    assert exc.detail == "Pagination failed: CancelledError"


def test_aggregation_failure_is_a_pagination_failure():
    """Aggregation failures specialize the generic failure."""
    exc = AggregationPaginationFailedError(ValueError("bad"))

    assert isinstance(exc, PaginationFailedError)
    assert exc.type == "aggregation-pagination-failed"
    assert exc.strategy == "aggregation"
    assert exc.detail == "Aggregation pagination failed: bad"


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (RepositoryError("boom"), "boom"),
        (RepositoryError("boom", {"table": "items"}), "boom (table='items')"),
        (InvalidFilterError("bad op", filter_name="$near"), "bad op (filter='$near')"),
    ],
)
def test_repository_error_str(exc, expected):
    """Store errors should render their details."""
    assert str(exc) == expected
