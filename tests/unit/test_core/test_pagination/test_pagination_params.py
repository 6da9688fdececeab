"""Unit tests for page/limit coercion and clamping."""
from __future__ import annotations

import pytest

from outpost_service.core.pagination.params import (
    coerce_int,
    page_skip,
    sanitize_limit,
    sanitize_page,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (5, 5),
        ("12", 12),
        ("  7 ", 7),
        ("12abc", 12),
        ("-3", -3),
        (4.9, 4),
        (b"8", 8),
        ("abc", None),
        ("", None),
        (None, None),
        (True, None),
        (float("nan"), None),
        ([1], None),
    ],
)
def test_coerce_int_reads_leading_integer(value, expected):
    """coerce_int should read a leading integer or give up with None."""
    assert coerce_int(value) == expected


@pytest.mark.parametrize(
    ("requested", "expected"),
    [
        (None, 20),
        ("abc", 20),
        (0, 20),
        ("0", 20),
        (-5, 1),
        (1, 1),
        (50, 50),
        (100, 100),
        (1000, 100),
        ("1000", 100),
    ],
)
def test_sanitize_limit_clamps_into_range(requested, expected):
    """The effective limit should always land in [1, maximum]."""
    assert sanitize_limit(requested, default=20, maximum=100) == expected


def test_sanitize_limit_never_leaves_bounds():
    """No integer input should escape [1, maximum]."""
    for requested in range(-50, 250, 7):
        assert 1 <= sanitize_limit(requested, default=20, maximum=100) <= 100


@pytest.mark.parametrize(
    ("requested", "expected"),
    [(None, 1), ("abc", 1), (0, 1), (-2, 1), ("3", 3), (9, 9)],
)
def test_sanitize_page_is_one_based(requested, expected):
    """Page numbers should fall back to 1 and never go below it."""
    assert sanitize_page(requested) == expected


def test_page_skip():
    """Skip should count the records on preceding pages."""
    assert page_skip(1, 10) == 0
    assert page_skip(3, 10) == 20
