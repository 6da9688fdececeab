"""Lenient coercion and clamping of page/limit inputs.

Query-string input is untrusted and often not numeric. Malformed values
are not errors: they fall back to the configured default, and the result
is always clamped to its valid range.

    >>> sanitize_limit("12abc", default=20, maximum=100)
    12
    >>> sanitize_limit("abc", default=20, maximum=100)
    20
    >>> sanitize_limit(1000, default=20, maximum=100)
    100
    >>> sanitize_page(-3)
    1
"""

from __future__ import annotations

import math
import re
from typing import Any

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_int(value: Any) -> int | None:
    """Read the leading integer out of ``value``.

    Returns None when no integer can be read (None, booleans, NaN,
    empty or non-numeric strings).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def sanitize_limit(value: Any, *, default: int, maximum: int) -> int:
    """Effective limit: missing/zero/garbage -> default, then clamp to [1, maximum]."""
    requested = coerce_int(value) or default
    return min(max(requested, 1), maximum)


def sanitize_page(value: Any) -> int:
    """Effective 1-based page number."""
    return max(coerce_int(value) or 1, 1)


def page_skip(page: int, limit: int) -> int:
    """Number of records preceding ``page``."""
    return (page - 1) * limit


__all__ = ["coerce_int", "page_skip", "sanitize_limit", "sanitize_page"]
