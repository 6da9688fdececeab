"""Cursor encoding and decoding for keyset pagination.

A cursor is an opaque token carrying the sort-field value of the last
record of the previous page. It is not an offset: it only says "continue
strictly after (or before) this value in sort order".

The cursor format is:
1. UUID values: their canonical hyphenated string form
2. Anything else: a compact JSON document
3. Either one URL-safe base64 encoded for use in URLs

Example:
    >>> token = CursorCodec.encode(42)
    >>> token
    'NDI='
    >>> CursorCodec.decode(token)
    42

Composite cursors (used when a tie-break field is configured) are a base64
JSON array of single-value tokens, so each component keeps its own type.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from outpost_service.core.exceptions import InvalidCursorError

_CANONICAL_UUID = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
_MISSING = object()


def _json_default(value: Any) -> Any:
    """Serialize the few non-JSON types that commonly appear in sort fields."""
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    msg = f"Object of type {type(value).__name__} is not cursor serializable"
    raise TypeError(msg)


def read_field(record: Any, field: str, default: Any = None) -> Any:
    """Read ``field`` from a dict-like or attribute-style record.

    Dotted paths (``"meta.rank"``) walk nested documents.
    """
    current = record
    for part in field.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return default
    return current


class CursorCodec:
    """Encode and decode pagination cursors.

    Usage:
        # Encoding
        cursor = CursorCodec.encode(item["_id"])

        # Decoding
        value = CursorCodec.decode(cursor)  # UUID, int, str, ...

    Decoding never returns garbage: any token that is not valid base64,
    not UTF-8, or neither a UUID nor JSON raises InvalidCursorError.
    """

    @staticmethod
    def encode(value: Any) -> str:
        """Encode a single sort value to an opaque string.

        Args:
            value: UUID or JSON-serializable value (datetimes become ISO strings)

        Returns:
            URL-safe base64 encoded string

        Raises:
            TypeError: If the value cannot be serialized
        """
        if isinstance(value, UUID):
            payload = str(value)
        else:
            payload = json.dumps(value, separators=(",", ":"), default=_json_default)
        return base64.urlsafe_b64encode(payload.encode()).decode()

    @staticmethod
    def decode(cursor: str) -> Any:
        """Decode a cursor string back to its sort value.

        Args:
            cursor: Token produced by ``encode``

        Returns:
            UUID when the payload is a canonical UUID, otherwise the JSON value

        Raises:
            InvalidCursorError: If cursor is invalid or corrupted
        """
        text = CursorCodec._unwrap(cursor)
        if _CANONICAL_UUID.match(text):
            return UUID(text)
        try:
            return json.loads(text)
        except ValueError as e:
            raise InvalidCursorError(cursor, detail="Invalid cursor format") from e

    @staticmethod
    def encode_composite(values: Sequence[Any]) -> str:
        """Encode several sort values (primary key first) into one token."""
        parts = [CursorCodec.encode(value) for value in values]
        payload = json.dumps(parts, separators=(",", ":"))
        return base64.urlsafe_b64encode(payload.encode()).decode()

    @staticmethod
    def decode_composite(cursor: str, size: int) -> list[Any]:
        """Decode a composite token produced by ``encode_composite``.

        Raises:
            InvalidCursorError: If the token is corrupted or has the wrong arity
        """
        text = CursorCodec._unwrap(cursor)
        try:
            parts = json.loads(text)
        except ValueError as e:
            raise InvalidCursorError(cursor, detail="Invalid cursor format") from e
        if (
            not isinstance(parts, list)
            or len(parts) != size
            or not all(isinstance(part, str) for part in parts)
        ):
            raise InvalidCursorError(cursor, detail="Invalid cursor format")
        return [CursorCodec.decode(part) for part in parts]

    @staticmethod
    def from_record(record: Any, fields: Sequence[str]) -> str:
        """Create the cursor pointing just past ``record``.

        One field gives a plain token; several give a composite token.
        """
        values = [read_field(record, field) for field in fields]
        if len(values) == 1:
            return CursorCodec.encode(values[0])
        return CursorCodec.encode_composite(values)

    @staticmethod
    def _unwrap(cursor: str) -> str:
        """Reverse the base64 transform, accepting both alphabets and lost padding."""
        if not isinstance(cursor, str) or not cursor:
            raise InvalidCursorError(
                cursor if isinstance(cursor, str) else None,
                detail="Invalid cursor format",
            )
        normalized = cursor.strip().replace("+", "-").replace("/", "_")
        normalized += "=" * (-len(normalized) % 4)
        try:
            raw = base64.b64decode(normalized, altchars=b"-_", validate=True)
            return raw.decode("utf-8")
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            raise InvalidCursorError(cursor, detail="Invalid cursor format") from e


__all__ = ["CursorCodec", "read_field"]
