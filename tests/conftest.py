"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: cached settings reset between tests
    - Store Fixtures: seeded in-memory document stores and AsyncMock doubles
    - Database Fixtures: SQLAlchemy engine on in-memory SQLite
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from outpost_service.core.database import MemoryDocumentStore
from outpost_service.core.settings import clear_all_caches

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

BASE_TIME = datetime(2025, 1, 1, tzinfo=UTC)


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_settings_cache(monkeypatch: pytest.MonkeyPatch):
    """Drop cached settings and PAGINATION_ env so each test starts clean."""
    for name in ("PAGINATION_DEFAULT_LIMIT", "PAGINATION_MAX_LIMIT", "PAGINATION_DEFAULT_STRATEGY"):
        monkeypatch.delenv(name, raising=False)
    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Store Fixtures
# ============================================================================


def item_id(n: int) -> uuid.UUID:
    """Deterministic identifier; ascending ``n`` gives ascending ids."""
    return uuid.UUID(int=n)


def make_item(n: int, **fields: Any) -> dict[str, Any]:
    """Build item document number ``n`` (1-based)."""
    document = {
        "_id": item_id(n),
        "name": f"item-{n:02d}",
        "price": float(n % 7),
        "category": "drinks" if n % 2 else "food",
        "show": n % 5 != 0,
        "created_at": BASE_TIME + timedelta(minutes=n),
    }
    document.update(fields)
    return document


@pytest.fixture
def make_items() -> Callable[[int], list[dict[str, Any]]]:
    """Factory producing ``count`` item documents numbered from 1."""

    def factory(count: int) -> list[dict[str, Any]]:
        return [make_item(n) for n in range(1, count + 1)]

    return factory


@pytest.fixture
def item_store(make_items) -> MemoryDocumentStore:
    """In-memory store seeded with 25 items."""
    return MemoryDocumentStore("items", make_items(25))


@pytest.fixture
def mock_store() -> AsyncMock:
    """AsyncMock document store returning nothing by default.

    Example:
        async def test_failure(mock_store):
            mock_store.find.side_effect = ConnectionError("down")
    """
    store = AsyncMock()
    store.find.return_value = []
    store.count.return_value = 0
    store.aggregate.return_value = []
    return store


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create async SQLAlchemy engine with in-memory SQLite.

    A StaticPool keeps every session on the same in-memory database.

    Yields:
        Async SQLAlchemy engine connected to in-memory SQLite.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    try:
        yield engine
    finally:
        await engine.dispose()
