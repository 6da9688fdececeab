"""Unit tests for offset (page number) pagination."""
from __future__ import annotations

import pytest

from outpost_service.core.database import MemoryDocumentStore
from outpost_service.core.exceptions import PaginationFailedError
from outpost_service.core.pagination import OffsetPaginator, PaginatorConfig, SortOrder


class InsertAfterFindStore(MemoryDocumentStore):
    """Store that receives a concurrent write between the data and count reads."""

    async def find(self, filter, **kwargs):  # noqa: A002
        rows = await super().find(filter, **kwargs)
        await self.insert_one({"name": "late arrival"})
        return rows


class TestOffsetPaginator:
    """Tests for OffsetPaginator against an in-memory store."""

    @pytest.mark.asyncio
    async def test_first_page_of_twenty_five(self, item_store, make_items):
        """25 records, limit 10, page 1: ten records, three pages, next page 2."""
        page = await OffsetPaginator(item_store).paginate({}, page=1, limit=10)

        assert [r["_id"] for r in page.data] == [i["_id"] for i in make_items(10)]
        info = page.pagination
        assert info.current_page == 1
        assert info.total_pages == 3
        assert info.total_count == 25
        assert info.has_next_page is True
        assert info.next_page == 2
        assert info.has_prev_page is False
        assert info.prev_page is None

    @pytest.mark.asyncio
    async def test_last_partial_page(self, item_store):
        """The last page should hold the remainder and link back only."""
        page = await OffsetPaginator(item_store).paginate({}, page=3, limit=10)

        assert len(page.data) == 5
        assert page.pagination.has_next_page is False
        assert page.pagination.prev_page == 2

    @pytest.mark.asyncio
    async def test_page_beyond_end_is_empty(self, item_store):
        """Pages past the end return no data but keep the totals."""
        page = await OffsetPaginator(item_store).paginate({}, page=9, limit=10)

        assert page.data == []
        assert page.pagination.total_count == 25
        assert page.pagination.has_next_page is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 4, 10, 25, 30])
    async def test_pages_partition_the_result_set(self, item_store, make_items, limit):
        """Pages 1..totalPages should cover every matching record exactly once."""
        paginator = OffsetPaginator(item_store)
        query = {"show": True}
        expected = [i["_id"] for i in make_items(25) if i["show"]]

        first = await paginator.paginate(query, page=1, limit=limit)
        seen = [r["_id"] for r in first.data]
        for number in range(2, first.pagination.total_pages + 1):
            page = await paginator.paginate(query, page=number, limit=limit)
            seen.extend(r["_id"] for r in page.data)

        assert seen == expected
        assert first.pagination.total_count == len(expected)

    @pytest.mark.asyncio
    async def test_empty_result(self):
        """No matches: empty data, zero pages, no navigation."""
        page = await OffsetPaginator(MemoryDocumentStore("empty")).paginate({})

        assert page.data == []
        assert page.pagination.total_pages == 0
        assert page.pagination.total_count == 0
        assert page.pagination.has_next_page is False
        assert page.pagination.has_prev_page is False

    @pytest.mark.asyncio
    async def test_garbage_page_and_limit_fall_back(self, item_store):
        """Non-numeric page/limit should use page 1 and the default limit."""
        paginator = OffsetPaginator(item_store, PaginatorConfig(default_limit=7))

        page = await paginator.paginate({}, page="first", limit="many")

        assert page.pagination.current_page == 1
        assert page.pagination.limit == 7
        assert len(page.data) == 7

    @pytest.mark.asyncio
    async def test_sort_descending_by_field(self, item_store, make_items):
        """sort_field/sort_order should drive the order of the page."""
        page = await OffsetPaginator(item_store).paginate(
            {}, limit=3, sort_field="created_at", sort_order="desc"
        )

        assert [r["name"] for r in page.data] == ["item-25", "item-24", "item-23"]

    @pytest.mark.asyncio
    async def test_count_reflects_write_between_reads(self, make_items):
        """Data and count are separate reads: a write in between shows in the count only."""
        store = InsertAfterFindStore("items", make_items(25))

        page = await OffsetPaginator(store).paginate({}, page=1, limit=10)

        assert len(page.data) == 10
        assert page.pagination.total_count == 26
        assert page.pagination.total_pages == 3


class TestOffsetPaginatorStore:
    """Queries sent to the store and error handling."""

    @pytest.mark.asyncio
    async def test_skip_and_limit_sent_to_store(self, mock_store):
        """Page 3 of 10 should skip 20 and count the same filter."""
        mock_store.count.return_value = 42

        page = await OffsetPaginator(mock_store).paginate(
            {"show": True}, page=3, limit=10, sort_field="price", sort_order=-1
        )

        kwargs = mock_store.find.call_args.kwargs
        assert kwargs["skip"] == 20
        assert kwargs["limit"] == 10
        assert kwargs["sort"] == [("price", SortOrder.DESC)]
        mock_store.count.assert_awaited_once_with({"show": True})
        assert page.pagination.total_pages == 5

    @pytest.mark.asyncio
    async def test_count_failure_wrapped(self, mock_store):
        """A failing count query should fail the whole call."""
        failure = TimeoutError("count timed out")
        mock_store.count.side_effect = failure

        with pytest.raises(PaginationFailedError) as exc_info:
            await OffsetPaginator(mock_store).paginate({})

        assert exc_info.value.cause is failure
        assert exc_info.value.strategy == "offset"

    @pytest.mark.asyncio
    async def test_find_failure_wrapped(self, mock_store):
        """A failing data query should fail the whole call."""
        mock_store.find.side_effect = RuntimeError("boom")

        with pytest.raises(PaginationFailedError):
            await OffsetPaginator(mock_store).paginate({})
