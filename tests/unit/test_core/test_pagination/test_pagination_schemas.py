"""Unit tests for pagination schemas and option resolution."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from outpost_service.core.pagination.base import resolve_options
from outpost_service.core.pagination.schemas import (
    CursorOptions,
    CursorPageInfo,
    CursorPageResult,
    OffsetOptions,
    OffsetPageInfo,
    PaginatorConfig,
    SortOrder,
)


class TestSortOrder:
    """Tests for SortOrder parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("desc", SortOrder.DESC),
            ("DESC", SortOrder.DESC),
            (-1, SortOrder.DESC),
            ("asc", SortOrder.ASC),
            ("sideways", SortOrder.ASC),
            (1, SortOrder.ASC),
            (None, SortOrder.ASC),
        ],
    )
    def test_parse(self, value, expected):
        """Only desc/-1 should mean descending."""
        assert SortOrder.parse(value) is expected

    def test_seek_operator_follows_direction(self):
        """Ascending seeks past with $gt, descending with $lt."""
        assert SortOrder.ASC.seek_operator == "$gt"
        assert SortOrder.DESC.seek_operator == "$lt"


class TestPaginatorConfig:
    """Tests for PaginatorConfig."""

    def test_defaults(self):
        """Defaults should be 20/100 ordered by _id ascending, no tie-break."""
        config = PaginatorConfig()

        assert config.default_limit == 20
        assert config.max_limit == 100
        assert config.default_sort_field == "_id"
        assert config.default_sort_order is SortOrder.ASC
        assert config.tiebreak_field is None

    def test_accepts_camel_case_keys(self):
        """Configuration written in camelCase should validate."""
        config = PaginatorConfig.model_validate(
            {"defaultLimit": 5, "maxLimit": 50, "defaultSortOrder": "desc"}
        )

        assert config.default_limit == 5
        assert config.max_limit == 50
        assert config.default_sort_order is SortOrder.DESC

    def test_max_limit_below_default_limit_accepted(self):
        """A max_limit under the default page size is a valid configuration."""
        config = PaginatorConfig(max_limit=10)

        assert config.default_limit == 20
        assert config.max_limit == 10

    def test_frozen(self):
        """Configuration is immutable once built."""
        config = PaginatorConfig()

        with pytest.raises(ValidationError):
            config.default_limit = 5


class TestResolveOptions:
    """Tests for merging option objects and overrides."""

    def test_overrides_win(self):
        """Keyword overrides should take precedence over the options mapping."""
        opts = resolve_options(
            CursorOptions,
            {"limit": "10", "sortField": "price", "cursor": "abc"},
            {"limit": 5},
        )

        assert opts.limit == 5
        assert opts.sort_field == "price"
        assert opts.cursor == "abc"

    def test_unset_override_keeps_option(self):
        """Absent overrides should not reset values from the options."""
        opts = resolve_options(OffsetOptions, OffsetOptions(page=3), {})

        assert opts.page == 3

    def test_blank_sort_field_means_default(self):
        """An empty sort field should be treated as absent."""
        opts = resolve_options(CursorOptions, {"sort_field": "  "}, {})

        assert opts.sort_field is None

    def test_sort_order_token_parsed(self):
        """Sort order tokens should become SortOrder values."""
        opts = resolve_options(CursorOptions, {"sortOrder": "desc"}, {})

        assert opts.sort_order is SortOrder.DESC


class TestPageInfo:
    """Tests for page metadata."""

    def test_offset_page_info_middle_page(self):
        """A middle page should link both ways."""
        info = OffsetPageInfo.build(page=2, limit=10, total_count=25)

        assert info.total_pages == 3
        assert info.has_next_page is True
        assert info.has_prev_page is True
        assert info.next_page == 3
        assert info.prev_page == 1

    def test_offset_page_info_empty(self):
        """No records means no pages and no navigation."""
        info = OffsetPageInfo.build(page=1, limit=10, total_count=0)

        assert info.total_pages == 0
        assert info.has_next_page is False
        assert info.has_prev_page is False
        assert info.next_page is None
        assert info.prev_page is None

    def test_page_result_serializes_camel_case(self):
        """Responses should use the camelCase wire names."""
        result = CursorPageResult(
            data=[{"_id": 1}],
            pagination=CursorPageInfo(
                has_next_page=True,
                next_cursor="MQ==",
                limit=1,
                sort_field="_id",
                sort_order=SortOrder.DESC,
            ),
        )

        body = result.model_dump(by_alias=True)

        assert body["pagination"] == {
            "hasNextPage": True,
            "nextCursor": "MQ==",
            "limit": 1,
            "sortField": "_id",
            "sortOrder": -1,
        }
