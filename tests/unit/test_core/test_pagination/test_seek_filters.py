"""Tests for keyset seek conditions."""

from __future__ import annotations

import pytest

from outpost_service.core.pagination.filters import (
    build_seek_filter,
    combine_filters,
    seek_condition,
    sort_spec,
)
from outpost_service.core.pagination.schemas import SortOrder


@pytest.mark.unit
class TestSeekCondition:
    """Tests for seek_condition."""

    def test_single_field(self):
        assert seek_condition(["price"], [4.5], SortOrder.ASC) == {"price": {"$gt": 4.5}}
        assert seek_condition(["price"], [4.5], SortOrder.DESC) == {"price": {"$lt": 4.5}}

    def test_compound_fields_pin_earlier_keys(self):
        condition = seek_condition(["price", "_id"], [4.5, "b"], SortOrder.ASC)

        assert condition == {
            "$or": [
                {"price": {"$gt": 4.5}},
                {"price": {"$eq": 4.5}, "_id": {"$gt": "b"}},
            ]
        }

    def test_mismatched_lengths_rejected(self):
        with pytest.raises(ValueError):
            seek_condition(["price", "_id"], [4.5], SortOrder.ASC)

    def test_empty_fields_rejected(self):
        with pytest.raises(ValueError):
            seek_condition([], [], SortOrder.ASC)


@pytest.mark.unit
class TestCombineFilters:
    """Tests for filter composition."""

    def test_empty_base_returns_extra(self):
        assert combine_filters(None, {"a": 1}) == {"a": 1}
        assert combine_filters({}, {"a": 1}) == {"a": 1}

    def test_base_is_anded_and_left_untouched(self):
        base = {"price": {"$gte": 2}}

        combined = build_seek_filter(base, ["price"], [3], SortOrder.ASC)

        assert combined == {"$and": [{"price": {"$gte": 2}}, {"price": {"$gt": 3}}]}
        assert base == {"price": {"$gte": 2}}

    def test_sort_spec_applies_one_direction(self):
        assert sort_spec(["price", "_id"], SortOrder.DESC) == [
            ("price", SortOrder.DESC),
            ("_id", SortOrder.DESC),
        ]
