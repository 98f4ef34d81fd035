"""
Unit Tests for Pagination Utilities.

Tests the pagination helpers and utilities.
Limits come from the real application.yaml (default 10, max 50).
"""

import pytest
from pydantic import BaseModel

from newsdesk.backend.core.pagination import (
    PagedResult,
    PaginationParams,
    clamp_limit,
    create_paginated_response,
    get_pagination_params,
    paginate_in_memory,
)


class ItemSchema(BaseModel):
    id: str
    name: str


class TestClampLimit:
    """Tests for the configured default and ceiling."""

    def test_missing_limit_uses_default(self):
        assert clamp_limit(None) == 10

    def test_non_positive_limit_uses_default(self):
        assert clamp_limit(0) == 10
        assert clamp_limit(-3) == 10

    def test_limit_within_bounds_kept(self):
        assert clamp_limit(25) == 25

    def test_limit_capped_at_maximum(self):
        assert clamp_limit(500) == 50


class TestPaginationParams:
    """Tests for PaginationParams dataclass."""

    def test_first_page_has_no_offset(self):
        assert PaginationParams(page=1, limit=10).offset == 0

    def test_offset_skips_previous_pages(self):
        assert PaginationParams(page=3, limit=20).offset == 40

    def test_dependency_clamps_limit(self):
        params = get_pagination_params(page=2, limit=1000)
        assert params.page == 2
        assert params.limit == 50


class TestPagedResult:
    def test_pages_rounds_up(self):
        result = PagedResult(items=[], total=21, page=1, limit=10)
        assert result.pages == 3

    def test_has_more_until_last_page(self):
        assert PagedResult(items=[], total=21, page=2, limit=10).has_more is True
        assert PagedResult(items=[], total=21, page=3, limit=10).has_more is False

    def test_empty_result(self):
        result = PagedResult(items=[], total=0, page=1, limit=10)
        assert result.pages == 0
        assert result.has_more is False


class TestPaginateInMemory:
    def test_slices_requested_page(self):
        result = paginate_in_memory(list(range(25)), page=2, limit=10)

        assert result.items == list(range(10, 20))
        assert result.total == 25
        assert result.pages == 3

    def test_page_past_end_is_empty(self):
        result = paginate_in_memory([1, 2, 3], page=5, limit=10)

        assert result.items == []
        assert result.total == 3


class TestCreatePaginatedResponse:
    """Tests for create_paginated_response function."""

    def test_creates_valid_response_structure(self):
        items = [{"id": "1", "name": "Item 1"}, {"id": "2", "name": "Item 2"}]
        result = PagedResult(items=items, total=10, page=1, limit=2)

        response = create_paginated_response(result, ItemSchema)

        assert response["success"] is True
        assert len(response["data"]) == 2
        assert response["pagination"] == {
            "total": 10,
            "page": 1,
            "limit": 2,
            "pages": 5,
            "has_more": True,
        }

    def test_includes_request_id(self):
        result = PagedResult(items=[], total=0, page=1, limit=10)

        response = create_paginated_response(result, ItemSchema, request_id="req-123")

        assert response["metadata"]["request_id"] == "req-123"
        assert response["data"] == []

    def test_validates_items_through_schema(self):
        """Extra fields are dropped by the item schema."""
        items = [{"id": "1", "name": "Test", "extra_field": "ignored"}]
        result = PagedResult(items=items, total=1, page=1, limit=10)

        response = create_paginated_response(result, ItemSchema)

        assert "extra_field" not in response["data"][0]
        assert response["pagination"]["has_more"] is False

    def test_invalid_item_raises(self):
        result = PagedResult(items=[{"id": "1"}], total=1, page=1, limit=10)

        with pytest.raises(Exception):
            create_paginated_response(result, ItemSchema)
