"""
Pagination Utilities.

Page-based pagination for list endpoints: `?page=2&limit=10`.
Defaults and the upper bound on `limit` come from application.yaml.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel

from newsdesk.backend.core.config import get_app_config
from newsdesk.backend.core.utils import total_pages
from newsdesk.backend.schemas.base import PaginatedResponse, PaginationInfo, ResponseMetadata

T = TypeVar("T")


@dataclass
class PaginationParams:
    """Pagination parameters extracted from query string."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        """Number of rows to skip for the current page."""
        return (self.page - 1) * self.limit


def clamp_limit(limit: int | None) -> int:
    """Apply the configured default and ceiling to a requested page size."""
    pagination = get_app_config().application.pagination
    if limit is None or limit < 1:
        return pagination.default_limit
    return min(limit, pagination.max_limit)


def get_pagination_params(
    page: int = Query(default=1, ge=1, description="Page number, starting at 1"),
    limit: int | None = Query(
        default=None,
        ge=1,
        description="Items per page (capped by configuration)",
    ),
) -> PaginationParams:
    """
    FastAPI dependency for pagination parameters.

    Usage:
        @router.get("/articles")
        async def list_articles(
            pagination: PaginationParams = Depends(get_pagination_params),
        ):
            ...
    """
    return PaginationParams(page=page, limit=clamp_limit(limit))


@dataclass
class PagedResult(Generic[T]):
    """Items of one page plus the total across all pages."""

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return total_pages(self.total, self.limit)

    @property
    def has_more(self) -> bool:
        return self.page < self.pages


def paginate_in_memory(items: list[T], page: int, limit: int) -> PagedResult[T]:
    """Slice an already filtered list into one page."""
    start = (page - 1) * limit
    return PagedResult(items=items[start:start + limit], total=len(items), page=page, limit=limit)


def create_paginated_response(
    result: PagedResult[Any],
    item_schema: type[BaseModel],
    request_id: str | None = None,
) -> dict[str, Any]:
    """
    Create a standardized paginated response.

    Args:
        result: Page of items (model instances or dicts) with totals
        item_schema: Pydantic schema to validate items
        request_id: Request ID for metadata

    Returns:
        Dict matching PaginatedResponse structure
    """
    validated_items = [
        item_schema.model_validate(item).model_dump(mode="json")
        for item in result.items
    ]

    pagination = PaginationInfo(
        total=result.total,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
        has_more=result.has_more,
    )

    response = PaginatedResponse(
        data=validated_items,
        pagination=pagination,
        metadata=ResponseMetadata(request_id=request_id),
    )
    return response.model_dump(mode="json")
