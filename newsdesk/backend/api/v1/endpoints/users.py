"""
Users API Endpoints.

Public author directory and user lookup.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from newsdesk.backend.core.dependencies import Crypto, CurrentUser, DbSession, RequestId
from newsdesk.backend.core.pagination import (
    PagedResult,
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from newsdesk.backend.schemas.base import ApiResponse
from newsdesk.backend.schemas.user import AuthorResponse, UserResponse
from newsdesk.backend.services.user import AuthorStats, UserService

router = APIRouter()


def _author(stats: AuthorStats) -> AuthorResponse:
    author = AuthorResponse.model_validate(stats.user)
    author.articles_count = stats.articles_count
    return author


@router.get(
    "/authors",
    summary="List authors (paginated)",
    description="Public author directory. Search matches first name, last name and email.",
)
async def list_authors(
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    search: str | None = Query(default=None, max_length=100),
) -> dict[str, Any]:
    service = UserService(db, crypto)
    result = await service.get_authors(pagination.page, pagination.limit, search)
    authors = PagedResult(
        items=[_author(stats) for stats in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )
    return create_paginated_response(authors, AuthorResponse, request_id)


@router.get(
    "/authors/{slug}",
    response_model=ApiResponse[AuthorResponse],
    summary="Get an author by slug",
)
async def get_author(
    slug: str,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[AuthorResponse]:
    service = UserService(db, crypto)
    stats = await service.get_author_by_slug(slug)
    return ApiResponse(data=_author(stats))


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Get a user",
)
async def get_user(
    user_id: str,
    user: CurrentUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    service = UserService(db, crypto)
    found = await service.get_user_info(user_id)
    return ApiResponse(data=UserResponse.model_validate(found))
