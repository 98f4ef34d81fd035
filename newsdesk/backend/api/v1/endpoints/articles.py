"""
Articles API Endpoints.

Public reading, authoring and the moderation workflow. Static paths are
declared before `/{article_id}` so they are not captured by it.
"""

from typing import Any, Literal

from fastapi import APIRouter, Depends, Query

from newsdesk.backend.core.dependencies import (
    AdminUser,
    AuthorUser,
    Crypto,
    DbSession,
    Notifier,
    OptionalUser,
    RequestId,
)
from newsdesk.backend.core.pagination import (
    PaginationParams,
    clamp_limit,
    create_paginated_response,
    get_pagination_params,
)
from newsdesk.backend.models.article import ArticleStatus
from newsdesk.backend.models.user import UserRole
from newsdesk.backend.schemas.article import (
    ArticleCreate,
    ArticleListItem,
    ArticleResponse,
    ArticleUpdate,
    RejectRequest,
    ViewCount,
)
from newsdesk.backend.schemas.base import ApiResponse, MessageResponse
from newsdesk.backend.services.article import ArticleService

router = APIRouter()

StatusFilter = Literal["draft", "pending", "published", "rejected"]


@router.get(
    "",
    summary="List published articles (paginated)",
)
async def list_published(
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    sort_by: Literal["published_at", "views", "created_at"] = Query(default="published_at"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
) -> dict[str, Any]:
    service = ArticleService(db, crypto)
    result = await service.get_published_articles(
        pagination.page, pagination.limit, sort_by, sort_order
    )
    return create_paginated_response(result, ArticleListItem, request_id)


@router.get(
    "/search",
    summary="Search published articles",
    description="Case-insensitive match over title, excerpt and content.",
)
async def search_articles(
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    q: str = Query(..., min_length=1, max_length=100, description="Search query"),
    pagination: PaginationParams = Depends(get_pagination_params),
) -> dict[str, Any]:
    service = ArticleService(db, crypto)
    result = await service.search_articles(q, pagination.page, pagination.limit)
    return create_paginated_response(result, ArticleListItem, request_id)


@router.get(
    "/popular",
    response_model=ApiResponse[list[ArticleListItem]],
    summary="Most viewed recent articles",
)
async def popular_articles(
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    limit: int | None = Query(default=None, ge=1),
    days: int = Query(default=7, ge=1, le=365),
) -> ApiResponse[list[ArticleListItem]]:
    service = ArticleService(db, crypto)
    articles = await service.get_popular_articles(limit=clamp_limit(limit), days=days)
    return ApiResponse(data=[ArticleListItem.model_validate(a) for a in articles])


@router.get(
    "/pending",
    response_model=ApiResponse[list[ArticleResponse]],
    summary="Moderation queue",
    description="Pending articles, longest waiting first.",
)
async def pending_articles(
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[list[ArticleResponse]]:
    service = ArticleService(db, crypto)
    articles = await service.get_pending_articles()
    return ApiResponse(data=[ArticleResponse.model_validate(a) for a in articles])


@router.get(
    "/admin",
    summary="All articles (admin, paginated)",
)
async def admin_list(
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    status: StatusFilter | None = Query(default=None),
    sort_by: Literal["created_at", "updated_at", "published_at", "views", "title"] = Query(
        default="created_at"
    ),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
) -> dict[str, Any]:
    service = ArticleService(db, crypto)
    result = await service.get_all_articles(
        pagination.page, pagination.limit, status, sort_by, sort_order
    )
    return create_paginated_response(result, ArticleListItem, request_id)


@router.get(
    "/stats",
    response_model=ApiResponse[dict[str, dict[str, int]]],
    summary="Article statistics by status",
)
async def article_statistics(
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[dict[str, dict[str, int]]]:
    service = ArticleService(db, crypto)
    return ApiResponse(data=await service.statistics())


@router.get(
    "/me",
    summary="My articles (paginated)",
)
async def my_articles(
    author: AuthorUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    status: StatusFilter | None = Query(default=None),
) -> dict[str, Any]:
    service = ArticleService(db, crypto)
    result = await service.get_articles_by_author(
        author.id, pagination.page, pagination.limit, status
    )
    return create_paginated_response(result, ArticleListItem, request_id)


@router.get(
    "/slug/{slug}",
    response_model=ApiResponse[ArticleResponse],
    summary="Get an article by slug",
)
async def get_by_slug(
    slug: str,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[ArticleResponse]:
    service = ArticleService(db, crypto)
    article = await service.get_article_by_slug(slug)
    return ApiResponse(data=ArticleResponse.model_validate(article))


@router.get(
    "/category/{category_id}",
    summary="Published articles in a category (paginated)",
)
async def by_category(
    category_id: str,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
) -> dict[str, Any]:
    service = ArticleService(db, crypto)
    result = await service.get_articles_by_category(
        category_id, pagination.page, pagination.limit
    )
    return create_paginated_response(result, ArticleListItem, request_id)


@router.get(
    "/author/{author_id}",
    summary="Articles of an author (paginated)",
    description="Anonymous readers and other users only see published articles.",
)
async def by_author(
    author_id: str,
    user: OptionalUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    status: StatusFilter | None = Query(default=None),
) -> dict[str, Any]:
    privileged = user is not None and (user.id == author_id or user.role == UserRole.ADMIN)
    if not privileged:
        status = ArticleStatus.PUBLISHED
    service = ArticleService(db, crypto)
    result = await service.get_articles_by_author(
        author_id, pagination.page, pagination.limit, status
    )
    return create_paginated_response(result, ArticleListItem, request_id)


@router.get(
    "/{article_id}",
    response_model=ApiResponse[ArticleResponse],
    summary="Get an article",
)
async def get_article(
    article_id: str,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[ArticleResponse]:
    service = ArticleService(db, crypto)
    article = await service.get_article(article_id)
    return ApiResponse(data=ArticleResponse.model_validate(article))


@router.post(
    "",
    response_model=ApiResponse[ArticleResponse],
    status_code=201,
    summary="Create an article",
    description="New articles start as drafts.",
)
async def create_article(
    data: ArticleCreate,
    author: AuthorUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[ArticleResponse]:
    service = ArticleService(db, crypto)
    article = await service.create_article(data, author.id)
    return ApiResponse(data=ArticleResponse.model_validate(article))


@router.put(
    "/{article_id}",
    response_model=ApiResponse[ArticleResponse],
    summary="Update an article",
)
async def update_article(
    article_id: str,
    data: ArticleUpdate,
    author: AuthorUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[ArticleResponse]:
    service = ArticleService(db, crypto)
    article = await service.update_article(article_id, data, author.id)
    return ApiResponse(data=ArticleResponse.model_validate(article))


@router.delete(
    "/{article_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete an article",
)
async def delete_article(
    article_id: str,
    author: AuthorUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    service = ArticleService(db, crypto)
    await service.delete_article(article_id, author.id)
    return ApiResponse(data=MessageResponse(message="Article deleted"))


@router.post(
    "/{article_id}/submit",
    response_model=ApiResponse[ArticleResponse],
    summary="Submit for review",
)
async def submit_article(
    article_id: str,
    author: AuthorUser,
    db: DbSession,
    crypto: Crypto,
    notifier: Notifier,
    request_id: RequestId,
) -> ApiResponse[ArticleResponse]:
    service = ArticleService(db, crypto, notifier)
    article = await service.submit_for_review(article_id, author.id)
    return ApiResponse(data=ArticleResponse.model_validate(article))


@router.post(
    "/{article_id}/approve",
    response_model=ApiResponse[ArticleResponse],
    summary="Approve and publish",
)
async def approve_article(
    article_id: str,
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    notifier: Notifier,
    request_id: RequestId,
) -> ApiResponse[ArticleResponse]:
    service = ArticleService(db, crypto, notifier)
    article = await service.approve_article(article_id, admin.id)
    return ApiResponse(data=ArticleResponse.model_validate(article))


@router.post(
    "/{article_id}/reject",
    response_model=ApiResponse[ArticleResponse],
    summary="Reject with a reason",
)
async def reject_article(
    article_id: str,
    data: RejectRequest,
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    notifier: Notifier,
    request_id: RequestId,
) -> ApiResponse[ArticleResponse]:
    service = ArticleService(db, crypto, notifier)
    article = await service.reject_article(article_id, admin.id, data.reason)
    return ApiResponse(data=ArticleResponse.model_validate(article))


@router.put(
    "/{article_id}/views",
    response_model=ApiResponse[ViewCount],
    summary="Count a view",
)
async def increment_views(
    article_id: str,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[ViewCount]:
    service = ArticleService(db, crypto)
    views = await service.increment_views(article_id)
    return ApiResponse(data=ViewCount(id=article_id, views=views))
