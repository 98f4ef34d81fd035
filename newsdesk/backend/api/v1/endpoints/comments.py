"""
Comments API Endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from newsdesk.backend.core.dependencies import (
    AdminUser,
    Crypto,
    CurrentUser,
    DbSession,
    Notifier,
    OptionalUser,
    RequestId,
)
from newsdesk.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from newsdesk.backend.models.user import UserRole
from newsdesk.backend.schemas.base import ApiResponse, MessageResponse
from newsdesk.backend.schemas.comment import (
    CommentCreate,
    CommentResponse,
    CommentStatistics,
    CommentThread,
    CommentUpdate,
    DeletedCount,
    ModerateRequest,
)
from newsdesk.backend.services.comment import CommentService

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[CommentResponse],
    status_code=201,
    summary="Post a comment or reply",
)
async def create_comment(
    data: CommentCreate,
    user: CurrentUser,
    db: DbSession,
    crypto: Crypto,
    notifier: Notifier,
    request_id: RequestId,
) -> ApiResponse[CommentResponse]:
    service = CommentService(db, crypto, notifier)
    comment = await service.create_comment(data.article_id, data.content, user.id, data.parent_id)
    return ApiResponse(data=CommentResponse.model_validate(comment))


@router.get(
    "/me",
    summary="My comments (paginated)",
)
async def my_comments(
    user: CurrentUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
) -> dict[str, Any]:
    service = CommentService(db, crypto)
    result = await service.get_user_comments(user.id, page=pagination.page, limit=pagination.limit)
    return create_paginated_response(result, CommentResponse, request_id)


@router.get(
    "/admin",
    summary="All comments (admin, paginated)",
)
async def all_comments(
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    include_deleted: bool = Query(default=True),
) -> dict[str, Any]:
    service = CommentService(db, crypto)
    result = await service.get_all_comments(include_deleted, pagination.page, pagination.limit)
    return create_paginated_response(result, CommentResponse, request_id)


@router.get(
    "/stats",
    response_model=ApiResponse[CommentStatistics],
    summary="Comment statistics",
)
async def comment_statistics(
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[CommentStatistics]:
    service = CommentService(db, crypto)
    return ApiResponse(data=await service.statistics())


@router.get(
    "/article/{article_id}",
    summary="Comment threads of an article (paginated)",
    description="Top-level comments newest first, replies oldest first. "
    "Only administrators can include deleted comments.",
)
async def article_comments(
    article_id: str,
    user: OptionalUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    include_deleted: bool = Query(default=False),
) -> dict[str, Any]:
    is_admin = user is not None and user.role == UserRole.ADMIN
    service = CommentService(db, crypto)
    result = await service.get_article_comments(
        article_id,
        include_deleted=include_deleted and is_admin,
        page=pagination.page,
        limit=pagination.limit,
    )
    return create_paginated_response(result, CommentThread, request_id)


@router.get(
    "/{comment_id}",
    response_model=ApiResponse[CommentResponse],
    summary="Get a comment",
)
async def get_comment(
    comment_id: str,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[CommentResponse]:
    service = CommentService(db, crypto)
    return ApiResponse(data=CommentResponse.model_validate(await service.get_comment(comment_id)))


@router.get(
    "/{comment_id}/replies",
    response_model=ApiResponse[list[CommentResponse]],
    summary="Replies to a comment",
)
async def comment_replies(
    comment_id: str,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[list[CommentResponse]]:
    service = CommentService(db, crypto)
    replies = await service.get_comment_replies(comment_id)
    return ApiResponse(data=[CommentResponse.model_validate(r) for r in replies])


@router.put(
    "/{comment_id}",
    response_model=ApiResponse[CommentResponse],
    summary="Edit a comment",
)
async def update_comment(
    comment_id: str,
    data: CommentUpdate,
    user: CurrentUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[CommentResponse]:
    service = CommentService(db, crypto)
    comment = await service.update_comment(comment_id, data.content, user.id)
    return ApiResponse(data=CommentResponse.model_validate(comment))


@router.delete(
    "/{comment_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete a comment",
)
async def delete_comment(
    comment_id: str,
    user: CurrentUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    service = CommentService(db, crypto)
    await service.delete_comment(comment_id, user.id)
    return ApiResponse(data=MessageResponse(message="Comment deleted"))


@router.post(
    "/{comment_id}/moderate",
    response_model=ApiResponse[CommentResponse],
    summary="Remove a comment as moderator",
)
async def moderate_comment(
    comment_id: str,
    data: ModerateRequest,
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[CommentResponse]:
    service = CommentService(db, crypto)
    comment = await service.moderate_delete(comment_id, admin.id, data.reason)
    return ApiResponse(data=CommentResponse.model_validate(comment))


@router.delete(
    "/user/{user_id}",
    response_model=ApiResponse[DeletedCount],
    summary="Remove every comment of a user",
)
async def delete_user_comments(
    user_id: str,
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[DeletedCount]:
    service = CommentService(db, crypto)
    deleted = await service.delete_user_comments(user_id, admin.id)
    return ApiResponse(data=DeletedCount(deleted=deleted))
