"""
Admin Users API Endpoints.

User management for administrators. Every route requires the admin role.
"""

from typing import Any, Literal

from fastapi import APIRouter, Depends, Query

from newsdesk.backend.core.dependencies import AdminUser, Crypto, DbSession, RequestId
from newsdesk.backend.core.pagination import (
    PaginationParams,
    clamp_limit,
    create_paginated_response,
    get_pagination_params,
)
from newsdesk.backend.schemas.base import ApiResponse, MessageResponse
from newsdesk.backend.schemas.user import (
    BlockRequest,
    RoleChangeRequest,
    UserResponse,
    UserStatistics,
)
from newsdesk.backend.services.admin_user import AdminUserService

router = APIRouter()


@router.get(
    "",
    summary="List users (paginated)",
)
async def list_users(
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    role: Literal["user", "author", "admin"] | None = Query(default=None),
    is_blocked: bool | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    sort_by: Literal["created_at", "last_login", "email", "role"] = Query(default="created_at"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
) -> dict[str, Any]:
    service = AdminUserService(db, crypto)
    result = await service.list_users(
        page=pagination.page,
        limit=pagination.limit,
        role=role,
        is_blocked=is_blocked,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return create_paginated_response(result, UserResponse, request_id)


@router.get(
    "/stats",
    response_model=ApiResponse[UserStatistics],
    summary="User statistics",
)
async def user_statistics(
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[UserStatistics]:
    service = AdminUserService(db, crypto)
    return ApiResponse(data=await service.statistics())


@router.get(
    "/search",
    response_model=ApiResponse[list[UserResponse]],
    summary="Search users",
    description="Match decrypted names and email.",
)
async def search_users(
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
    q: str = Query(..., min_length=1, max_length=100, description="Search query"),
    limit: int | None = Query(default=None, ge=1),
    role: Literal["user", "author", "admin"] | None = Query(default=None),
) -> ApiResponse[list[UserResponse]]:
    service = AdminUserService(db, crypto)
    users = await service.search_users(q, limit=clamp_limit(limit), role=role)
    return ApiResponse(data=[UserResponse.model_validate(user) for user in users])


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Get a user",
)
async def get_user(
    user_id: str,
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    service = AdminUserService(db, crypto)
    return ApiResponse(data=UserResponse.model_validate(await service.get_user(user_id)))


@router.post(
    "/{user_id}/block",
    response_model=ApiResponse[UserResponse],
    summary="Block a user",
    description="Without `until` the block is permanent.",
)
async def block_user(
    user_id: str,
    data: BlockRequest,
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    service = AdminUserService(db, crypto)
    user = await service.block_user(user_id, admin.id, data.reason, data.until)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.post(
    "/{user_id}/unblock",
    response_model=ApiResponse[UserResponse],
    summary="Unblock a user",
)
async def unblock_user(
    user_id: str,
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    service = AdminUserService(db, crypto)
    user = await service.unblock_user(user_id, admin.id)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.put(
    "/{user_id}/role",
    response_model=ApiResponse[UserResponse],
    summary="Change a user's role",
)
async def change_role(
    user_id: str,
    data: RoleChangeRequest,
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    service = AdminUserService(db, crypto)
    user = await service.change_role(user_id, data.role, admin.id)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete a user",
    description="Accounts are never removed; deletion blocks the account permanently.",
)
async def delete_user(
    user_id: str,
    admin: AdminUser,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    service = AdminUserService(db, crypto)
    await service.delete_user(user_id, admin.id)
    return ApiResponse(data=MessageResponse(message="User deleted"))
