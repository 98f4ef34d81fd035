"""
Categories API Endpoints.

Reading is public; mutations require the admin role.
"""

from fastapi import APIRouter

from newsdesk.backend.core.dependencies import AdminUser, DbSession, RequestId
from newsdesk.backend.schemas.base import ApiResponse, MessageResponse
from newsdesk.backend.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryStats,
    CategoryUpdate,
)
from newsdesk.backend.services.category import CategoryService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[CategoryResponse]],
    summary="List categories",
)
async def list_categories(db: DbSession, request_id: RequestId) -> ApiResponse[list[CategoryResponse]]:
    service = CategoryService(db)
    categories = await service.list_categories()
    return ApiResponse(data=[CategoryResponse.model_validate(c) for c in categories])


@router.get(
    "/slug/{slug}",
    response_model=ApiResponse[CategoryResponse],
    summary="Get a category by slug",
)
async def get_by_slug(slug: str, db: DbSession, request_id: RequestId) -> ApiResponse[CategoryResponse]:
    service = CategoryService(db)
    return ApiResponse(data=CategoryResponse.model_validate(await service.get_category_by_slug(slug)))


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    summary="Get a category",
)
async def get_category(
    category_id: str,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[CategoryResponse]:
    service = CategoryService(db)
    return ApiResponse(data=CategoryResponse.model_validate(await service.get_category(category_id)))


@router.get(
    "/{category_id}/stats",
    response_model=ApiResponse[CategoryStats],
    summary="Published article count and views",
)
async def category_stats(
    category_id: str,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[CategoryStats]:
    service = CategoryService(db)
    return ApiResponse(data=await service.get_stats(category_id))


@router.post(
    "",
    response_model=ApiResponse[CategoryResponse],
    status_code=201,
    summary="Create a category",
)
async def create_category(
    data: CategoryCreate,
    admin: AdminUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[CategoryResponse]:
    service = CategoryService(db)
    category = await service.create_category(data)
    return ApiResponse(data=CategoryResponse.model_validate(category))


@router.put(
    "/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    summary="Update a category",
)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    admin: AdminUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[CategoryResponse]:
    service = CategoryService(db)
    category = await service.update_category(category_id, data)
    return ApiResponse(data=CategoryResponse.model_validate(category))


@router.delete(
    "/{category_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete a category",
    description="Refused with 409 while articles reference the category.",
)
async def delete_category(
    category_id: str,
    admin: AdminUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    service = CategoryService(db)
    await service.delete_category(category_id)
    return ApiResponse(data=MessageResponse(message="Category deleted"))
