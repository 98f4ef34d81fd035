"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from newsdesk.backend.api.v1.endpoints import (
    admin_users,
    articles,
    auth,
    categories,
    comments,
    telegram,
    users,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(admin_users.router, prefix="/admin/users", tags=["admin"])
router.include_router(articles.router, prefix="/articles", tags=["articles"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(comments.router, prefix="/comments", tags=["comments"])
router.include_router(telegram.router, prefix="/telegram", tags=["telegram"])
