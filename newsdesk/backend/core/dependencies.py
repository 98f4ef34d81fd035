"""
FastAPI Dependencies.

Shared dependencies for request handling: database session, remote
clients, the authenticated user and role guards.

Usage:
    @router.post("/articles")
    async def create_article(data: ArticleCreate, db: DbSession, crypto: Crypto, user: AuthorUser):
        ...
"""

import uuid
from collections.abc import Callable, Coroutine
from typing import Annotated, Any

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.backend.clients.crypto import CryptoClient, get_crypto_client
from newsdesk.backend.clients.identity import GoogleIdentityClient, get_identity_client
from newsdesk.backend.core.database import get_db_session
from newsdesk.backend.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
)
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.models.user import ROLE_LEVELS, User, UserRole
from newsdesk.backend.services.auth import AuthService
from newsdesk.backend.services.notification import NotificationService, get_notification_service

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

Crypto = Annotated[CryptoClient, Depends(get_crypto_client)]
Identity = Annotated[GoogleIdentityClient, Depends(get_identity_client)]
Notifier = Annotated[NotificationService, Depends(get_notification_service)]

_bearer = HTTPBearer(auto_error=False)


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


async def get_current_user(
    db: DbSession,
    crypto: Crypto,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> User:
    """
    Resolve the Bearer token to an active, decrypted user.

    Raises:
        AuthenticationError: Missing or invalid token (401)
        AccountBlockedError: Blocked account (403)
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return await AuthService(db, crypto).get_user_from_token(credentials.credentials)


async def get_optional_user(
    db: DbSession,
    crypto: Crypto,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> User | None:
    """The authenticated user, or None for anonymous or rejected tokens."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await AuthService(db, crypto).get_user_from_token(credentials.credentials)
    except (AuthenticationError, AuthorizationError) as e:
        logger.debug("Optional authentication ignored", extra={"error": e.message})
        return None


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]


def require_roles(*roles: str) -> Callable[..., Coroutine[Any, Any, User]]:
    """
    Dependency factory allowing only the listed roles.

    Usage:
        @router.get("/pending", dependencies=[Depends(require_roles("admin"))])
    """
    allowed = frozenset(roles)

    async def dependency(user: CurrentUser) -> User:
        if user.role not in allowed:
            logger.warning(
                "Role check failed",
                extra={"user_id": user.id, "role": user.role, "required": sorted(allowed)},
            )
            raise AuthorizationError("You do not have permission to perform this action")
        return user

    return dependency


def require_min_role(role: str) -> Callable[..., Coroutine[Any, Any, User]]:
    """Dependency factory allowing `role` and every role above it."""
    required = ROLE_LEVELS[role]

    async def dependency(user: CurrentUser) -> User:
        if ROLE_LEVELS.get(user.role, 0) < required:
            raise AuthorizationError(f"Role '{role}' or higher is required")
        return user

    return dependency


require_admin = require_roles(UserRole.ADMIN)
require_author = require_min_role(UserRole.AUTHOR)

AdminUser = Annotated[User, Depends(require_admin)]
AuthorUser = Annotated[User, Depends(require_author)]


async def require_profile_access(user_id: str, user: CurrentUser) -> User:
    """Allow the owner of the `user_id` profile or an administrator."""
    if user.id != user_id and user.role != UserRole.ADMIN:
        raise AuthorizationError("You can only access your own profile")
    return user


ProfileOwner = Annotated[User, Depends(require_profile_access)]
