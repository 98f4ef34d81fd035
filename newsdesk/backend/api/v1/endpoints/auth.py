"""
Auth API Endpoints.

Google sign-in, token refresh and the signed-in user's profile.
"""

from fastapi import APIRouter

from newsdesk.backend.core.dependencies import (
    Crypto,
    CurrentUser,
    DbSession,
    Identity,
    ProfileOwner,
    RequestId,
)
from newsdesk.backend.schemas.auth import GoogleAuthRequest, RefreshRequest, TokenResponse
from newsdesk.backend.schemas.base import ApiResponse
from newsdesk.backend.schemas.user import ProfileUpdate, UserResponse
from newsdesk.backend.services.auth import AuthService
from newsdesk.backend.services.user import UserService

router = APIRouter()


@router.post(
    "/google",
    response_model=ApiResponse[TokenResponse],
    summary="Sign in with Google",
    description="Exchange a Google ID token for an access/refresh token pair. "
    "Creates the account on first sign-in.",
)
async def google_auth(
    data: GoogleAuthRequest,
    db: DbSession,
    crypto: Crypto,
    identity: Identity,
    request_id: RequestId,
) -> ApiResponse[TokenResponse]:
    service = AuthService(db, crypto, identity)
    session = await service.google_auth(data.token)
    return ApiResponse(
        data=TokenResponse(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            token_type=session.token_type,
            user=UserResponse.model_validate(session.user),
        )
    )


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Current user",
)
async def get_me(user: CurrentUser, request_id: RequestId) -> ApiResponse[UserResponse]:
    return ApiResponse(data=UserResponse.model_validate(user))


@router.post(
    "/refresh",
    response_model=ApiResponse[TokenResponse],
    summary="Refresh tokens",
)
async def refresh_tokens(
    data: RefreshRequest,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[TokenResponse]:
    service = AuthService(db, crypto)
    session = await service.refresh(data.refresh_token)
    return ApiResponse(
        data=TokenResponse(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            token_type=session.token_type,
            user=UserResponse.model_validate(session.user),
        )
    )


@router.put(
    "/profile/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Update a profile",
    description="Owners edit their own profile; administrators may edit any profile and change roles.",
)
async def update_profile(
    user_id: str,
    data: ProfileUpdate,
    user: ProfileOwner,
    db: DbSession,
    crypto: Crypto,
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    service = UserService(db, crypto)
    updated = await service.update_profile(user_id, data, user)
    return ApiResponse(data=UserResponse.model_validate(updated))
