"""
Auth Schemas.
"""

from pydantic import BaseModel, Field

from newsdesk.backend.schemas.user import UserResponse


class GoogleAuthRequest(BaseModel):
    """ID token obtained by the browser from Google Identity Services."""

    token: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse
