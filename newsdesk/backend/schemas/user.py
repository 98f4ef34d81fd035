"""
User Schemas.

Pydantic schemas for profiles, public author pages and admin user management.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SocialLinks(BaseModel):
    linkedin: str | None = Field(default=None, max_length=300)
    twitter: str | None = Field(default=None, max_length=300)


class ProfileUpdate(BaseModel):
    """Fields a user may change on a profile. `role` is honoured for admins only."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    position: str | None = Field(default=None, max_length=100)
    show_in_authors_list: bool | None = None
    social_links: SocialLinks | None = None
    role: Literal["user", "author", "admin"] | None = None


class UserResponse(BaseModel):
    """Full user profile."""

    id: str
    email: str
    slug: str | None
    first_name: str | None
    last_name: str | None
    display_name: str
    avatar: str
    role: str
    bio: str
    position: str
    social_links: dict[str, str | None]
    show_in_authors_list: bool
    is_blocked: bool
    blocked_until: datetime | None
    block_reason: str
    last_login: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """User as embedded in articles and comments."""

    id: str
    slug: str | None
    first_name: str | None
    last_name: str | None
    display_name: str
    avatar: str

    model_config = ConfigDict(from_attributes=True)


class AuthorResponse(BaseModel):
    """Public author card."""

    id: str
    slug: str | None
    first_name: str | None
    last_name: str | None
    display_name: str
    avatar: str
    role: str
    bio: str
    position: str
    social_links: dict[str, str | None]
    articles_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class BlockRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)
    until: datetime | None = Field(default=None, description="Leave empty for a permanent block")


class RoleChangeRequest(BaseModel):
    role: Literal["user", "author", "admin"]


class RecentUser(BaseModel):
    id: str
    email: str
    name: str
    role: str
    created_at: datetime


class UserStatistics(BaseModel):
    total: int
    blocked: int
    active: int
    roles: dict[str, int]
    recent_users: list[RecentUser]
