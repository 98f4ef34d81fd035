"""
Article Schemas.

Pydantic schemas for article create/update requests, moderation actions
and responses. Tags are stored lower-cased and de-duplicated.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newsdesk.backend.schemas.category import SLUG_PATTERN, CategorySummary
from newsdesk.backend.schemas.user import UserSummary

EXCERPT_MIN_LENGTH = 150
EXCERPT_MAX_LENGTH = 200


def normalize_tags(tags: list[str]) -> list[str]:
    """Lower-case, strip and de-duplicate tags, keeping their order."""
    seen: list[str] = []
    for tag in tags:
        value = tag.strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen


class ArticleCreate(BaseModel):
    """Schema for creating an article. New articles always start as drafts."""

    title: str = Field(..., min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=220, pattern=SLUG_PATTERN)
    excerpt: str = Field(..., min_length=EXCERPT_MIN_LENGTH, max_length=EXCERPT_MAX_LENGTH)
    content: str = Field(..., min_length=1)
    category_id: str
    tags: list[str] = Field(default_factory=list, max_length=20)
    seo_meta_title: str = Field(default="", max_length=60)
    seo_meta_description: str = Field(default="", max_length=160)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)


class ArticleUpdate(BaseModel):
    """Schema for updating an article. All fields optional."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=220, pattern=SLUG_PATTERN)
    excerpt: str | None = Field(
        default=None, min_length=EXCERPT_MIN_LENGTH, max_length=EXCERPT_MAX_LENGTH
    )
    content: str | None = Field(default=None, min_length=1)
    category_id: str | None = None
    tags: list[str] | None = Field(default=None, max_length=20)
    seo_meta_title: str | None = Field(default=None, max_length=60)
    seo_meta_description: str | None = Field(default=None, max_length=160)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return normalize_tags(v) if v is not None else None


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Rejection reason cannot be blank")
        return v


class ArticleResponse(BaseModel):
    """Article with its author and category."""

    id: str
    title: str
    slug: str
    excerpt: str
    content: str
    category_id: str
    author_id: str
    tags: list[str]
    seo_meta_title: str
    seo_meta_description: str
    status: str
    rejection_reason: str
    rejected_at: datetime | None
    views: int
    published_at: datetime | None
    submitted_at: datetime | None
    created_at: datetime
    updated_at: datetime
    author: UserSummary | None = None
    category: CategorySummary | None = None

    model_config = ConfigDict(from_attributes=True)


class ArticleListItem(BaseModel):
    """Article card for lists; content is left out."""

    id: str
    title: str
    slug: str
    excerpt: str
    tags: list[str]
    status: str
    views: int
    published_at: datetime | None
    created_at: datetime
    author: UserSummary | None = None
    category: CategorySummary | None = None

    model_config = ConfigDict(from_attributes=True)


class ViewCount(BaseModel):
    id: str
    views: int
