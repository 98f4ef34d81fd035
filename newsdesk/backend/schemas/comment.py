"""
Comment Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newsdesk.backend.schemas.user import UserSummary

CONTENT_MIN_LENGTH = 3
CONTENT_MAX_LENGTH = 2000


def _clean_content(v: str) -> str:
    v = v.strip()
    if len(v) < CONTENT_MIN_LENGTH:
        raise ValueError(f"Comment must have at least {CONTENT_MIN_LENGTH} characters")
    return v


class CommentCreate(BaseModel):
    article_id: str
    content: str = Field(..., max_length=CONTENT_MAX_LENGTH)
    parent_id: str | None = None

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: str) -> str:
        return _clean_content(v)


class CommentUpdate(BaseModel):
    content: str = Field(..., max_length=CONTENT_MAX_LENGTH)

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: str) -> str:
        return _clean_content(v)


class ModerateRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class CommentResponse(BaseModel):
    id: str
    article_id: str
    user_id: str
    parent_id: str | None
    content: str
    is_deleted: bool
    deleted_at: datetime | None
    moderation_reason: str
    created_at: datetime
    updated_at: datetime
    user: UserSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class CommentThread(CommentResponse):
    """Top-level comment with its replies, oldest reply first."""

    replies: list[CommentResponse] = Field(default_factory=list)


class TopCommenter(BaseModel):
    user_id: str
    name: str
    comment_count: int


class CommentStatistics(BaseModel):
    total: int
    active: int
    deleted: int
    replies: int
    top_commenters: list[TopCommenter]


class DeletedCount(BaseModel):
    deleted: int
