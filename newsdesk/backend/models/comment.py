"""
Comment Model.

Comments are threaded through parent_id. Deleting a comment only flags it,
so replies keep their parent.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsdesk.backend.models.base import Base, TimestampMixin, UUIDMixin
from newsdesk.backend.models.user import User


class Comment(UUIDMixin, TimestampMixin, Base):
    """A reader comment on a published article."""

    __tablename__ = "comments"

    article_id: Mapped[str] = mapped_column(
        ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    parent_id: Mapped[str | None] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    deleted_by_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    moderation_reason: Mapped[str] = mapped_column(String(500), default="", nullable=False)

    user: Mapped[User] = relationship(foreign_keys=[user_id])

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, article_id={self.article_id}, deleted={self.is_deleted})>"
