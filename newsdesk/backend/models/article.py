"""
Article Model.

Articles move through a moderation workflow:

    draft ──submit──▶ pending ──approve──▶ published
      ▲                  │
      │               reject
      │                  ▼
      └────(edit)──── rejected ──submit──▶ pending
"""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsdesk.backend.models.base import Base, TimestampMixin, UUIDMixin
from newsdesk.backend.models.category import Category
from newsdesk.backend.models.user import User


class ArticleStatus(StrEnum):
    DRAFT = "draft"
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"


class Article(UUIDMixin, TimestampMixin, Base):
    """An article written by an author and moderated by an admin."""

    __tablename__ = "articles"
    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'pending', 'published', 'rejected')",
            name="status_valid",
        ),
        CheckConstraint("views >= 0", name="views_non_negative"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(220), unique=True, nullable=False, index=True)
    excerpt: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    category_id: Mapped[str] = mapped_column(
        ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    author_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    seo_meta_title: Mapped[str] = mapped_column(String(60), default="", nullable=False)
    seo_meta_description: Mapped[str] = mapped_column(String(160), default="", nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), default=ArticleStatus.DRAFT, nullable=False, index=True
    )
    rejection_reason: Mapped[str] = mapped_column(String(1000), default="", nullable=False)
    rejected_by_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    author: Mapped[User] = relationship(foreign_keys=[author_id])
    category: Mapped[Category] = relationship()

    def __repr__(self) -> str:
        return f"<Article(id={self.id}, slug={self.slug!r}, status={self.status})>"
