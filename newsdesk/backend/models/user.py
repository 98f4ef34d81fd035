"""
User Model.

Accounts are created on first Google sign-in. Personal names and social
links are stored encrypted; email stays in clear text because it is the
unique lookup key.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk.backend.core.utils import utc_now
from newsdesk.backend.models.base import Base, TimestampMixin, UUIDMixin
from newsdesk.backend.models.encryption import EncryptableMixin


class UserRole(StrEnum):
    USER = "user"
    AUTHOR = "author"
    ADMIN = "admin"


# Higher level includes every permission of the lower ones
ROLE_LEVELS: dict[str, int] = {
    UserRole.USER: 1,
    UserRole.AUTHOR: 2,
    UserRole.ADMIN: 3,
}

WRITER_ROLES = frozenset({UserRole.AUTHOR, UserRole.ADMIN})


def default_social_links() -> dict[str, Any]:
    return {"linkedin": "", "twitter": ""}


class User(EncryptableMixin, UUIDMixin, TimestampMixin, Base):
    """Platform account: reader, author or administrator."""

    __tablename__ = "users"
    __encrypted_fields__ = (
        "first_name",
        "last_name",
        "social_links.linkedin",
        "social_links.twitter",
    )
    __table_args__ = (
        CheckConstraint("role IN ('user', 'author', 'admin')", name="role_valid"),
    )

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    google_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    slug: Mapped[str | None] = mapped_column(String(120), unique=True, nullable=True, index=True)

    # Ciphertext is much longer than the plain value, hence Text
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    avatar: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), default=UserRole.USER, nullable=False, index=True
    )
    bio: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    position: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    social_links: Mapped[dict[str, Any]] = mapped_column(
        JSON, default=default_social_links, nullable=False
    )
    show_in_authors_list: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    is_blocked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    blocked_until: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    block_reason: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    blocked_by_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    email_on_reply: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    email_newsletter: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    email_on_approval: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    email_on_rejection: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    last_login: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    @property
    def display_name(self) -> str:
        """First and last name joined, whichever are present."""
        parts = [self.first_name or "", self.last_name or ""]
        return " ".join(part for part in parts if part).strip()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role})>"
