"""
Category Model.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk.backend.models.base import Base, TimestampMixin, UUIDMixin


class Category(UUIDMixin, TimestampMixin, Base):
    """Article category. Listed by display_order, then name."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(80), unique=True, nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    seo_meta_title: Mapped[str] = mapped_column(String(60), default="", nullable=False)
    seo_meta_description: Mapped[str] = mapped_column(String(160), default="", nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug={self.slug!r})>"
