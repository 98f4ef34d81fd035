"""
Comment Repository.

Top-level comments are listed newest first; replies oldest first so a
thread reads top to bottom.
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from newsdesk.backend.core.utils import utc_now
from newsdesk.backend.models.comment import Comment
from newsdesk.backend.models.user import User
from newsdesk.backend.repositories.base import BaseRepository


def _visible(include_deleted: bool) -> list[Any]:
    return [] if include_deleted else [Comment.is_deleted == False]  # noqa: E712


class CommentRepository(BaseRepository[Comment]):
    """Repository for Comment model."""

    model = Comment

    async def get_with_user(self, comment_id: str) -> Comment | None:
        result = await self.session.execute(
            select(Comment)
            .where(Comment.id == comment_id)
            .options(selectinload(Comment.user))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_top_level(
        self,
        article_id: str,
        include_deleted: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Comment], int]:
        criteria = [
            Comment.article_id == article_id,
            Comment.parent_id.is_(None),
            *_visible(include_deleted),
        ]
        result = await self.session.execute(
            select(Comment)
            .where(*criteria)
            .options(selectinload(Comment.user))
            .order_by(Comment.created_at.desc(), Comment.id)
            .limit(limit)
            .offset(offset)
        )
        total = await self.count(*criteria)
        return list(result.scalars().all()), total

    async def list_replies(
        self,
        parent_ids: Iterable[str],
        include_deleted: bool = False,
    ) -> list[Comment]:
        ids = list(parent_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(Comment)
            .where(Comment.parent_id.in_(ids), *_visible(include_deleted))
            .options(selectinload(Comment.user))
            .order_by(Comment.created_at.asc(), Comment.id)
        )
        return list(result.scalars().all())

    async def list_filtered(
        self,
        *criteria: Any,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Comment], int]:
        result = await self.session.execute(
            select(Comment)
            .where(*criteria)
            .options(selectinload(Comment.user))
            .order_by(Comment.created_at.desc(), Comment.id)
            .limit(limit)
            .offset(offset)
        )
        total = await self.count(*criteria)
        return list(result.scalars().all()), total

    async def soft_delete_by_user(self, user_id: str, deleted_by_id: str) -> int:
        """Flag every live comment of a user as deleted. Returns the count."""
        return await self.update_where(
            Comment.user_id == user_id,
            Comment.is_deleted == False,  # noqa: E712
            is_deleted=True,
            deleted_by_id=deleted_by_id,
            deleted_at=utc_now(),
        )

    async def top_commenters(self, limit: int = 10) -> list[tuple[User, int]]:
        """Users with the most live comments, most active first."""
        counts = (
            select(Comment.user_id, func.count().label("comment_count"))
            .where(Comment.is_deleted == False)  # noqa: E712
            .group_by(Comment.user_id)
            .subquery()
        )
        result = await self.session.execute(
            select(User, counts.c.comment_count)
            .join(counts, counts.c.user_id == User.id)
            .order_by(counts.c.comment_count.desc(), User.id)
            .limit(limit)
        )
        return [(user, int(count)) for user, count in result.all()]
