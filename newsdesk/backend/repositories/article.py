"""
Article Repository.

Every query that returns articles eager-loads author and category so the
results can be rendered and decrypted without lazy loads.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import selectinload

from newsdesk.backend.models.article import Article, ArticleStatus
from newsdesk.backend.repositories.base import BaseRepository

SORTABLE_FIELDS = {
    "published_at": Article.published_at,
    "created_at": Article.created_at,
    "updated_at": Article.updated_at,
    "views": Article.views,
    "title": Article.title,
}


def _with_relations(query: Any) -> Any:
    return query.options(selectinload(Article.author), selectinload(Article.category))


class ArticleRepository(BaseRepository[Article]):
    """Repository for Article model."""

    model = Article

    async def get_with_relations(self, article_id: str) -> Article | None:
        """Load an article with author and category, overwriting any stale identity."""
        result = await self.session.execute(
            _with_relations(select(Article).where(Article.id == article_id))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Article | None:
        result = await self.session.execute(
            _with_relations(select(Article).where(Article.slug == slug.lower()))
        )
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        query = select(Article.id).where(Article.slug == slug)
        if exclude_id is not None:
            query = query.where(Article.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def list_filtered(
        self,
        *criteria: Any,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Article], int]:
        """
        One page of articles matching the criteria, plus the total count.

        Returns:
            Tuple of (articles, total)
        """
        column = SORTABLE_FIELDS.get(sort_by, Article.created_at)
        order = column.asc() if sort_order == "asc" else column.desc()
        result = await self.session.execute(
            _with_relations(
                select(Article)
                .where(*criteria)
                .order_by(order, Article.id)
                .limit(limit)
                .offset(offset)
            )
        )
        total = await self.count(*criteria)
        return list(result.scalars().all()), total

    async def list_pending(self) -> list[Article]:
        """Articles waiting for moderation, longest waiting first."""
        result = await self.session.execute(
            _with_relations(
                select(Article)
                .where(Article.status == ArticleStatus.PENDING)
                .order_by(Article.submitted_at.asc())
            )
        )
        return list(result.scalars().all())

    async def list_popular(self, since: datetime, limit: int = 10) -> list[Article]:
        result = await self.session.execute(
            _with_relations(
                select(Article)
                .where(Article.status == ArticleStatus.PUBLISHED)
                .where(Article.published_at >= since)
                .order_by(Article.views.desc())
                .limit(limit)
            )
        )
        return list(result.scalars().all())

    @staticmethod
    def search_criteria(term: str) -> list[Any]:
        """Case-insensitive match over title, excerpt and content of published articles."""
        pattern = f"%{term}%"
        return [
            Article.status == ArticleStatus.PUBLISHED,
            or_(
                Article.title.ilike(pattern),
                Article.excerpt.ilike(pattern),
                Article.content.ilike(pattern),
            ),
        ]

    async def increment_views(self, article_id: str) -> int | None:
        """
        Atomically add one view.

        Returns:
            New view count, or None if the article does not exist
        """
        await self.session.execute(
            update(Article)
            .where(Article.id == article_id)
            .values(views=Article.views + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            select(Article.views).where(Article.id == article_id)
        )
        return result.scalar_one_or_none()

    async def status_statistics(self) -> dict[str, dict[str, int]]:
        result = await self.session.execute(
            select(Article.status, func.count(), func.coalesce(func.sum(Article.views), 0))
            .group_by(Article.status)
        )
        return {
            status: {"count": int(count), "total_views": int(views)}
            for status, count, views in result.all()
        }

    async def published_count_by_author(self, author_ids: Iterable[str]) -> dict[str, int]:
        ids = list(author_ids)
        if not ids:
            return {}
        result = await self.session.execute(
            select(Article.author_id, func.count())
            .where(Article.author_id.in_(ids))
            .where(Article.status == ArticleStatus.PUBLISHED)
            .group_by(Article.author_id)
        )
        return {author_id: int(count) for author_id, count in result.all()}
