"""
Category Repository.
"""

from sqlalchemy import func, select

from newsdesk.backend.models.article import Article, ArticleStatus
from newsdesk.backend.models.category import Category
from newsdesk.backend.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category model."""

    model = Category

    async def list_ordered(self) -> list[Category]:
        result = await self.session.execute(
            select(Category).order_by(Category.display_order.asc(), Category.name.asc())
        )
        return list(result.scalars().all())

    async def get_by_slug(self, slug: str) -> Category | None:
        result = await self.session.execute(
            select(Category).where(Category.slug == slug)
        )
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        query = select(Category.id).where(Category.slug == slug)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def name_exists(self, name: str, exclude_id: str | None = None) -> bool:
        query = select(Category.id).where(func.lower(Category.name) == name.lower())
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def article_count(self, category_id: str) -> int:
        """Articles of any status that reference the category."""
        result = await self.session.execute(
            select(func.count()).select_from(Article).where(Article.category_id == category_id)
        )
        return result.scalar_one()

    async def published_stats(self, category_id: str) -> tuple[int, int]:
        """
        Returns:
            Tuple of (published article count, total views of those articles)
        """
        result = await self.session.execute(
            select(func.count(Article.id), func.coalesce(func.sum(Article.views), 0))
            .where(Article.category_id == category_id)
            .where(Article.status == ArticleStatus.PUBLISHED)
        )
        count, views = result.one()
        return int(count), int(views)
