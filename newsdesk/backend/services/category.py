"""
Category Service.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from newsdesk.backend.core.utils import slugify
from newsdesk.backend.models.category import Category
from newsdesk.backend.repositories.category import CategoryRepository
from newsdesk.backend.schemas.category import CategoryCreate, CategoryStats, CategoryUpdate
from newsdesk.backend.services.base import BaseService


class CategoryService(BaseService):
    """Service for categories. Categories hold no encrypted data."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = CategoryRepository(session)

    async def list_categories(self) -> list[Category]:
        return await self.repo.list_ordered()

    async def get_category(self, category_id: str) -> Category:
        return await self.repo.get_by_id(category_id)

    async def get_category_by_slug(self, slug: str) -> Category:
        category = await self.repo.get_by_slug(slug.lower())
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def create_category(self, data: CategoryCreate) -> Category:
        """
        Raises:
            ValidationError: Name yields no usable slug
            ConflictError: Name or slug already taken
        """
        slug = data.slug or slugify(data.name)
        if not slug:
            raise ValidationError("Name does not produce a usable slug")
        if await self.repo.name_exists(data.name):
            raise ConflictError("A category with this name already exists")
        if await self.repo.slug_exists(slug):
            raise ConflictError("A category with this slug already exists")

        category = await self._execute_db_operation(
            "create_category",
            self.repo.create(**data.model_dump(exclude={"slug"}), slug=slug),
        )
        self._log_operation("Category created", category_id=category.id, slug=slug)
        return category

    async def update_category(self, category_id: str, data: CategoryUpdate) -> Category:
        """
        Apply the fields that were sent. SEO fields left out keep their values.

        Raises:
            NotFoundError: Unknown category
            ConflictError: New name or slug already taken
        """
        category = await self.repo.get_by_id(category_id)
        values = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }

        if "name" in values:
            values["name"] = values["name"].strip()
            if await self.repo.name_exists(values["name"], exclude_id=category_id):
                raise ConflictError("A category with this name already exists")
        if "slug" in values and await self.repo.slug_exists(values["slug"], exclude_id=category_id):
            raise ConflictError("A category with this slug already exists")

        for key, value in values.items():
            setattr(category, key, value)
        category = await self._execute_db_operation("update_category", self.repo.save(category))
        self._log_operation("Category updated", category_id=category_id, fields=sorted(values))
        return category

    async def delete_category(self, category_id: str) -> None:
        """
        Raises:
            NotFoundError: Unknown category
            ConflictError: Articles still reference the category
        """
        await self.repo.get_by_id(category_id)
        in_use = await self.repo.article_count(category_id)
        if in_use:
            raise ConflictError(
                "Category still has articles",
                details={"articles": in_use},
            )
        await self._execute_db_operation("delete_category", self.repo.delete(category_id))
        self._log_operation("Category deleted", category_id=category_id)

    async def get_stats(self, category_id: str) -> CategoryStats:
        await self.repo.get_by_id(category_id)
        count, views = await self.repo.published_stats(category_id)
        return CategoryStats(category_id=category_id, published_articles=count, total_views=views)
