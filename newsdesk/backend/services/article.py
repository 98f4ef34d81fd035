"""
Article Service.

Article authoring, the moderation workflow and public listings. Every
article that leaves this service has its author and category loaded and
decrypted.
"""

from datetime import timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.backend.clients.crypto import CryptoClient
from newsdesk.backend.core.exceptions import (
    AccountBlockedError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from newsdesk.backend.core.pagination import PagedResult
from newsdesk.backend.core.utils import slugify, utc_now, with_suffix
from newsdesk.backend.models.article import Article, ArticleStatus
from newsdesk.backend.models.user import User, UserRole
from newsdesk.backend.repositories.article import ArticleRepository
from newsdesk.backend.repositories.category import CategoryRepository
from newsdesk.backend.repositories.user import UserRepository
from newsdesk.backend.schemas.article import ArticleCreate, ArticleUpdate
from newsdesk.backend.services.auth import can_write_articles
from newsdesk.backend.services.base import BaseService
from newsdesk.backend.services.notification import NotificationService
from newsdesk.backend.services.workflow import ArticleAction, target_status

EDITABLE_FIELDS = {
    "title",
    "slug",
    "excerpt",
    "content",
    "category_id",
    "tags",
    "seo_meta_title",
    "seo_meta_description",
}
PUBLIC_SORT_FIELDS = {"published_at", "views", "created_at"}


class ArticleService(BaseService):
    """
    Service for articles.

    Workflow notifications go through the NotificationService when one is
    given; they are best-effort and never undo a transition.
    """

    def __init__(
        self,
        session: AsyncSession,
        crypto: CryptoClient,
        notifications: NotificationService | None = None,
    ) -> None:
        super().__init__(session, crypto)
        self.notifications = notifications
        self.repo = ArticleRepository(session)
        self.categories = CategoryRepository(session)
        self.users = UserRepository(session, crypto)

    async def _load(self, article_id: str) -> Article:
        article = await self.repo.get_with_relations(article_id)
        if article is None:
            raise NotFoundError("Article not found")
        return article

    async def _user(self, user_id: str) -> User:
        user = await self.users.get_by_id_or_none(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _ensure_category(self, category_id: str) -> None:
        if not await self.categories.exists(category_id):
            raise NotFoundError("Category not found")

    async def _unique_slug(self, title: str, exclude_id: str | None = None) -> str:
        base_slug = slugify(title)
        if not base_slug:
            raise ValidationError("Title does not produce a usable slug")
        candidate, counter = base_slug, 1
        while await self.repo.slug_exists(candidate, exclude_id=exclude_id):
            candidate = with_suffix(base_slug, counter)
            counter += 1
        return candidate

    async def _store(self, operation: str, article: Article) -> Article:
        """Flush an article, then reload and decrypt it with its relations."""
        await self._execute_db_operation(operation, self.repo.save(article))
        return await self._decrypt(await self._load(article.id))

    async def create_article(self, data: ArticleCreate, author_id: str) -> Article:
        """
        Create a draft article.

        Raises:
            NotFoundError: Unknown author or category
            AuthorizationError: Author lacks the writer role
            AccountBlockedError: Author is blocked
            ConflictError: Slug already taken
        """
        author = await self._user(author_id)
        if not can_write_articles(author):
            raise AuthorizationError("You do not have permission to write articles")
        if author.is_blocked:
            raise AccountBlockedError("Your account is blocked")

        await self._ensure_category(data.category_id)

        if data.slug:
            if await self.repo.slug_exists(data.slug):
                raise ConflictError("An article with this slug already exists")
            slug = data.slug
        else:
            slug = await self._unique_slug(data.title)

        values = data.model_dump(exclude={"slug"})
        article = await self._execute_db_operation(
            "create_article",
            self.repo.create(
                **values,
                slug=slug,
                author_id=author_id,
                status=ArticleStatus.DRAFT,
            ),
        )
        self._log_operation("Article created", article_id=article.id, author_id=author_id)
        return await self._decrypt(await self._load(article.id))

    async def get_article(self, article_id: str) -> Article:
        return await self._decrypt(await self._load(article_id))

    async def get_article_by_slug(self, slug: str) -> Article:
        article = await self.repo.get_by_slug(slug)
        if article is None:
            raise NotFoundError("Article not found")
        return await self._decrypt(article)

    async def update_article(self, article_id: str, data: ArticleUpdate, user_id: str) -> Article:
        """
        Edit an article.

        Raises:
            ConflictError: Article is published, or the new slug is taken
            AuthorizationError: Neither author nor admin, or a pending
                article edited by its author
        """
        article = await self._load(article_id)
        if article.status == ArticleStatus.PUBLISHED:
            raise ConflictError("Published articles cannot be edited")

        user = await self._user(user_id)
        is_admin = user.role == UserRole.ADMIN
        if article.author_id != user_id and not is_admin:
            raise AuthorizationError("You can only edit your own articles")
        if article.status == ArticleStatus.PENDING and not is_admin:
            raise AuthorizationError("Article is under review. Wait for the moderator's decision")

        values: dict[str, Any] = {
            key: value
            for key, value in data.model_dump(include=EDITABLE_FIELDS, exclude_unset=True).items()
            if value is not None
        }

        if "slug" in values and values["slug"] != article.slug:
            if await self.repo.slug_exists(values["slug"], exclude_id=article_id):
                raise ConflictError("An article with this slug already exists")
        if "category_id" in values and values["category_id"] != article.category_id:
            await self._ensure_category(values["category_id"])

        for key, value in values.items():
            setattr(article, key, value)

        article = await self._store("update_article", article)
        self._log_operation("Article updated", article_id=article_id, fields=sorted(values))
        return article

    async def delete_article(self, article_id: str, user_id: str) -> None:
        """
        Raises:
            AuthorizationError: Published article deleted by a non-admin,
                or someone else's article deleted by a non-admin
        """
        article = await self._load(article_id)
        user = await self._user(user_id)
        is_admin = user.role == UserRole.ADMIN

        if article.status == ArticleStatus.PUBLISHED and not is_admin:
            raise AuthorizationError("Only an administrator can delete published articles")
        if article.author_id != user_id and not is_admin:
            raise AuthorizationError("You can only delete your own articles")

        await self._execute_db_operation("delete_article", self.repo.delete(article_id))
        self._log_operation(
            "Article deleted", article_id=article_id, status=article.status, user_id=user_id
        )

    async def submit_for_review(self, article_id: str, user_id: str) -> Article:
        """
        Move a draft or rejected article to pending and alert moderators.

        Raises:
            AuthorizationError: Caller is not the author
            InvalidTransitionError: Article is not draft or rejected
        """
        article = await self._load(article_id)
        if article.author_id != user_id:
            raise AuthorizationError("You are not the author of this article")

        article.status = target_status(article.status, ArticleAction.SUBMIT)
        article.submitted_at = utc_now()
        article.rejection_reason = ""
        article.rejected_by_id = None
        article.rejected_at = None
        article = await self._store("submit_article", article)

        self._log_operation("Article submitted", article_id=article_id, author_id=user_id)
        if self.notifications is not None:
            await self.notifications.article_submitted(article, article.author)
        return article

    async def _require_admin(self, admin_id: str, action: str) -> None:
        admin = await self._user(admin_id)
        if admin.role != UserRole.ADMIN:
            raise AuthorizationError(f"Only an administrator can {action} articles")

    async def approve_article(self, article_id: str, admin_id: str) -> Article:
        """
        Publish a pending article.

        Raises:
            AuthorizationError: Caller is not an admin
            InvalidTransitionError: Article is not pending
        """
        article = await self._load(article_id)
        await self._require_admin(admin_id, "approve")

        article.status = target_status(article.status, ArticleAction.APPROVE)
        article.published_at = utc_now()
        article.rejection_reason = ""
        article.rejected_by_id = None
        article.rejected_at = None
        article = await self._store("approve_article", article)

        self._log_operation("Article approved", article_id=article_id, admin_id=admin_id)
        if self.notifications is not None:
            await self.notifications.article_approved(article, article.author)
        return article

    async def reject_article(self, article_id: str, admin_id: str, reason: str) -> Article:
        """
        Send a pending article back to its author.

        Raises:
            ValidationError: Blank reason
            AuthorizationError: Caller is not an admin
            InvalidTransitionError: Article is not pending
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A rejection reason is required")

        article = await self._load(article_id)
        await self._require_admin(admin_id, "reject")

        article.status = target_status(article.status, ArticleAction.REJECT)
        article.rejection_reason = reason
        article.rejected_by_id = admin_id
        article.rejected_at = utc_now()
        article = await self._store("reject_article", article)

        self._log_operation("Article rejected", article_id=article_id, admin_id=admin_id)
        if self.notifications is not None:
            await self.notifications.article_rejected(article, article.author, reason)
        return article

    async def _page(
        self,
        criteria: list[Any],
        page: int,
        limit: int,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> PagedResult[Article]:
        items, total = await self.repo.list_filtered(
            *criteria,
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
            offset=(page - 1) * limit,
        )
        await self._decrypt(items)
        return PagedResult(items=items, total=total, page=page, limit=limit)

    async def get_published_articles(
        self,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "published_at",
        sort_order: str = "desc",
    ) -> PagedResult[Article]:
        if sort_by not in PUBLIC_SORT_FIELDS:
            sort_by = "published_at"
        return await self._page(
            [Article.status == ArticleStatus.PUBLISHED], page, limit, sort_by, sort_order
        )

    async def get_articles_by_category(
        self,
        category_id: str,
        page: int = 1,
        limit: int = 10,
    ) -> PagedResult[Article]:
        await self._ensure_category(category_id)
        return await self._page(
            [Article.status == ArticleStatus.PUBLISHED, Article.category_id == category_id],
            page,
            limit,
            sort_by="published_at",
        )

    async def get_articles_by_author(
        self,
        author_id: str,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
    ) -> PagedResult[Article]:
        """All statuses unless `status` is given."""
        criteria = [Article.author_id == author_id]
        if status is not None:
            criteria.append(Article.status == status)
        return await self._page(criteria, page, limit)

    async def get_pending_articles(self) -> list[Article]:
        return await self._decrypt(await self.repo.list_pending())

    async def get_popular_articles(self, limit: int = 10, days: int = 7) -> list[Article]:
        """Published in the last `days` days, most viewed first."""
        since = utc_now() - timedelta(days=days)
        return await self._decrypt(await self.repo.list_popular(since, limit))

    async def search_articles(self, term: str, page: int = 1, limit: int = 10) -> PagedResult[Article]:
        if not term or not term.strip():
            raise ValidationError("Search query is required")
        return await self._page(
            self.repo.search_criteria(term.strip()), page, limit, sort_by="published_at"
        )

    async def get_all_articles(
        self,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> PagedResult[Article]:
        """Admin listing over every status."""
        criteria = [Article.status == status] if status is not None else []
        return await self._page(criteria, page, limit, sort_by, sort_order)

    async def increment_views(self, article_id: str) -> int:
        views = await self._execute_db_operation(
            "increment_views", self.repo.increment_views(article_id)
        )
        if views is None:
            raise NotFoundError("Article not found")
        return views

    async def statistics(self) -> dict[str, dict[str, int]]:
        """Article count and total views for every status."""
        stats = {status.value: {"count": 0, "total_views": 0} for status in ArticleStatus}
        stats.update(await self.repo.status_statistics())
        return stats
