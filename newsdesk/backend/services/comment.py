"""
Comment Service.

Threaded comments on published articles. Deleting only flags a comment so
its replies keep their parent; deleted comments are hidden unless a caller
asks for them.
"""

from collections import defaultdict
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
from newsdesk.backend.core.utils import utc_now
from newsdesk.backend.models.article import ArticleStatus
from newsdesk.backend.models.comment import Comment
from newsdesk.backend.models.user import User, UserRole
from newsdesk.backend.repositories.article import ArticleRepository
from newsdesk.backend.repositories.comment import CommentRepository
from newsdesk.backend.repositories.user import UserRepository
from newsdesk.backend.schemas.comment import (
    CommentResponse,
    CommentStatistics,
    CommentThread,
    TopCommenter,
)
from newsdesk.backend.services.base import BaseService
from newsdesk.backend.services.notification import NotificationService

TOP_COMMENTERS_LIMIT = 10


class CommentService(BaseService):
    """Service for comments."""

    def __init__(
        self,
        session: AsyncSession,
        crypto: CryptoClient,
        notifications: NotificationService | None = None,
    ) -> None:
        super().__init__(session, crypto)
        self.notifications = notifications
        self.repo = CommentRepository(session)
        self.articles = ArticleRepository(session)
        self.users = UserRepository(session, crypto)

    async def _load(self, comment_id: str) -> Comment:
        comment = await self.repo.get_with_user(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def _user(self, user_id: str) -> User:
        user = await self.users.get_by_id_or_none(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _require_admin(self, admin_id: str) -> None:
        admin = await self._user(admin_id)
        if admin.role != UserRole.ADMIN:
            raise AuthorizationError("Only an administrator can moderate comments")

    async def create_comment(
        self,
        article_id: str,
        content: str,
        user_id: str,
        parent_id: str | None = None,
    ) -> Comment:
        """
        Post a comment or a reply.

        Raises:
            NotFoundError: Unknown user, article or parent comment
            AccountBlockedError: User is blocked
            ValidationError: Article not published, parent on another
                article, or content too short
        """
        user = await self._user(user_id)
        if user.is_blocked:
            raise AccountBlockedError("Your account is blocked. You cannot post comments")

        article = await self.articles.get_by_id_or_none(article_id)
        if article is None:
            raise NotFoundError("Article not found")
        if article.status != ArticleStatus.PUBLISHED:
            raise ValidationError("Comments are only allowed on published articles")

        parent = None
        if parent_id is not None:
            parent = await self.repo.get_with_user(parent_id)
            if parent is None:
                raise NotFoundError("Parent comment not found")
            if parent.article_id != article_id:
                raise ValidationError("Parent comment belongs to another article")

        content = content.strip()
        if not content:
            raise ValidationError("Comment cannot be empty")

        comment = await self._execute_db_operation(
            "create_comment",
            self.repo.create(
                article_id=article_id,
                user_id=user_id,
                parent_id=parent_id,
                content=content,
            ),
        )
        self._log_operation(
            "Comment created", comment_id=comment.id, article_id=article_id, parent_id=parent_id
        )

        comment = await self._decrypt(await self._load(comment.id))
        if parent is not None and self.notifications is not None:
            await self._decrypt(parent)
            await self.notifications.comment_reply(parent.user, comment.user, article)
        return comment

    async def get_comment(self, comment_id: str) -> Comment:
        return await self._decrypt(await self._load(comment_id))

    async def update_comment(self, comment_id: str, content: str, user_id: str) -> Comment:
        """
        Raises:
            AuthorizationError: Caller is not the author
            ConflictError: Comment is deleted
        """
        comment = await self._load(comment_id)
        if comment.user_id != user_id:
            raise AuthorizationError("You cannot edit someone else's comment")
        if comment.is_deleted:
            raise ConflictError("Deleted comments cannot be edited")

        content = content.strip()
        if not content:
            raise ValidationError("Comment cannot be empty")

        comment.content = content
        await self._execute_db_operation("update_comment", self.repo.save(comment))
        self._log_operation("Comment updated", comment_id=comment_id)
        return await self._decrypt(await self._load(comment_id))

    def _flag_deleted(self, comment: Comment, deleted_by_id: str, reason: str = "") -> None:
        comment.is_deleted = True
        comment.deleted_by_id = deleted_by_id
        comment.deleted_at = utc_now()
        comment.moderation_reason = reason

    async def delete_comment(self, comment_id: str, user_id: str) -> None:
        """
        Soft delete by the author or an admin.

        Raises:
            AuthorizationError: Neither author nor admin
            ConflictError: Comment already deleted
        """
        comment = await self._load(comment_id)
        user = await self._user(user_id)
        if comment.user_id != user_id and user.role != UserRole.ADMIN:
            raise AuthorizationError("You do not have permission to delete this comment")
        if comment.is_deleted:
            raise ConflictError("Comment is already deleted")

        self._flag_deleted(comment, user_id)
        await self._execute_db_operation("delete_comment", self.repo.save(comment))
        self._log_operation("Comment deleted", comment_id=comment_id, user_id=user_id)

    async def moderate_delete(self, comment_id: str, admin_id: str, reason: str | None = None) -> Comment:
        """Soft delete by an administrator, recording the moderation reason."""
        comment = await self._load(comment_id)
        await self._require_admin(admin_id)
        if comment.is_deleted:
            raise ConflictError("Comment is already deleted")

        self._flag_deleted(comment, admin_id, (reason or "").strip())
        await self._execute_db_operation("moderate_comment", self.repo.save(comment))
        self._log_operation("Comment moderated", comment_id=comment_id, admin_id=admin_id)
        return await self._decrypt(await self._load(comment_id))

    async def delete_user_comments(self, user_id: str, admin_id: str) -> int:
        """Soft delete every live comment of a user. Returns how many were flagged."""
        await self._require_admin(admin_id)
        await self._user(user_id)
        deleted = await self._execute_db_operation(
            "delete_user_comments", self.repo.soft_delete_by_user(user_id, admin_id)
        )
        self._log_operation("User comments deleted", user_id=user_id, admin_id=admin_id, count=deleted)
        return deleted

    async def get_article_comments(
        self,
        article_id: str,
        include_deleted: bool = False,
        page: int = 1,
        limit: int = 20,
    ) -> PagedResult[CommentThread]:
        """
        Top-level comments newest first, each with its replies oldest first.

        Pagination and the total count apply to top-level comments.
        """
        if not await self.articles.exists(article_id):
            raise NotFoundError("Article not found")

        top_level, total = await self.repo.list_top_level(
            article_id, include_deleted, limit=limit, offset=(page - 1) * limit
        )
        replies = await self.repo.list_replies((c.id for c in top_level), include_deleted)
        await self._decrypt([top_level, replies])

        by_parent: dict[str, list[CommentResponse]] = defaultdict(list)
        for reply in replies:
            by_parent[reply.parent_id].append(CommentResponse.model_validate(reply))

        threads = []
        for comment in top_level:
            thread = CommentThread.model_validate(comment)
            thread.replies = by_parent.get(comment.id, [])
            threads.append(thread)
        return PagedResult(items=threads, total=total, page=page, limit=limit)

    async def get_comment_replies(self, parent_id: str, include_deleted: bool = False) -> list[Comment]:
        if not await self.repo.exists(parent_id):
            raise NotFoundError("Comment not found")
        return await self._decrypt(await self.repo.list_replies([parent_id], include_deleted))

    async def _page(self, criteria: list[Any], page: int, limit: int) -> PagedResult[Comment]:
        items, total = await self.repo.list_filtered(
            *criteria, limit=limit, offset=(page - 1) * limit
        )
        await self._decrypt(items)
        return PagedResult(items=items, total=total, page=page, limit=limit)

    async def get_user_comments(
        self,
        user_id: str,
        include_deleted: bool = False,
        page: int = 1,
        limit: int = 20,
    ) -> PagedResult[Comment]:
        criteria = [Comment.user_id == user_id]
        if not include_deleted:
            criteria.append(Comment.is_deleted == False)  # noqa: E712
        return await self._page(criteria, page, limit)

    async def get_all_comments(
        self,
        include_deleted: bool = True,
        page: int = 1,
        limit: int = 20,
    ) -> PagedResult[Comment]:
        """Admin listing; deleted comments are included by default."""
        criteria = [] if include_deleted else [Comment.is_deleted == False]  # noqa: E712
        return await self._page(criteria, page, limit)

    async def statistics(self) -> CommentStatistics:
        total = await self.repo.count()
        deleted = await self.repo.count(Comment.is_deleted == True)  # noqa: E712
        replies = await self.repo.count(Comment.parent_id.is_not(None))

        top = await self.repo.top_commenters(TOP_COMMENTERS_LIMIT)
        await self._decrypt([user for user, _ in top])

        return CommentStatistics(
            total=total,
            active=total - deleted,
            deleted=deleted,
            replies=replies,
            top_commenters=[
                TopCommenter(user_id=user.id, name=user.display_name, comment_count=count)
                for user, count in top
            ],
        )

    async def count_for_article(self, article_id: str) -> int:
        return await self.repo.count(
            Comment.article_id == article_id,
            Comment.is_deleted == False,  # noqa: E712
        )

    async def count_for_user(self, user_id: str) -> int:
        return await self.repo.count(
            Comment.user_id == user_id,
            Comment.is_deleted == False,  # noqa: E712
        )
