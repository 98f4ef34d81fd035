"""
User Service.

Profiles and the public author directory. Names are encrypted at rest, so
name search runs over decrypted users in memory.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.backend.clients.crypto import CryptoClient
from newsdesk.backend.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from newsdesk.backend.core.pagination import PagedResult, paginate_in_memory
from newsdesk.backend.core.utils import slugify, with_suffix
from newsdesk.backend.models.user import WRITER_ROLES, User, UserRole
from newsdesk.backend.repositories.article import ArticleRepository
from newsdesk.backend.repositories.user import UserRepository
from newsdesk.backend.schemas.user import ProfileUpdate
from newsdesk.backend.services.base import BaseService

PROFILE_FIELDS = ("first_name", "last_name", "bio", "position", "show_in_authors_list")


@dataclass
class AuthorStats:
    """An author together with the number of published articles."""

    user: User
    articles_count: int


def matches_search(user: User, term: str) -> bool:
    """Case-insensitive match on decrypted names and email."""
    needle = term.strip().lower()
    haystack = (user.first_name, user.last_name, user.display_name, user.email)
    return any(needle in (value or "").lower() for value in haystack)


class UserService(BaseService):
    """Service for user profiles and the author directory."""

    def __init__(self, session: AsyncSession, crypto: CryptoClient) -> None:
        super().__init__(session, crypto)
        self.repo = UserRepository(session, crypto)
        self.articles = ArticleRepository(session)

    async def get_user_info(self, user_id: str) -> User:
        """
        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self.repo.get_by_id(user_id)
        return await self._decrypt(user)

    async def update_profile(
        self,
        user_id: str,
        data: ProfileUpdate,
        current_user: User,
    ) -> User:
        """
        Update a profile as its owner or as an admin.

        Raises:
            AuthorizationError: Not the owner, or a non-admin touching roles,
                or an admin demoting themself
            NotFoundError: If the user does not exist
        """
        is_admin = current_user.role == UserRole.ADMIN
        if current_user.id != user_id and not is_admin:
            raise AuthorizationError("You can only edit your own profile")

        user = await self.repo.get_by_id(user_id)
        # Links left out of the request keep their stored ciphertext; it
        # survives a failed decrypt and encrypt_values passes it through
        stored_links = dict(user.social_links or {})
        await self._decrypt(user)

        values: dict[str, Any] = {
            key: value
            for key, value in data.model_dump(include=set(PROFILE_FIELDS), exclude_unset=True).items()
            if value is not None
        }

        if data.role is not None and data.role != user.role:
            if not is_admin:
                raise AuthorizationError("Only an administrator can change roles")
            if user_id == current_user.id and user.role == UserRole.ADMIN:
                raise AuthorizationError("You cannot change your own administrator role")
            values["role"] = data.role
            self._log_operation(
                "Role changed via profile",
                user_id=user_id,
                old_role=user.role,
                new_role=data.role,
                admin_id=current_user.id,
            )

        if data.social_links is not None:
            changes = data.social_links.model_dump(exclude_unset=True)
            values["social_links"] = {
                **stored_links,
                **{key: value or "" for key, value in changes.items()},
            }

        if not values:
            return user

        updated = await self._execute_db_operation(
            "update_profile", self.repo.update_fields(user_id, values)
        )
        self._log_operation("Profile updated", user_id=user_id, fields=sorted(values))
        return await self._decrypt(updated)

    async def _with_counts(self, users: list[User]) -> list[AuthorStats]:
        counts = await self.articles.published_count_by_author(user.id for user in users)
        return [AuthorStats(user=user, articles_count=counts.get(user.id, 0)) for user in users]

    async def get_authors(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
    ) -> PagedResult[AuthorStats]:
        """Public author directory, optionally filtered by name."""
        authors = await self.repo.list_authors()
        await self._decrypt(authors)
        if search and search.strip():
            authors = [author for author in authors if matches_search(author, search)]

        page_result = paginate_in_memory(authors, page, limit)
        return PagedResult(
            items=await self._with_counts(page_result.items),
            total=page_result.total,
            page=page,
            limit=limit,
        )

    async def get_author_by_slug(self, slug: str) -> AuthorStats:
        """
        Raises:
            NotFoundError: Unknown slug, not a writer, or blocked
        """
        user = await self.repo.get_by_slug(slug.lower())
        if user is None or user.role not in WRITER_ROLES or user.is_blocked:
            raise NotFoundError("Author not found")
        await self._decrypt(user)
        return (await self._with_counts([user]))[0]

    async def _unique_user_slug(self, base_slug: str, user_id: str) -> str:
        candidate, counter = base_slug, 1
        while await self.repo.slug_exists(candidate, exclude_id=user_id):
            candidate = with_suffix(base_slug, counter)
            counter += 1
        return candidate

    async def assign_slug(self, user: User) -> str | None:
        """
        Give a decrypted user a unique slug built from first and last name.

        Returns:
            The assigned slug, or None when a name part is missing
        """
        if not user.first_name or not user.last_name:
            return None
        base_slug = slugify(f"{user.first_name}-{user.last_name}")
        if not base_slug:
            raise ValidationError("Name does not produce a usable slug")
        slug = await self._unique_user_slug(base_slug, user.id)
        user.slug = slug
        await self._execute_db_operation("assign_slug", self.repo.save(user))
        return slug

    async def backfill_slugs(self) -> dict[str, int]:
        """Assign slugs to every user that has none. Returns counters."""
        users = await self.repo.without_slug()
        await self._decrypt(users)
        counters = {"assigned": 0, "skipped": 0, "failed": 0}

        for user in users:
            try:
                slug = await self.assign_slug(user)
            except ValidationError as e:
                self._logger.warning(
                    "Slug backfill failed", extra={"user_id": user.id, "error": e.message}
                )
                counters["failed"] += 1
                continue
            if slug is None:
                counters["skipped"] += 1
            else:
                counters["assigned"] += 1

        self._log_operation("Slug backfill finished", **counters)
        return counters
