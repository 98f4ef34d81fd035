"""
User Repository.

Data access for users. Name search is not done here: names are stored
encrypted, so services filter after decrypting.
"""

from typing import Any

from sqlalchemy import func, select

from newsdesk.backend.models.user import WRITER_ROLES, User
from newsdesk.backend.repositories.base import EncryptableRepository

SORTABLE_FIELDS = {
    "created_at": User.created_at,
    "last_login": User.last_login,
    "email": User.email,
    "role": User.role,
}


class UserRepository(EncryptableRepository[User]):
    """Repository for User model."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_google_id(self, google_id: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.google_id == google_id)
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.slug == slug)
        )
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        query = select(User.id).where(User.slug == slug)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    @staticmethod
    def _criteria(role: str | None = None, is_blocked: bool | None = None) -> list[Any]:
        criteria: list[Any] = []
        if role is not None:
            criteria.append(User.role == role)
        if is_blocked is not None:
            criteria.append(User.is_blocked == is_blocked)
        return criteria

    async def list_users(
        self,
        role: str | None = None,
        is_blocked: bool | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ) -> list[User]:
        """
        List users with optional filters.

        Args:
            limit: Page size, or None to fetch every match
        """
        column = SORTABLE_FIELDS.get(sort_by, User.created_at)
        order = column.asc() if sort_order == "asc" else column.desc()
        query = (
            select(User)
            .where(*self._criteria(role, is_blocked))
            .order_by(order, User.id)
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_users(self, role: str | None = None, is_blocked: bool | None = None) -> int:
        return await self.count(*self._criteria(role, is_blocked))

    async def list_authors(self) -> list[User]:
        """Authors and admins who are not blocked and agreed to be listed."""
        result = await self.session.execute(
            select(User)
            .where(User.role.in_(list(WRITER_ROLES)))
            .where(User.is_blocked == False)  # noqa: E712
            .where(User.show_in_authors_list == True)  # noqa: E712
            .order_by(User.created_at.asc())
        )
        return list(result.scalars().all())

    async def count_by_role(self) -> dict[str, int]:
        result = await self.session.execute(
            select(User.role, func.count()).group_by(User.role)
        )
        return {role: count for role, count in result.all()}

    async def recent(self, limit: int = 5) -> list[User]:
        result = await self.session.execute(
            select(User).order_by(User.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def without_slug(self) -> list[User]:
        result = await self.session.execute(
            select(User).where(User.slug.is_(None)).order_by(User.created_at.asc())
        )
        return list(result.scalars().all())

    async def update_fields(self, user_id: str, values: dict[str, Any]) -> User:
        """
        Bulk-update one user's columns and return the reloaded row.

        Encrypted columns in `values` are encrypted on the way in; JSON
        columns must be passed whole.
        """
        await self.update_where(User.id == user_id, **values)
        result = await self.session.execute(
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
