"""
Admin User Service.

User management for administrators: listing, blocking, role changes and
account removal. Administrators are never blocked, demoted or removed
through this service, and nobody can act on their own account here.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.backend.clients.crypto import CryptoClient
from newsdesk.backend.core.exceptions import AuthorizationError, ConflictError, ValidationError
from newsdesk.backend.core.pagination import PagedResult, paginate_in_memory
from newsdesk.backend.core.utils import to_naive_utc
from newsdesk.backend.models.user import User, UserRole
from newsdesk.backend.repositories.user import UserRepository
from newsdesk.backend.schemas.user import RecentUser, UserStatistics
from newsdesk.backend.services.base import BaseService
from newsdesk.backend.services.user import matches_search

DEFAULT_BLOCK_REASON = "Rule violation"
DELETED_ACCOUNT_REASON = "Account deleted by administrator"
ASSIGNABLE_ROLES = frozenset({UserRole.USER, UserRole.AUTHOR})


class AdminUserService(BaseService):
    """Service for administrator user management."""

    def __init__(self, session: AsyncSession, crypto: CryptoClient) -> None:
        super().__init__(session, crypto)
        self.repo = UserRepository(session, crypto)

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        role: str | None = None,
        is_blocked: bool | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> PagedResult[User]:
        """
        Paginated user list.

        With a search term every matching row is decrypted and filtered in
        memory before paginating; without one the database paginates.
        """
        if search and search.strip():
            users = await self.repo.list_users(role, is_blocked, sort_by, sort_order)
            await self._decrypt(users)
            matched = [user for user in users if matches_search(user, search)]
            return paginate_in_memory(matched, page, limit)

        users = await self.repo.list_users(
            role, is_blocked, sort_by, sort_order, limit=limit, offset=(page - 1) * limit
        )
        total = await self.repo.count_users(role, is_blocked)
        await self._decrypt(users)
        return PagedResult(items=users, total=total, page=page, limit=limit)

    async def get_user(self, user_id: str) -> User:
        user = await self.repo.get_by_id(user_id)
        return await self._decrypt(user)

    async def search_users(
        self,
        query: str,
        limit: int = 10,
        role: str | None = None,
    ) -> list[User]:
        """Users whose decrypted name or email contains the query."""
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        users = await self.repo.list_users(role=role)
        await self._decrypt(users)
        return [user for user in users if matches_search(user, query)][:limit]

    async def _target(self, user_id: str, admin_id: str, action: str) -> User:
        if user_id == admin_id:
            raise AuthorizationError(f"You cannot {action} your own account")
        user = await self.repo.get_by_id(user_id)
        if user.role == UserRole.ADMIN:
            raise AuthorizationError(f"You cannot {action} an administrator")
        return user

    async def block_user(
        self,
        user_id: str,
        admin_id: str,
        reason: str | None = None,
        until: datetime | None = None,
    ) -> User:
        """
        Block a user permanently (no `until`) or until a date.

        Raises:
            AuthorizationError: Self or administrator target
            ConflictError: User already blocked
        """
        user = await self._target(user_id, admin_id, "block")
        if user.is_blocked:
            raise ConflictError("User is already blocked")

        user.is_blocked = True
        user.blocked_until = to_naive_utc(until) if until else None
        user.block_reason = (reason or "").strip() or DEFAULT_BLOCK_REASON
        user.blocked_by_id = admin_id
        user = await self._execute_db_operation("block_user", self.repo.save(user))

        self._log_operation("User blocked", user_id=user_id, admin_id=admin_id, until=str(until))
        return await self._decrypt(user)

    async def unblock_user(self, user_id: str, admin_id: str) -> User:
        """
        Raises:
            ConflictError: User is not blocked
        """
        user = await self.repo.get_by_id(user_id)
        if not user.is_blocked:
            raise ConflictError("User is not blocked")

        user.is_blocked = False
        user.blocked_until = None
        user.block_reason = ""
        user.blocked_by_id = None
        user = await self._execute_db_operation("unblock_user", self.repo.save(user))

        self._log_operation("User unblocked", user_id=user_id, admin_id=admin_id)
        return await self._decrypt(user)

    async def change_role(self, user_id: str, new_role: str, admin_id: str) -> User:
        """
        Switch a user between `user` and `author`.

        Raises:
            ValidationError: Role other than user/author
            AuthorizationError: Self or administrator target
            ConflictError: User already has that role
        """
        if new_role not in ASSIGNABLE_ROLES:
            raise ValidationError(
                "Invalid role",
                details={"allowed": sorted(ASSIGNABLE_ROLES)},
            )
        user = await self._target(user_id, admin_id, "change the role of")
        if user.role == new_role:
            raise ConflictError(f"User already has role '{new_role}'")

        old_role = user.role
        user.role = new_role
        user = await self._execute_db_operation("change_role", self.repo.save(user))

        self._log_operation(
            "Role changed", user_id=user_id, old_role=old_role, new_role=new_role, admin_id=admin_id
        )
        return await self._decrypt(user)

    async def delete_user(self, user_id: str, admin_id: str) -> None:
        """Remove an account by blocking it permanently."""
        user = await self._target(user_id, admin_id, "delete")
        user.is_blocked = True
        user.blocked_until = None
        user.block_reason = DELETED_ACCOUNT_REASON
        user.blocked_by_id = admin_id
        await self._execute_db_operation("delete_user", self.repo.save(user))
        self._log_operation("User deleted", user_id=user_id, admin_id=admin_id)

    async def statistics(self) -> UserStatistics:
        total = await self.repo.count_users()
        blocked = await self.repo.count_users(is_blocked=True)
        roles = {role.value: 0 for role in UserRole}
        roles.update(await self.repo.count_by_role())

        recent = await self.repo.recent(limit=5)
        await self._decrypt(recent)

        return UserStatistics(
            total=total,
            blocked=blocked,
            active=total - blocked,
            roles=roles,
            recent_users=[
                RecentUser(
                    id=user.id,
                    email=user.email,
                    name=user.display_name,
                    role=user.role,
                    created_at=user.created_at,
                )
                for user in recent
            ],
        )
