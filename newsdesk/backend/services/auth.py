"""
Auth Service.

Google sign-in, session tokens and account status checks.
"""

import math
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.backend.clients.crypto import CryptoClient
from newsdesk.backend.clients.identity import GoogleIdentityClient
from newsdesk.backend.core.config import get_app_config
from newsdesk.backend.core.exceptions import (
    AccountBlockedError,
    AuthenticationError,
    AuthorizationError,
)
from newsdesk.backend.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from newsdesk.backend.core.utils import utc_now
from newsdesk.backend.models.user import ROLE_LEVELS, User, UserRole
from newsdesk.backend.repositories.user import UserRepository
from newsdesk.backend.services.base import BaseService


@dataclass
class StatusCheck:
    valid: bool
    message: str | None = None


@dataclass
class AuthSession:
    """Signed-in user with a fresh token pair."""

    user: User
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def token_claims(user: User) -> dict[str, str]:
    return {"sub": user.id, "email": user.email, "role": user.role}


def check_role(user: User, required: str) -> bool:
    """True if the user's role is at least `required` in user < author < admin."""
    return ROLE_LEVELS.get(user.role, 0) >= ROLE_LEVELS.get(required, 99)


def can_write_articles(user: User) -> bool:
    return check_role(user, UserRole.AUTHOR)


def can_moderate(user: User) -> bool:
    return check_role(user, UserRole.ADMIN)


class AuthService(BaseService):
    """
    Service for authentication.

    Users sign in with a Google ID token; accounts are created on first
    sign-in with the `user` role.
    """

    def __init__(
        self,
        session: AsyncSession,
        crypto: CryptoClient,
        identity: GoogleIdentityClient | None = None,
    ) -> None:
        super().__init__(session, crypto)
        self.identity = identity
        self.repo = UserRepository(session, crypto)

    async def google_auth(self, id_token: str) -> AuthSession:
        """
        Sign in (or sign up) with a Google ID token.

        Raises:
            AuthenticationError: If the Google token is invalid
            AccountBlockedError: If the account is blocked
        """
        if self.identity is None:
            raise RuntimeError("AuthService needs an identity client for Google sign-in")

        profile = await self.identity.verify_id_token(id_token)
        user = await self.repo.get_by_google_id(profile.google_id)

        if user is not None:
            await self.ensure_active(user)
            user.last_login = utc_now()
            user = await self._execute_db_operation("update_last_login", self.repo.save(user))
            self._log_operation("User signed in", user_id=user.id)
        else:
            if not get_app_config().features.auth_allow_registration:
                raise AuthorizationError("Registration of new accounts is disabled")
            user = await self._execute_db_operation(
                "create_user",
                self.repo.create(
                    email=profile.email,
                    google_id=profile.google_id,
                    first_name=profile.first_name,
                    last_name=profile.last_name,
                    avatar=profile.avatar,
                    role=UserRole.USER,
                    last_login=utc_now(),
                ),
            )
            self._log_operation("User created", user_id=user.id)

        await self._decrypt(user)
        return self.issue_tokens(user)

    def issue_tokens(self, user: User) -> AuthSession:
        claims = token_claims(user)
        return AuthSession(
            user=user,
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token(claims),
        )

    async def validate_user_status(self, user: User) -> StatusCheck:
        """
        Check the block state of an account.

        An expired temporary block is lifted on the spot.
        """
        if not user.is_blocked:
            return StatusCheck(valid=True)

        reason = user.block_reason or "not specified"
        if user.blocked_until is None:
            return StatusCheck(
                valid=False,
                message=f"Account is permanently blocked. Reason: {reason}",
            )

        now = utc_now()
        if user.blocked_until > now:
            days_left = math.ceil((user.blocked_until - now).total_seconds() / 86400)
            return StatusCheck(
                valid=False,
                message=(
                    f"Account is blocked until {user.blocked_until.date().isoformat()}. "
                    f"Days left: {days_left}. Reason: {reason}"
                ),
            )

        user.is_blocked = False
        user.blocked_until = None
        user.block_reason = ""
        user.blocked_by_id = None
        await self._execute_db_operation("auto_unblock", self.repo.save(user))
        self._log_operation("Expired block lifted", user_id=user.id)
        return StatusCheck(valid=True)

    async def ensure_active(self, user: User) -> None:
        """
        Raises:
            AccountBlockedError: If the account is blocked
        """
        status = await self.validate_user_status(user)
        if not status.valid:
            raise AccountBlockedError(status.message or "Account is blocked")

    async def get_user_from_token(self, token: str) -> User:
        """
        Resolve an access token to an active, decrypted user.

        Raises:
            AuthenticationError: If the token is invalid or the user is gone
            AccountBlockedError: If the account is blocked
        """
        payload = decode_token(token)
        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token")

        user = await self.repo.get_by_id_or_none(user_id)
        if user is None:
            raise AuthenticationError("User not found")

        await self.ensure_active(user)
        return await self._decrypt(user)

    async def refresh(self, refresh_token: str) -> AuthSession:
        """Exchange a refresh token for a new token pair."""
        payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        user = await self.repo.get_by_id_or_none(payload.get("sub", ""))
        if user is None:
            raise AuthenticationError("User not found")
        await self.ensure_active(user)
        await self._decrypt(user)
        return self.issue_tokens(user)
