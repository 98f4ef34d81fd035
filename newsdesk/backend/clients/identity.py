"""
Google Identity Client.

Verifies Google ID tokens against Google's tokeninfo endpoint and maps the
verified claims to a GoogleProfile.
"""

from dataclasses import dataclass
from functools import lru_cache

import httpx

from newsdesk.backend.core.config import get_app_config
from newsdesk.backend.core.config_schema import GoogleIdentitySchema
from newsdesk.backend.core.exceptions import AuthenticationError
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.core.resilience import create_retrying

logger = get_logger(__name__)


@dataclass(frozen=True)
class GoogleProfile:
    """Verified identity of a Google account."""

    google_id: str
    email: str
    first_name: str
    last_name: str
    avatar: str


class GoogleIdentityClient:
    """
    Verifier for Google ID tokens.

    Usage:
        client = GoogleIdentityClient(config)
        profile = await client.verify_id_token(token)
    """

    def __init__(
        self,
        config: GoogleIdentitySchema,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=float(self.config.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _fetch_claims(self, id_token: str) -> dict:
        async for attempt in create_retrying(max_attempts=2):
            with attempt:
                client = await self._get_client()
                response = await client.get(
                    self.config.token_info_url, params={"id_token": id_token}
                )
                response.raise_for_status()
                return response.json()
        return {}

    async def verify_id_token(self, id_token: str) -> GoogleProfile:
        """
        Verify a Google ID token.

        Raises:
            AuthenticationError: If the token is empty, rejected by Google,
                issued for another client or by an unknown issuer
        """
        if not id_token:
            raise AuthenticationError("Invalid Google token")

        try:
            claims = await self._fetch_claims(id_token)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Google token verification failed", extra={"error": str(e)})
            raise AuthenticationError("Invalid Google token") from e

        if not isinstance(claims, dict):
            raise AuthenticationError("Invalid Google token")
        if claims.get("aud") != self.config.google_client_id:
            logger.warning("Google token audience mismatch", extra={"aud": claims.get("aud")})
            raise AuthenticationError("Invalid Google token")
        if claims.get("iss") not in self.config.allowed_issuers:
            logger.warning("Google token issuer rejected", extra={"iss": claims.get("iss")})
            raise AuthenticationError("Invalid Google token")
        if not claims.get("sub") or not claims.get("email"):
            raise AuthenticationError("Invalid Google token")

        return GoogleProfile(
            google_id=str(claims["sub"]),
            email=str(claims["email"]).lower(),
            first_name=claims.get("given_name", "") or "",
            last_name=claims.get("family_name", "") or "",
            avatar=claims.get("picture", "") or "",
        )


@lru_cache
def get_identity_client() -> GoogleIdentityClient:
    return GoogleIdentityClient(get_app_config().security.identity)
