"""
Integration Test Fixtures.

Fixtures for integration tests - uses a real database, the real
repositories and the FastAPI app. Remote microservices are replaced by
in-memory stand-ins mounted through httpx.MockTransport, so the real
clients, envelopes and service tokens are exercised.
"""

import json
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any
from uuid import uuid4

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.backend.clients.crypto import CryptoClient, get_crypto_client
from newsdesk.backend.clients.email import EmailClient
from newsdesk.backend.clients.identity import GoogleIdentityClient, get_identity_client
from newsdesk.backend.clients.telegram import TelegramClient
from newsdesk.backend.core.config import get_app_config
from newsdesk.backend.core.database import get_db_session
from newsdesk.backend.core.security import create_access_token, open_payload
from newsdesk.backend.core.utils import slugify, utc_now
from newsdesk.backend.models.article import Article, ArticleStatus
from newsdesk.backend.models.category import Category
from newsdesk.backend.models.comment import Comment
from newsdesk.backend.models.user import User, UserRole
from newsdesk.backend.repositories.article import ArticleRepository
from newsdesk.backend.repositories.category import CategoryRepository
from newsdesk.backend.repositories.comment import CommentRepository
from newsdesk.backend.repositories.user import UserRepository
from newsdesk.backend.services.auth import token_claims
from newsdesk.backend.services.notification import NotificationService, get_notification_service

# Between the 150 and 200 characters an excerpt must have
EXCERPT = (
    "Mortgage rates moved again this quarter. We look at what the change means "
    "for first-time buyers who are weighing a fixed rate against a variable one this year."
)


# =============================================================================
# Remote Service Stand-ins
# =============================================================================


class RelayService:
    """
    Email or telegram microservice stand-in.

    Opens every sealed envelope with the shared payload secret and keeps
    it; `fail` makes it answer like a relay that is down.
    """

    def __init__(self) -> None:
        self.payloads: list[dict[str, Any]] = []
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = open_payload(json.loads(request.content)["data"])
        if self.fail:
            return httpx.Response(500, json={"success": False, "error": "Relay down"})
        self.payloads.append(payload)
        return httpx.Response(200, json={"success": True})


class FakeGoogle:
    """Google tokeninfo stand-in serving claims for registered ID tokens."""

    def __init__(self, client_id: str) -> None:
        self.client_id = client_id
        self.tokens: dict[str, dict[str, Any]] = {}

    def register(
        self,
        token: str,
        email: str,
        google_id: str | None = None,
        given_name: str = "Jana",
        family_name: str = "Nováková",
    ) -> None:
        self.tokens[token] = {
            "aud": self.client_id,
            "iss": "https://accounts.google.com",
            "sub": google_id or uuid4().hex,
            "email": email,
            "given_name": given_name,
            "family_name": family_name,
            "picture": "https://lh3.googleusercontent.com/a/photo",
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        claims = self.tokens.get(request.url.params.get("id_token", ""))
        if claims is None:
            return httpx.Response(400, json={"error": "invalid_token"})
        return httpx.Response(200, json=claims)


@pytest.fixture
def email_service() -> RelayService:
    return RelayService()


@pytest.fixture
def telegram_service() -> RelayService:
    return RelayService()


@pytest.fixture
def google() -> FakeGoogle:
    return FakeGoogle(get_app_config().security.identity.google_client_id)


@pytest.fixture
async def identity(google: FakeGoogle) -> AsyncGenerator[GoogleIdentityClient, None]:
    client = GoogleIdentityClient(
        get_app_config().security.identity,
        transport=httpx.MockTransport(google.handler),
    )
    yield client
    await client.close()


@pytest.fixture
def features():
    """Feature flags the notification service reads; safe to toggle per test."""
    return get_app_config().features.model_copy()


@pytest.fixture
async def notifications(
    email_service: RelayService,
    telegram_service: RelayService,
    features,
) -> AsyncGenerator[NotificationService, None]:
    email = EmailClient(
        base_url="http://email.test",
        api_key="test-email-key",
        max_attempts=1,
        transport=httpx.MockTransport(email_service.handler),
    )
    telegram = TelegramClient(
        base_url="http://telegram.test",
        api_key="test-telegram-key",
        max_attempts=1,
        transport=httpx.MockTransport(telegram_service.handler),
    )
    yield NotificationService(
        email=email,
        telegram=telegram,
        settings=get_app_config().services.notifications,
        features=features,
    )
    await email.close()
    await telegram.close()


# =============================================================================
# Data Factories
# =============================================================================


@pytest.fixture
def create_user(db_session: AsyncSession, crypto: CryptoClient) -> Callable[..., Awaitable[User]]:
    """
    Factory for committed users. Names go through the encryption layer,
    so the returned instance holds ciphertext.

    Usage:
        author = await create_user(role=UserRole.AUTHOR, first_name="Jana")
    """

    async def _create(role: str = UserRole.USER, **overrides: Any) -> User:
        token = uuid4().hex[:10]
        values: dict[str, Any] = {
            "email": f"{token}@example.com",
            "google_id": f"google-{token}",
            "first_name": "Jana",
            "last_name": "Nováková",
            "role": role,
        }
        values.update(overrides)
        user = await UserRepository(db_session, crypto).create(**values)
        await db_session.commit()
        return user

    return _create


@pytest.fixture
def create_category(db_session: AsyncSession) -> Callable[..., Awaitable[Category]]:
    async def _create(name: str | None = None, **overrides: Any) -> Category:
        name = name or f"Category {uuid4().hex[:6]}"
        values: dict[str, Any] = {"name": name, "slug": slugify(name)}
        values.update(overrides)
        category = await CategoryRepository(db_session).create(**values)
        await db_session.commit()
        return category

    return _create


@pytest.fixture
def create_article(
    db_session: AsyncSession,
    create_category: Callable[..., Awaitable[Category]],
) -> Callable[..., Awaitable[Article]]:
    """Factory for committed articles in any status, bypassing the workflow."""

    async def _create(
        author: User,
        category: Category | None = None,
        status: str = ArticleStatus.DRAFT,
        **overrides: Any,
    ) -> Article:
        if category is None:
            category = await create_category()
        values: dict[str, Any] = {
            "title": "Mortgage rates in 2025",
            "slug": f"mortgage-rates-{uuid4().hex[:8]}",
            "excerpt": EXCERPT,
            "content": "Rates rose by a quarter point across the major banks.",
            "category_id": category.id,
            "author_id": author.id,
            "status": status,
        }
        if status in (ArticleStatus.PENDING, ArticleStatus.PUBLISHED):
            values["submitted_at"] = utc_now()
        if status == ArticleStatus.PUBLISHED:
            values["published_at"] = utc_now()
        values.update(overrides)
        article = await ArticleRepository(db_session).create(**values)
        await db_session.commit()
        return article

    return _create


@pytest.fixture
def create_comment(db_session: AsyncSession) -> Callable[..., Awaitable[Comment]]:
    async def _create(
        article: Article,
        user: User,
        parent: Comment | None = None,
        content: str = "Thanks, very helpful.",
        **overrides: Any,
    ) -> Comment:
        values: dict[str, Any] = {
            "article_id": article.id,
            "user_id": user.id,
            "parent_id": parent.id if parent else None,
            "content": content,
        }
        values.update(overrides)
        comment = await CommentRepository(db_session).create(**values)
        await db_session.commit()
        return comment

    return _create


@pytest.fixture
def article_payload() -> Callable[..., dict[str, Any]]:
    """Request body for POST /articles that passes validation."""

    def _payload(category_id: str, **overrides: Any) -> dict[str, Any]:
        body: dict[str, Any] = {
            "title": "Hypotéka v roku 2025",
            "excerpt": EXCERPT,
            "content": "Rates rose by a quarter point across the major banks.",
            "category_id": category_id,
            "tags": ["Mortgage", " rates ", "mortgage"],
        }
        body.update(overrides)
        return body

    return _payload


@pytest.fixture
async def reader(create_user) -> User:
    return await create_user(email="reader@example.com", first_name="Eva", last_name="Horváthová")


@pytest.fixture
async def author(create_user) -> User:
    return await create_user(role=UserRole.AUTHOR, email="author@example.com")


@pytest.fixture
async def admin(create_user) -> User:
    return await create_user(
        role=UserRole.ADMIN, email="admin@example.com", first_name="Admin", last_name="Desk"
    )


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
async def client(
    db_session: AsyncSession,
    crypto: CryptoClient,
    identity: GoogleIdentityClient,
    notifications: NotificationService,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client wired to the test database and the stand-ins.

    Every request shares the test session; it commits when the handler
    returns and rolls back when it raises, like get_db_session does.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    from newsdesk.backend.main import create_app

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_crypto_client] = lambda: crypto
    app.dependency_overrides[get_identity_client] = lambda: identity
    app.dependency_overrides[get_notification_service] = lambda: notifications

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """
    Build Bearer headers for a user.

    Usage:
        response = await client.get("/api/v1/auth/me", headers=auth_headers(reader))
    """

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(token_claims(user))}"}

    return _headers


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error envelope.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """Assert API response is a request validation error (422)."""
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
