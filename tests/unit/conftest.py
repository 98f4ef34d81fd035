"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching real databases.

Model factories build transient ORM instances (never added to a session)
with explicit ids, so services can be exercised with repositories patched.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from newsdesk.backend.clients.crypto import CryptoClient
from newsdesk.backend.core.utils import utc_now
from newsdesk.backend.models.article import Article, ArticleStatus
from newsdesk.backend.models.category import Category
from newsdesk.backend.models.comment import Comment
from newsdesk.backend.models.user import User, UserRole


# =============================================================================
# Database Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    Mock database session for unit tests.

    Usage:
        def test_repository(mock_db_session: AsyncMock):
            repo = CategoryRepository(mock_db_session)
    """
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    session.get = AsyncMock()
    return session


@pytest.fixture
def mock_crypto() -> AsyncMock:
    """CryptoClient double. Nothing handed to it in unit tests holds ciphertext."""
    return AsyncMock(spec=CryptoClient)


# =============================================================================
# Model Factories
# =============================================================================


@pytest.fixture
def make_user() -> Callable[..., User]:
    """
    Build a transient User.

    Usage:
        admin = make_user(role="admin")
    """

    def _make(**overrides: Any) -> User:
        values: dict[str, Any] = {
            "id": str(uuid4()),
            "email": f"{uuid4().hex[:8]}@example.com",
            "google_id": uuid4().hex,
            "first_name": "Jana",
            "last_name": "Nováková",
            "avatar": "",
            "role": UserRole.USER,
            "bio": "",
            "position": "",
            "social_links": {"linkedin": "", "twitter": ""},
            "show_in_authors_list": True,
            "is_blocked": False,
            "blocked_until": None,
            "block_reason": "",
            "blocked_by_id": None,
            "email_on_reply": True,
            "email_newsletter": True,
            "email_on_approval": True,
            "email_on_rejection": True,
            "last_login": utc_now(),
            "created_at": utc_now(),
            "updated_at": utc_now(),
        }
        values.update(overrides)
        return User(**values)

    return _make


@pytest.fixture
def make_category() -> Callable[..., Category]:
    def _make(**overrides: Any) -> Category:
        values: dict[str, Any] = {
            "id": str(uuid4()),
            "name": "Mortgages",
            "slug": "mortgages",
            "description": "",
            "seo_meta_title": "",
            "seo_meta_description": "",
            "display_order": 0,
            "created_at": utc_now(),
            "updated_at": utc_now(),
        }
        values.update(overrides)
        return Category(**values)

    return _make


@pytest.fixture
def make_article(make_user, make_category) -> Callable[..., Article]:
    """Build a transient Article with author and category attached."""

    def _make(author: User | None = None, **overrides: Any) -> Article:
        author = author or make_user(role=UserRole.AUTHOR)
        category = overrides.pop("category", None) or make_category()
        values: dict[str, Any] = {
            "id": str(uuid4()),
            "title": "How to refinance a mortgage",
            "slug": "how-to-refinance-a-mortgage",
            "excerpt": "x" * 160,
            "content": "Body",
            "category_id": category.id,
            "author_id": author.id,
            "tags": [],
            "seo_meta_title": "",
            "seo_meta_description": "",
            "status": ArticleStatus.DRAFT,
            "rejection_reason": "",
            "rejected_by_id": None,
            "rejected_at": None,
            "views": 0,
            "published_at": None,
            "submitted_at": None,
            "created_at": utc_now(),
            "updated_at": utc_now(),
        }
        values.update(overrides)
        article = Article(**values)
        article.author = author
        article.category = category
        return article

    return _make


@pytest.fixture
def make_comment(make_user) -> Callable[..., Comment]:
    def _make(user: User | None = None, **overrides: Any) -> Comment:
        user = user or make_user()
        values: dict[str, Any] = {
            "id": str(uuid4()),
            "article_id": str(uuid4()),
            "user_id": user.id,
            "parent_id": None,
            "content": "Great article",
            "is_deleted": False,
            "deleted_by_id": None,
            "deleted_at": None,
            "moderation_reason": "",
            "created_at": utc_now(),
            "updated_at": utc_now(),
        }
        values.update(overrides)
        comment = Comment(**values)
        comment.user = user
        return comment

    return _make


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
