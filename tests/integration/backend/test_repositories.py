"""
Integration Tests for Repositories.

Exercises the SQL of every repository against the test database,
including the encrypted write path of UserRepository.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from newsdesk.backend.core.exceptions import NotFoundError
from newsdesk.backend.core.utils import utc_now
from newsdesk.backend.models.article import Article, ArticleStatus
from newsdesk.backend.models.category import Category
from newsdesk.backend.models.comment import Comment
from newsdesk.backend.models.encryption import is_ciphertext
from newsdesk.backend.models.user import User, UserRole
from newsdesk.backend.repositories.article import ArticleRepository
from newsdesk.backend.repositories.category import CategoryRepository
from newsdesk.backend.repositories.comment import CommentRepository
from newsdesk.backend.repositories.user import UserRepository


async def _raw_user(db_session, user_id: str) -> User:
    """Reload a user straight from the row, bypassing any decrypted state."""
    result = await db_session.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


class TestBaseRepository:
    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, db_session):
        repo = CategoryRepository(db_session)

        assert await repo.get_by_id_or_none("missing") is None
        with pytest.raises(NotFoundError, match="Category not found"):
            await repo.get_by_id("missing")

    @pytest.mark.asyncio
    async def test_count_with_criteria(self, db_session, create_category):
        repo = CategoryRepository(db_session)
        await create_category("Banking")

        assert await repo.count() == 1
        assert await repo.count(Category.name == "Taxes") == 0

    @pytest.mark.asyncio
    async def test_delete(self, db_session, create_category):
        repo = CategoryRepository(db_session)
        category = await create_category("Banking")

        await repo.delete(category.id)

        assert not await repo.exists(category.id)


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_create_encrypts_names_and_links(self, db_session, crypto):
        repo = UserRepository(db_session, crypto)

        user = await repo.create(
            email="jana@example.com",
            google_id="g-1",
            first_name="Jana",
            last_name="Nováková",
            social_links={"linkedin": "https://linkedin.com/in/jana", "twitter": ""},
        )

        raw = await _raw_user(db_session, user.id)
        assert is_ciphertext(raw.first_name)
        assert is_ciphertext(raw.last_name)
        assert is_ciphertext(raw.social_links["linkedin"])
        assert raw.social_links["twitter"] == ""
        assert raw.email == "jana@example.com"

        await raw.decrypt(crypto)
        assert raw.display_name == "Jana Nováková"

    @pytest.mark.asyncio
    async def test_save_after_decrypt_does_not_reencrypt(self, db_session, crypto, crypto_service, create_user):
        repo = UserRepository(db_session, crypto)
        user = await create_user()
        await user.decrypt(crypto)
        crypto_service.requests.clear()

        user.bio = "Finance writer"
        await repo.save(user)

        assert crypto_service.calls("/api/crypto/encrypt") == []
        raw = await _raw_user(db_session, user.id)
        assert is_ciphertext(raw.first_name)

    @pytest.mark.asyncio
    async def test_update_fields_encrypts_bulk_values(self, db_session, crypto, create_user):
        repo = UserRepository(db_session, crypto)
        user = await create_user()

        updated = await repo.update_fields(
            user.id,
            {"first_name": "Janka", "bio": "Editor", "social_links": {"linkedin": "", "twitter": "@janka"}},
        )

        assert is_ciphertext(updated.first_name)
        assert is_ciphertext(updated.social_links["twitter"])
        assert updated.bio == "Editor"
        await updated.decrypt(crypto)
        assert updated.first_name == "Janka"
        assert updated.social_links["twitter"] == "@janka"

    @pytest.mark.asyncio
    async def test_lookups(self, db_session, crypto, create_user):
        repo = UserRepository(db_session, crypto)
        user = await create_user(email="jana@example.com", google_id="g-1", slug="jana-novakova")

        assert (await repo.get_by_email("JANA@example.com")).id == user.id
        assert (await repo.get_by_google_id("g-1")).id == user.id
        assert (await repo.get_by_slug("jana-novakova")).id == user.id
        assert await repo.slug_exists("jana-novakova")
        assert not await repo.slug_exists("jana-novakova", exclude_id=user.id)

    @pytest.mark.asyncio
    async def test_role_counts_and_recent(self, db_session, crypto, create_user):
        repo = UserRepository(db_session, crypto)
        now = utc_now()
        await create_user(created_at=now - timedelta(days=2))
        newest = await create_user(role=UserRole.AUTHOR, created_at=now)

        assert await repo.count_by_role() == {"user": 1, "author": 1}
        assert (await repo.recent(limit=1))[0].id == newest.id


class TestArticleRepository:
    @pytest.mark.asyncio
    async def test_list_filtered_pages_and_totals(self, db_session, create_article, author):
        repo = ArticleRepository(db_session)
        for views in (5, 50, 20):
            await create_article(author, status=ArticleStatus.PUBLISHED, views=views)
        await create_article(author)

        items, total = await repo.list_filtered(
            Article.status == ArticleStatus.PUBLISHED, sort_by="views", limit=2
        )

        assert total == 3
        assert [a.views for a in items] == [50, 20]
        assert items[0].author.id == author.id
        assert items[0].category is not None

    @pytest.mark.asyncio
    async def test_pending_oldest_first(self, db_session, create_article, author):
        repo = ArticleRepository(db_session)
        now = utc_now()
        newer = await create_article(author, status=ArticleStatus.PENDING, submitted_at=now)
        older = await create_article(
            author, status=ArticleStatus.PENDING, submitted_at=now - timedelta(days=1)
        )

        assert [a.id for a in await repo.list_pending()] == [older.id, newer.id]

    @pytest.mark.asyncio
    async def test_popular_within_window(self, db_session, create_article, author):
        repo = ArticleRepository(db_session)
        now = utc_now()
        recent = await create_article(author, status=ArticleStatus.PUBLISHED, views=3, published_at=now)
        await create_article(
            author, status=ArticleStatus.PUBLISHED, views=100, published_at=now - timedelta(days=30)
        )

        popular = await repo.list_popular(since=now - timedelta(days=7))

        assert [a.id for a in popular] == [recent.id]

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, db_session, create_article, author):
        repo = ArticleRepository(db_session)
        hit = await create_article(author, status=ArticleStatus.PUBLISHED, content="Fixed MORTGAGE terms")
        await create_article(author, status=ArticleStatus.DRAFT, content="mortgage draft")
        await create_article(
            author, status=ArticleStatus.PUBLISHED, title="Taxes", excerpt="x", content="VAT"
        )

        items, total = await repo.list_filtered(*repo.search_criteria("fixed mortgage"))

        assert total == 1
        assert items[0].id == hit.id

    @pytest.mark.asyncio
    async def test_increment_views(self, db_session, create_article, author):
        repo = ArticleRepository(db_session)
        article = await create_article(author, status=ArticleStatus.PUBLISHED, views=7)

        assert await repo.increment_views(article.id) == 8
        assert await repo.increment_views(article.id) == 9
        assert await repo.increment_views("missing") is None

    @pytest.mark.asyncio
    async def test_status_statistics(self, db_session, create_article, author):
        repo = ArticleRepository(db_session)
        await create_article(author, status=ArticleStatus.PUBLISHED, views=10)
        await create_article(author, status=ArticleStatus.PUBLISHED, views=2)
        await create_article(author)

        stats = await repo.status_statistics()

        assert stats == {
            "published": {"count": 2, "total_views": 12},
            "draft": {"count": 1, "total_views": 0},
        }

    @pytest.mark.asyncio
    async def test_slug_lookup_lowercases(self, db_session, create_article, author):
        repo = ArticleRepository(db_session)
        article = await create_article(author, slug="hypoteka-2025")

        assert (await repo.get_by_slug("Hypoteka-2025")).id == article.id
        assert not await repo.slug_exists("hypoteka-2025", exclude_id=article.id)


class TestCommentRepository:
    @pytest.mark.asyncio
    async def test_soft_delete_by_user(self, db_session, create_article, create_comment, author, reader, admin):
        repo = CommentRepository(db_session)
        article = await create_article(author, status=ArticleStatus.PUBLISHED)
        await create_comment(article, reader)
        await create_comment(article, reader)
        await create_comment(article, author)

        flagged = await repo.soft_delete_by_user(reader.id, admin.id)

        assert flagged == 2
        db_session.expire_all()
        items, total = await repo.list_filtered(Comment.deleted_by_id == admin.id)
        assert total == 2
        assert all(c.deleted_at is not None for c in items)

    @pytest.mark.asyncio
    async def test_top_commenters(self, db_session, create_article, create_comment, author, reader):
        repo = CommentRepository(db_session)
        article = await create_article(author, status=ArticleStatus.PUBLISHED)
        for _ in range(3):
            await create_comment(article, reader)
        await create_comment(article, author)
        await create_comment(article, author, is_deleted=True)

        top = await repo.top_commenters(limit=5)

        assert [(user.id, count) for user, count in top] == [(reader.id, 3), (author.id, 1)]


class TestCategoryRepository:
    @pytest.mark.asyncio
    async def test_name_exists_case_insensitive(self, db_session, create_category):
        repo = CategoryRepository(db_session)
        category = await create_category("Banking")

        assert await repo.name_exists("BANKING")
        assert not await repo.name_exists("banking", exclude_id=category.id)

    @pytest.mark.asyncio
    async def test_article_count_covers_every_status(self, db_session, create_category, create_article, author):
        repo = CategoryRepository(db_session)
        category = await create_category("Banking")
        await create_article(author, category=category)
        await create_article(author, category=category, status=ArticleStatus.REJECTED)

        assert await repo.article_count(category.id) == 2
