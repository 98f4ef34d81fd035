"""
Integration Tests for the public Users API and the telegram relay endpoint.
"""

import pytest
from httpx import AsyncClient

from newsdesk.backend.models.article import ArticleStatus
from newsdesk.backend.models.user import UserRole

USERS = "/api/v1/users"
TELEGRAM = "/api/v1/telegram"


class TestAuthors:
    @pytest.mark.asyncio
    async def test_directory_is_public(self, client: AsyncClient, api, reader, author, create_article):
        await create_article(author, status=ArticleStatus.PUBLISHED)

        body = api.assert_success(await client.get(f"{USERS}/authors"))

        assert [a["id"] for a in body["data"]] == [author.id]
        assert body["data"][0]["articles_count"] == 1
        assert body["data"][0]["display_name"] == "Jana Nováková"
        assert "email" not in body["data"][0]

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient, api, create_user):
        await create_user(role=UserRole.AUTHOR, first_name="Peter", last_name="Kováč")
        await create_user(role=UserRole.AUTHOR, first_name="Zuzana", last_name="Malá")

        body = api.assert_success(await client.get(f"{USERS}/authors", params={"search": "zuz"}))

        assert [a["first_name"] for a in body["data"]] == ["Zuzana"]

    @pytest.mark.asyncio
    async def test_by_slug(self, client: AsyncClient, api, create_user):
        writer = await create_user(role=UserRole.AUTHOR, slug="peter-kovac", first_name="Peter")

        data = api.assert_success(await client.get(f"{USERS}/authors/peter-kovac"))["data"]

        assert data["id"] == writer.id
        assert data["first_name"] == "Peter"

    @pytest.mark.asyncio
    async def test_unknown_slug(self, client: AsyncClient, api):
        api.assert_error(await client.get(f"{USERS}/authors/nobody"), 404, "RES_NOT_FOUND")


class TestUserLookup:
    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient, api, reader):
        api.assert_error(await client.get(f"{USERS}/{reader.id}"), 401, "AUTH_UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_returns_decrypted_user(self, client: AsyncClient, api, auth_headers, reader, author):
        data = api.assert_success(await client.get(f"{USERS}/{reader.id}", headers=auth_headers(author)))["data"]

        assert data["first_name"] == "Eva"
        assert data["last_name"] == "Horváthová"


class TestTelegramSend:
    @pytest.mark.asyncio
    async def test_admin_sends(self, client: AsyncClient, api, auth_headers, admin, telegram_service):
        response = await client.post(
            f"{TELEGRAM}/send", json={"message": " Deploy finished "}, headers=auth_headers(admin)
        )

        data = api.assert_success(response)["data"]
        assert data == {"sent": True, "response": {"success": True}}
        assert telegram_service.payloads == [{"messageToSend": "Deploy finished"}]

    @pytest.mark.asyncio
    async def test_relay_failure_is_reported(self, client: AsyncClient, api, auth_headers, admin, telegram_service):
        telegram_service.fail = True

        response = await client.post(f"{TELEGRAM}/send", json={"message": "Hello"}, headers=auth_headers(admin))

        api.assert_error(response, 502, "SYS_EXTERNAL_SERVICE_ERROR")

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, api, auth_headers, author):
        response = await client.post(f"{TELEGRAM}/send", json={"message": "Hello"}, headers=auth_headers(author))

        api.assert_error(response, 403, "AUTHZ_FORBIDDEN")

    @pytest.mark.asyncio
    async def test_blank_message(self, client: AsyncClient, api, auth_headers, admin):
        response = await client.post(f"{TELEGRAM}/send", json={"message": "   "}, headers=auth_headers(admin))

        api.assert_validation_error(response, field="message")
