"""
Integration Tests for the Admin Users API.
"""

import pytest
from httpx import AsyncClient

from newsdesk.backend.models.user import UserRole

ADMIN_USERS = "/api/v1/admin/users"


class TestAccess:
    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, client: AsyncClient, api, auth_headers, author):
        api.assert_error(await client.get(ADMIN_USERS, headers=auth_headers(author)), 403, "AUTHZ_FORBIDDEN")

    @pytest.mark.asyncio
    async def test_anonymous(self, client: AsyncClient, api):
        api.assert_error(await client.get(ADMIN_USERS), 401, "AUTH_UNAUTHORIZED")


class TestListing:
    @pytest.mark.asyncio
    async def test_filter_by_role(self, client: AsyncClient, api, auth_headers, admin, reader, author):
        body = api.assert_success(
            await client.get(ADMIN_USERS, params={"role": "author"}, headers=auth_headers(admin))
        )

        assert [u["id"] for u in body["data"]] == [author.id]
        assert body["data"][0]["first_name"] == "Jana"

    @pytest.mark.asyncio
    async def test_search_decrypted_names(
        self, client: AsyncClient, api, auth_headers, admin, reader, author
    ):
        body = api.assert_success(
            await client.get(ADMIN_USERS, params={"search": "horv"}, headers=auth_headers(admin))
        )

        assert [u["id"] for u in body["data"]] == [reader.id]
        assert body["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_search_endpoint(self, client: AsyncClient, api, auth_headers, admin, reader, author):
        data = api.assert_success(
            await client.get(f"{ADMIN_USERS}/search", params={"q": "example.com"}, headers=auth_headers(admin))
        )["data"]

        assert {u["id"] for u in data} == {admin.id, reader.id, author.id}

    @pytest.mark.asyncio
    async def test_get_user(self, client: AsyncClient, api, auth_headers, admin, reader):
        data = api.assert_success(await client.get(f"{ADMIN_USERS}/{reader.id}", headers=auth_headers(admin)))["data"]

        assert data["email"] == "reader@example.com"
        assert data["display_name"] == "Eva Horváthová"

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, api, auth_headers, admin, reader, create_user):
        await create_user(is_blocked=True)

        data = api.assert_success(await client.get(f"{ADMIN_USERS}/stats", headers=auth_headers(admin)))["data"]

        assert data["total"] == 3
        assert data["blocked"] == 1
        assert data["active"] == 2
        assert data["roles"] == {"user": 2, "author": 0, "admin": 1}
        assert len(data["recent_users"]) == 3


class TestBlocking:
    @pytest.mark.asyncio
    async def test_block_and_unblock(self, client: AsyncClient, api, auth_headers, admin, reader):
        blocked = api.assert_success(
            await client.post(
                f"{ADMIN_USERS}/{reader.id}/block",
                json={"reason": "Spam", "until": "2030-01-01T10:00:00Z"},
                headers=auth_headers(admin),
            )
        )["data"]
        assert blocked["is_blocked"] is True
        assert blocked["block_reason"] == "Spam"
        assert blocked["blocked_until"].startswith("2030-01-01T10:00:00")

        api.assert_error(await client.get("/api/v1/auth/me", headers=auth_headers(reader)), 403, "AUTHZ_ACCOUNT_BLOCKED")

        unblocked = api.assert_success(
            await client.post(f"{ADMIN_USERS}/{reader.id}/unblock", headers=auth_headers(admin))
        )["data"]
        assert unblocked["is_blocked"] is False
        assert unblocked["blocked_until"] is None

    @pytest.mark.asyncio
    async def test_block_twice(self, client: AsyncClient, api, auth_headers, admin, create_user):
        blocked = await create_user(is_blocked=True)

        response = await client.post(f"{ADMIN_USERS}/{blocked.id}/block", json={}, headers=auth_headers(admin))

        api.assert_error(response, 409, "RES_CONFLICT")

    @pytest.mark.asyncio
    async def test_cannot_block_self(self, client: AsyncClient, api, auth_headers, admin):
        response = await client.post(f"{ADMIN_USERS}/{admin.id}/block", json={}, headers=auth_headers(admin))

        api.assert_error(response, 403, "AUTHZ_FORBIDDEN")

    @pytest.mark.asyncio
    async def test_cannot_block_admin(self, client: AsyncClient, api, auth_headers, admin, create_user):
        other = await create_user(role=UserRole.ADMIN)

        response = await client.post(f"{ADMIN_USERS}/{other.id}/block", json={}, headers=auth_headers(admin))

        api.assert_error(response, 403, "AUTHZ_FORBIDDEN")

    @pytest.mark.asyncio
    async def test_unblock_active_user(self, client: AsyncClient, api, auth_headers, admin, reader):
        response = await client.post(f"{ADMIN_USERS}/{reader.id}/unblock", headers=auth_headers(admin))

        api.assert_error(response, 409, "RES_CONFLICT")


class TestRoles:
    @pytest.mark.asyncio
    async def test_promote_to_author(self, client: AsyncClient, api, auth_headers, admin, reader):
        response = await client.put(
            f"{ADMIN_USERS}/{reader.id}/role", json={"role": "author"}, headers=auth_headers(admin)
        )

        assert api.assert_success(response)["data"]["role"] == "author"

    @pytest.mark.asyncio
    async def test_admin_role_not_assignable(self, client: AsyncClient, api, auth_headers, admin, reader):
        response = await client.put(
            f"{ADMIN_USERS}/{reader.id}/role", json={"role": "admin"}, headers=auth_headers(admin)
        )

        data = api.assert_error(response, 400, "VAL_VALIDATION_ERROR")
        assert data["error"]["details"] == {"allowed": ["author", "user"]}

    @pytest.mark.asyncio
    async def test_unknown_role(self, client: AsyncClient, api, auth_headers, admin, reader):
        response = await client.put(
            f"{ADMIN_USERS}/{reader.id}/role", json={"role": "editor"}, headers=auth_headers(admin)
        )

        api.assert_validation_error(response, field="role")

    @pytest.mark.asyncio
    async def test_same_role(self, client: AsyncClient, api, auth_headers, admin, author):
        response = await client.put(
            f"{ADMIN_USERS}/{author.id}/role", json={"role": "author"}, headers=auth_headers(admin)
        )

        api.assert_error(response, 409, "RES_CONFLICT")


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_blocks_permanently(self, client: AsyncClient, api, auth_headers, admin, reader):
        api.assert_success(await client.delete(f"{ADMIN_USERS}/{reader.id}", headers=auth_headers(admin)))

        data = api.assert_success(await client.get(f"{ADMIN_USERS}/{reader.id}", headers=auth_headers(admin)))["data"]
        assert data["is_blocked"] is True
        assert data["blocked_until"] is None

    @pytest.mark.asyncio
    async def test_unknown_user(self, client: AsyncClient, api, auth_headers, admin):
        response = await client.delete(f"{ADMIN_USERS}/missing", headers=auth_headers(admin))

        api.assert_error(response, 404, "RES_NOT_FOUND")
