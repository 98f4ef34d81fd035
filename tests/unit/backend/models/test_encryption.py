"""
Unit Tests for Field-Level Encryption.

EncryptableMixin runs against a real CryptoClient backed by the fake
crypto service from the root conftest; nothing touches a database.
"""

import pytest

from newsdesk.backend.models.encryption import (
    CIPHERTEXT_PREFIX,
    encrypt_values,
    get_path,
    is_ciphertext,
    set_path,
)
from newsdesk.backend.models.user import User

ENCRYPT = "/api/crypto/encrypt"
DECRYPT = "/api/crypto/decrypt"


def _user(**overrides) -> User:
    values = {
        "email": "jana@example.com",
        "google_id": "g-1",
        "first_name": "Jana",
        "last_name": "Nováková",
        "social_links": {"linkedin": "https://linkedin.com/in/jana", "twitter": ""},
    }
    values.update(overrides)
    return User(**values)


# =============================================================================
# Path helpers
# =============================================================================


class TestPathHelpers:
    def test_get_path_reads_nested_value(self):
        assert get_path({"a": {"b": "c"}}, "a.b") == "c"

    def test_get_path_missing_segment_is_none(self):
        assert get_path({"a": "flat"}, "a.b") is None
        assert get_path(None, "a") is None

    def test_set_path_creates_containers(self):
        container: dict = {}
        set_path(container, "social_links.linkedin", "x")
        assert container == {"social_links": {"linkedin": "x"}}

    def test_is_ciphertext(self):
        assert is_ciphertext(CIPHERTEXT_PREFIX + "abc") is True
        assert is_ciphertext("Jana") is False
        assert is_ciphertext(None) is False


# =============================================================================
# encrypt_fields
# =============================================================================


class TestEncryptFields:
    @pytest.mark.asyncio
    async def test_encrypts_declared_fields_in_one_request(self, crypto, crypto_service):
        user = _user()

        count = await user.encrypt_fields(crypto)

        assert count == 3
        assert len(crypto_service.calls(ENCRYPT)) == 1
        assert is_ciphertext(user.first_name)
        assert is_ciphertext(user.last_name)
        assert is_ciphertext(user.social_links["linkedin"])

    @pytest.mark.asyncio
    async def test_plain_fields_untouched(self, crypto):
        user = _user()

        await user.encrypt_fields(crypto)

        assert user.email == "jana@example.com"
        assert user.social_links["twitter"] == ""

    @pytest.mark.asyncio
    async def test_empty_fields_skipped(self, crypto, crypto_service):
        user = _user(first_name="", last_name=None, social_links={"linkedin": "", "twitter": ""})

        assert await user.encrypt_fields(crypto) == 0
        assert crypto_service.calls(ENCRYPT) == []

    @pytest.mark.asyncio
    async def test_never_encrypts_twice(self, crypto, crypto_service):
        user = _user()
        await user.encrypt_fields(crypto)
        first_name = user.first_name

        assert await user.encrypt_fields(crypto) == 0
        assert user.first_name == first_name
        assert len(crypto_service.calls(ENCRYPT)) == 1

    @pytest.mark.asyncio
    async def test_sends_dotted_paths(self, crypto, crypto_service):
        await _user(first_name="", last_name="").encrypt_fields(crypto)

        body = crypto_service.calls(ENCRYPT)[0]
        assert body == {"data": {"social_links.linkedin": "https://linkedin.com/in/jana"}}


# =============================================================================
# decrypt
# =============================================================================


class TestDecrypt:
    @pytest.mark.asyncio
    async def test_restores_plaintext(self, crypto, crypto_service):
        user = _user()
        await user.encrypt_fields(crypto)

        await user.decrypt(crypto)

        assert user.first_name == "Jana"
        assert user.last_name == "Nováková"
        assert user.social_links == {"linkedin": "https://linkedin.com/in/jana", "twitter": ""}
        assert len(crypto_service.calls(DECRYPT)) == 1

    @pytest.mark.asyncio
    async def test_plain_values_not_sent(self, crypto, crypto_service):
        user = _user()

        await user.decrypt(crypto)

        assert crypto_service.calls(DECRYPT) == []
        assert user.first_name == "Jana"

    @pytest.mark.asyncio
    async def test_failure_clears_ciphertext_fields(self, crypto, crypto_service):
        user = _user()
        await user.encrypt_fields(crypto)
        crypto_service.fail_decrypt = True

        await user.decrypt(crypto)

        assert user.first_name is None
        assert user.last_name is None
        assert user.social_links["linkedin"] is None
        assert user.social_links["twitter"] == ""

    @pytest.mark.asyncio
    async def test_returns_instance(self, crypto):
        user = _user()
        assert await user.decrypt(crypto) is user


class TestIsEncrypted:
    @pytest.mark.asyncio
    async def test_true_for_ciphertext(self, crypto):
        user = _user()
        await user.encrypt_fields(crypto)

        assert await user.is_encrypted("first_name", crypto) is True

    @pytest.mark.asyncio
    async def test_false_for_empty_field(self, crypto):
        assert await _user(first_name="").is_encrypted("first_name", crypto) is False

    @pytest.mark.asyncio
    async def test_false_when_service_rejects(self, crypto, crypto_service):
        crypto_service.fail_decrypt = True
        assert await _user().is_encrypted("first_name", crypto) is False


# =============================================================================
# encrypt_values (bulk update path)
# =============================================================================


class TestEncryptValues:
    @pytest.mark.asyncio
    async def test_encrypts_only_declared_fields(self, crypto):
        values = {"first_name": "Eva", "bio": "Economist"}

        result = await encrypt_values(values, User.__encrypted_fields__, crypto)

        assert is_ciphertext(result["first_name"])
        assert result["bio"] == "Economist"
        assert values["first_name"] == "Eva"

    @pytest.mark.asyncio
    async def test_nested_json_field(self, crypto):
        values = {"social_links": {"linkedin": "in/eva", "twitter": ""}}

        result = await encrypt_values(values, User.__encrypted_fields__, crypto)

        assert is_ciphertext(result["social_links"]["linkedin"])
        assert result["social_links"]["twitter"] == ""
        assert values["social_links"]["linkedin"] == "in/eva"

    @pytest.mark.asyncio
    async def test_dotted_key(self, crypto):
        result = await encrypt_values(
            {"social_links.twitter": "@eva"}, User.__encrypted_fields__, crypto
        )
        assert is_ciphertext(result["social_links.twitter"])

    @pytest.mark.asyncio
    async def test_nothing_to_encrypt_skips_request(self, crypto, crypto_service):
        values = {"bio": "x", "first_name": CIPHERTEXT_PREFIX + "already"}

        result = await encrypt_values(values, User.__encrypted_fields__, crypto)

        assert result == values
        assert crypto_service.calls(ENCRYPT) == []
