"""
Crypto Service Client.

Encryption, decryption and hashing are performed by a remote microservice.
Batched calls take a flat dict of `{field_path: value}` so a whole model
is handled in one round trip.
"""

from functools import lru_cache
from typing import Any

from newsdesk.backend.clients.base import ServiceClient
from newsdesk.backend.core.config import get_app_config, get_settings
from newsdesk.backend.core.exceptions import ApplicationError, ValidationError
from newsdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

SINGLE_FIELD_KEY = "single_field"


class CryptoClient(ServiceClient):
    """Client for /api/crypto/* on the crypto microservice."""

    service_name = "crypto"
    error_prefix = "Crypto operation failed"

    async def encrypt(self, data: str | dict[str, str]) -> Any:
        """
        Encrypt a string or a flat dict of strings.

        Returns:
            Ciphertext string, or a dict with the same keys holding ciphertext
        """
        if data is None:
            raise ValidationError("Data for encryption is required")
        body = await self._send("POST", "/api/crypto/encrypt", {"data": data})
        if "encrypted" not in body:
            raise self._fail("response has no 'encrypted' field")
        return body["encrypted"]

    async def decrypt(self, data: str | dict[str, str]) -> Any:
        """
        Decrypt a ciphertext string or a flat dict of ciphertext strings.

        A single string is sent wrapped as {"single_field": value} and
        unwrapped from the response.
        """
        if data is None:
            raise ValidationError("Data for decryption is required")

        if isinstance(data, str):
            result = await self._decrypt_batch({SINGLE_FIELD_KEY: data})
            if not isinstance(result, dict) or SINGLE_FIELD_KEY not in result:
                raise self._fail("response has no decrypted value")
            return result[SINGLE_FIELD_KEY]

        return await self._decrypt_batch(data)

    async def _decrypt_batch(self, data: dict[str, str]) -> Any:
        body = await self._send("POST", "/api/crypto/decrypt", {"encryptedData": data})
        if "data" not in body:
            raise self._fail("response has no 'data' field")
        return body["data"]

    async def hash_data(self, value: str) -> str:
        """One-way hash of a non-empty string."""
        if not value or not isinstance(value, str):
            raise ValidationError("Value to hash must be a non-empty string")
        body = await self._send("POST", "/api/crypto/hash", {"data": value})
        return body["hash"]

    async def verify_hash(self, value: str, hash_value: str) -> bool:
        """Check a value against a hash produced by hash_data."""
        if not value or not hash_value:
            raise ValidationError("Value and hash are required")
        body = await self._send(
            "POST", "/api/crypto/verify-hash", {"data": value, "hash": hash_value}
        )
        return bool(body.get("valid", False))

    async def health_check(self) -> dict[str, Any]:
        """Service health; never raises."""
        try:
            return await self._send("GET", "/health", check_success=False)
        except ApplicationError as e:
            logger.warning("Crypto service health check failed", extra={"error": e.message})
            return {"status": "unhealthy", "error": e.message}


@lru_cache
def get_crypto_client() -> CryptoClient:
    """Process-wide crypto client built from services.yaml and .env."""
    return CryptoClient.from_config(
        get_app_config().services.crypto,
        get_settings().crypto_service_api_key,
    )
