"""
Security Utilities.

Session tokens for our own users, plus the short-lived tokens and sealed
payload envelopes used when talking to the crypto, email and telegram
microservices.
"""

import hashlib
import json
from datetime import timedelta, timezone
from typing import Any

from jose import JWTError, jwe, jwt
from jose.exceptions import JWEError

from newsdesk.backend.core.config import get_app_config, get_settings
from newsdesk.backend.core.exceptions import AuthenticationError, ValidationError
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.core.utils import utc_now

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _encode(data: dict[str, Any], token_type: str, expire_delta: timedelta) -> str:
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    to_encode = data.copy()
    to_encode.update({
        "exp": utc_now() + expire_delta,
        "iat": utc_now(),
        "type": token_type,
        "aud": jwt_config.audience,
        "iss": jwt_config.issuer,
    })
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=jwt_config.algorithm)


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode (sub, email, role)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    jwt_config = get_app_config().security.jwt
    delta = expires_delta or timedelta(minutes=jwt_config.access_token_expire_minutes)
    return _encode(data, ACCESS_TOKEN_TYPE, delta)


def create_refresh_token(data: dict[str, Any]) -> str:
    """
    Create a JWT refresh token.

    Args:
        data: Payload data to encode

    Returns:
        Encoded JWT refresh token
    """
    jwt_config = get_app_config().security.jwt
    return _encode(data, REFRESH_TOKEN_TYPE, timedelta(days=jwt_config.refresh_token_expire_days))


def decode_token(token: str, expected_type: str | None = ACCESS_TOKEN_TYPE) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string
        expected_type: Required value of the "type" claim, or None to accept any

    Returns:
        Decoded token payload

    Raises:
        AuthenticationError: If token is invalid, expired or of the wrong type
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
            issuer=jwt_config.issuer,
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token") from e

    if expected_type is not None and payload.get("type") != expected_type:
        logger.warning(
            "Token type mismatch",
            extra={"expected": expected_type, "actual": payload.get("type")},
        )
        raise AuthenticationError("Invalid token type")
    return payload


def create_service_token(api_key: str) -> str:
    """
    Create the value of the x-api-key header for a microservice call.

    A fresh token is minted for every request: it carries the service API
    key and the issue timestamp and expires after a few seconds.
    """
    settings = get_settings()
    token_config = get_app_config().security.service_tokens
    now = utc_now()
    claims = {
        "apiKey": api_key,
        "timestamp": int(now.replace(tzinfo=timezone.utc).timestamp() * 1000),
        "exp": now + timedelta(seconds=token_config.ttl_seconds),
    }
    return jwt.encode(claims, settings.service_token_secret, algorithm=token_config.algorithm)


def _payload_key() -> bytes:
    """A256GCM needs exactly 32 bytes; derive them from the shared secret."""
    return hashlib.sha256(get_settings().payload_secret.encode("utf-8")).digest()


def seal_payload(payload: dict[str, Any]) -> str:
    """
    Encrypt a JSON payload into a compact JWE for the email/telegram services.

    Args:
        payload: JSON-serializable dict

    Returns:
        Compact JWE string (dir / A256GCM)
    """
    plaintext = json.dumps(payload, separators=(",", ":"))
    token = jwe.encrypt(plaintext, _payload_key(), algorithm="dir", encryption="A256GCM")
    return token.decode("ascii") if isinstance(token, bytes) else token


def open_payload(token: str) -> dict[str, Any]:
    """
    Decrypt a JWE produced by seal_payload.

    Raises:
        ValidationError: If the envelope cannot be decrypted or is not JSON
    """
    try:
        plaintext = jwe.decrypt(token, _payload_key())
        return json.loads(plaintext)
    except (JWEError, ValueError) as e:
        raise ValidationError("Invalid payload envelope") from e
