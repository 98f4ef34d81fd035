"""
Remote Service Client Base.

Shared plumbing for the crypto, email and telegram microservices: a lazily
created httpx.AsyncClient, a fresh x-api-key token per request, tenacity
retries for transport failures and an aiobreaker circuit breaker per service.

Every failure surfaces as ExternalServiceError whose message starts with
the client's error_prefix, e.g. "Crypto operation failed: HTTP 500".
"""

from typing import Any

import aiobreaker
import httpx

from newsdesk.backend.core.config_schema import RemoteServiceSchema
from newsdesk.backend.core.exceptions import ExternalServiceError
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.core.resilience import create_circuit_breaker, create_retrying
from newsdesk.backend.core.security import create_service_token

logger = get_logger(__name__)


class ServiceClient:
    """
    Base HTTP client for one remote microservice.

    Subclasses set `service_name` and `error_prefix` and build their
    operations on top of `_send`.

    Usage:
        client = CryptoClient.from_config(config, api_key)
        encrypted = await client.encrypt({"first_name": "Jana"})
        await client.close()
    """

    service_name: str = "service"
    error_prefix: str = "Remote call failed"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff_multiplier: int = 1,
        backoff_max: int = 10,
        breaker: aiobreaker.CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Service root URL
            api_key: Shared API key placed inside each x-api-key token
            timeout: Per-request timeout in seconds
            max_attempts: Attempts for transport-level failures
            breaker: Circuit breaker; one is created when omitted
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_multiplier = backoff_multiplier
        self.backoff_max = backoff_max
        self.breaker = breaker or create_circuit_breaker(self.service_name)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls,
        config: RemoteServiceSchema,
        api_key: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ServiceClient":
        """Build a client from the services.yaml section of one microservice."""
        return cls(
            base_url=config.base_url,
            api_key=api_key,
            timeout=float(config.timeout),
            max_attempts=config.retry.max_attempts,
            backoff_multiplier=config.retry.backoff_multiplier,
            backoff_max=config.retry.backoff_max,
            breaker=create_circuit_breaker(
                cls.service_name,
                fail_max=config.circuit_breaker.fail_max,
                timeout_duration=config.circuit_breaker.timeout_duration,
            ),
            transport=transport,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": "newsdesk-backend"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": create_service_token(self.api_key)}

    def _fail(self, reason: str) -> ExternalServiceError:
        return ExternalServiceError(f"{self.error_prefix}: {reason}", service=self.service_name)

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None,
    ) -> httpx.Response:
        retrying = create_retrying(
            max_attempts=self.max_attempts,
            backoff_multiplier=self.backoff_multiplier,
            backoff_max=self.backoff_max,
        )
        async for attempt in retrying:
            with attempt:
                client = await self._get_client()
                response = await client.request(
                    method, path, json=payload, headers=self._headers()
                )
                response.raise_for_status()
                return response
        raise self._fail("no attempt was made")

    async def _send(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        check_success: bool = True,
    ) -> dict[str, Any]:
        """
        Perform one call through the breaker and retry stack.

        Returns:
            Decoded JSON body

        Raises:
            ExternalServiceError: Transport failure, HTTP error status,
                open circuit, non-JSON body or `success: false`
        """
        logger.debug(
            "Remote request",
            extra={"service": self.service_name, "method": method, "path": path},
        )
        try:
            response = await self.breaker.call_async(
                self._request_with_retry, method, path, payload
            )
        except aiobreaker.CircuitBreakerError as e:
            raise self._fail("service temporarily unavailable") from e
        except httpx.HTTPStatusError as e:
            raise self._fail(_error_from_response(e.response)) from e
        except httpx.HTTPError as e:
            raise self._fail(str(e) or type(e).__name__) from e

        try:
            body = response.json()
        except ValueError as e:
            raise self._fail("invalid JSON response") from e

        if not isinstance(body, dict):
            raise self._fail("unexpected response shape")
        if check_success and not body.get("success", False):
            raise self._fail(body.get("error") or body.get("message") or "unknown error")

        logger.debug(
            "Remote response",
            extra={"service": self.service_name, "path": path, "status": response.status_code},
        )
        return body


def _error_from_response(response: httpx.Response) -> str:
    """Best description of an HTTP error: the service's own message if it sent one."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and (body.get("error") or body.get("message")):
        return str(body.get("error") or body.get("message"))
    return f"HTTP {response.status_code}"
