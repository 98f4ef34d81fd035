"""
Request Context Middleware.

Tags every request with a request ID and a client identifier, binds both to
the structlog context and reports the handling time in X-Response-Time.
"""

import uuid
from datetime import datetime, timezone

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from newsdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

# Values accepted in X-Client-ID; anything else is logged as "unknown"
KNOWN_CLIENTS = frozenset({"web", "admin", "cli", "mobile", "internal"})


def client_id(request: Request) -> str:
    client = request.headers.get("X-Client-ID", "unknown").lower()
    return client if client in KNOWN_CLIENTS else "unknown"


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _elapsed_ms(start: datetime) -> int:
    return int((_now() - start).total_seconds() * 1000)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Request tracking for the API.

    Sets request.state.request_id, request.state.client and
    request.state.start_time for handlers and exception handlers.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        client = client_id(request)
        start = _now()

        request.state.request_id = request_id
        request.state.client = client
        request.state.start_time = start

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            client=client,
            method=request.method,
            path=request.url.path,
            source="web",
        )
        logger.debug(
            "Request started",
            extra={"client_host": request.client.host if request.client else None},
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed with exception",
                extra={"duration_ms": _elapsed_ms(start), "error_type": type(exc).__name__},
            )
            raise
        else:
            duration_ms = _elapsed_ms(start)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            logger.debug(
                "Request completed",
                extra={"status_code": response.status_code, "duration_ms": duration_ms},
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()
