"""
Exception Handlers.

Every error leaves the API in the ErrorResponse envelope with the request ID
in metadata, so clients can quote it when reporting a problem.

    register_exception_handlers(app)
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from jose import JWTError
from sqlalchemy.exc import IntegrityError

from newsdesk.backend.core.config import get_app_config
from newsdesk.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)

# Subclasses (AccountBlockedError, InvalidTransitionError) resolve through the MRO
EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    NotFoundError: 404,
    ValidationError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    ConflictError: 409,
    ExternalServiceError: 502,
    DatabaseError: 503,
}


def status_for(exc: ApplicationError) -> int:
    return next(
        (EXCEPTION_STATUS_MAP[cls] for cls in type(exc).__mro__ if cls in EXCEPTION_STATUS_MAP),
        500,
    )


def _get_request_id(request: Request) -> str | None:
    request_id = getattr(request.state, "request_id", None)
    return request_id or request.headers.get("x-request-id")


def _where(request: Request, **extra: Any) -> dict[str, Any]:
    return {"path": request.url.path, "method": request.method, **extra}


def _envelope(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details or None),
        metadata=ResponseMetadata(request_id=_get_request_id(request)),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    """Raised by services; 5xx are logged as errors, the rest as warnings."""
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Application error",
        extra=_where(request, code=exc.code, message=exc.message, status=status_code),
    )
    return _envelope(request, status_code, exc.code, exc.message, exc.details)


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Validation error"),
            "type": err.get("type", "unknown"),
        }
        for err in exc.errors()
    ]


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body, query and path validation failures, one entry per field."""
    field_errors = _field_errors(exc)
    logger.warning("Request validation failed", extra=_where(request, error_count=len(field_errors)))
    return _envelope(
        request,
        422,
        "VAL_REQUEST_INVALID",
        "Request validation failed",
        {"validation_errors": field_errors},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity constraint violated", extra=_where(request, error=str(exc.orig)))
    return _envelope(request, 409, "RES_CONFLICT", "Resource already exists or is still referenced")


async def jwt_error_handler(request: Request, exc: JWTError) -> JSONResponse:
    logger.warning("Token rejected", extra=_where(request, error=str(exc)))
    return _envelope(request, 401, "AUTH_UNAUTHORIZED", "Invalid or expired token")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last resort for anything the service layer did not translate.

    The exception type and message reach the client only when
    features.api_detailed_errors is on.
    """
    exception_type = type(exc).__name__
    logger.exception("Unhandled exception", extra=_where(request, exception_type=exception_type))

    details = None
    if get_app_config().features.api_detailed_errors:
        details = {"exception_type": exception_type, "error": str(exc)}
    return _envelope(request, 500, "SYS_INTERNAL_ERROR", "An unexpected error occurred", details)


def register_exception_handlers(app: FastAPI) -> None:
    handlers = {
        ApplicationError: application_error_handler,
        RequestValidationError: validation_error_handler,
        IntegrityError: integrity_error_handler,
        JWTError: jwt_error_handler,
        Exception: unhandled_exception_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, handler)
