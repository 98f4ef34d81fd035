"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Every exception carries a stable machine-readable code; handlers in
exception_handlers.py map each class to an HTTP status.
"""

from typing import Any


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        code: str = "SYS_INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        super().__init__(message, code="VAL_VALIDATION_ERROR", details=details)


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class AuthorizationError(ApplicationError):
    """Raised when authorization fails."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, code="AUTHZ_FORBIDDEN")


class AccountBlockedError(AuthorizationError):
    """Raised when a blocked account tries to act."""

    def __init__(self, message: str = "Account is blocked") -> None:
        super().__init__(message)
        self.code = "AUTHZ_ACCOUNT_BLOCKED"


class ConflictError(ApplicationError):
    """Raised when there is a state conflict."""

    def __init__(self, message: str = "Resource conflict", details: dict | None = None) -> None:
        super().__init__(message, code="RES_CONFLICT", details=details)


class InvalidTransitionError(ConflictError):
    """Raised when an article cannot move from its current status to the requested one."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            f"Article in status '{current}' cannot move to '{target}'",
            details={"current_status": current, "target_status": target},
        )
        self.code = "WF_INVALID_TRANSITION"


class ExternalServiceError(ApplicationError):
    """Raised when an external service call fails."""

    def __init__(self, message: str = "External service error", service: str | None = None) -> None:
        super().__init__(
            message,
            code="SYS_EXTERNAL_SERVICE_ERROR",
            details={"service": service} if service else None,
        )
        self.service = service


class DatabaseError(ApplicationError):
    """Raised when a database operation fails."""

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR")
