"""
Base Service.

Services own the business rules: they call repositories, translate
database failures into application errors and decrypt every model they
hand back to the API.

Usage:
    class CategoryService(BaseService):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(session)
            self.repo = CategoryRepository(session)
"""

from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.backend.core.exceptions import ConflictError, DatabaseError
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.services.decryption import smart_decrypt

if TYPE_CHECKING:
    from newsdesk.backend.clients.crypto import CryptoClient

T = TypeVar("T")

UNIQUE_MARKERS = ("unique", "duplicate")


class BaseService:
    """Session, crypto client and logger shared by every service."""

    def __init__(self, session: AsyncSession, crypto: "CryptoClient | None" = None) -> None:
        """
        Args:
            session: Request-scoped async session
            crypto: Crypto client; required by services touching encrypted models
        """
        self._session = session
        self._crypto = crypto
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def crypto(self) -> "CryptoClient":
        if self._crypto is None:
            raise RuntimeError(f"{self.__class__.__name__} was created without a crypto client")
        return self._crypto

    async def _decrypt(self, data: T) -> T:
        """Decrypt every encrypted model reachable from `data` and return it."""
        await smart_decrypt(data, self.crypto)
        return data

    async def _execute_db_operation(self, operation: str, coro: Any) -> Any:
        """
        Await a repository call, translating SQLAlchemy failures.

        Raises:
            ConflictError: Unique constraint violated
            DatabaseError: Any other database failure
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e.orig)},
            )
            if any(marker in str(e).lower() for marker in UNIQUE_MARKERS):
                raise ConflictError("Resource already exists") from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error("Database error", extra={"operation": operation, "error": str(e)})
            raise DatabaseError(f"Database operation failed: {operation}") from e

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._logger.info(operation, extra={"service": self.__class__.__name__, **context})
