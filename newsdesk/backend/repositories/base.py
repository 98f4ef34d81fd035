"""
Base Repository.

Base classes for all repositories with common CRUD operations.
EncryptableRepository adds the encryption hook for models that use
EncryptableMixin: create, save and update_where encrypt before writing.
"""

from typing import TYPE_CHECKING, Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.backend.core.exceptions import NotFoundError
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.models.base import Base
from newsdesk.backend.models.encryption import encrypt_values

if TYPE_CHECKING:
    from newsdesk.backend.clients.crypto import CryptoClient

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses should set the model class:

        class CategoryRepository(BaseRepository[Category]):
            model = Category
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: str | UUID) -> ModelType:
        """
        Get a single record by ID.

        Raises:
            NotFoundError: If record not found
        """
        instance = await self.get_by_id_or_none(id)
        if instance is None:
            raise NotFoundError(f"{self.model.__name__} not found")
        return instance

    async def get_by_id_or_none(self, id: str | UUID) -> ModelType | None:
        """Get a single record by ID, returning None if not found."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == str(id))
        )
        return result.scalar_one_or_none()

    async def get_all(self, limit: int = 50, offset: int = 0) -> list[ModelType]:
        """Get all records with pagination."""
        result = await self.session.execute(
            select(self.model).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def _prepare(self, instance: ModelType) -> None:
        """Hook run right before an instance is flushed."""

    async def _prepare_values(self, values: dict[str, Any]) -> dict[str, Any]:
        """Hook run on the values of a bulk UPDATE."""
        return values

    async def create(self, **kwargs: Any) -> ModelType:
        """Create a new record."""
        instance = self.model(**kwargs)
        await self._prepare(instance)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def save(self, instance: ModelType) -> ModelType:
        """Flush pending changes of an instance already loaded or added."""
        await self._prepare(instance)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update_where(self, *criteria: Any, **values: Any) -> int:
        """
        Bulk UPDATE without loading rows.

        Returns:
            Number of rows matched
        """
        prepared = await self._prepare_values(values)
        result = await self.session.execute(
            update(self.model)
            .where(*criteria)
            .values(**prepared)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def delete(self, id: str | UUID) -> None:
        """
        Delete a record by ID.

        Raises:
            NotFoundError: If record not found
        """
        instance = await self.get_by_id(id)
        await self.session.delete(instance)
        await self.session.flush()

    async def exists(self, id: str | UUID) -> bool:
        """Check if a record exists by ID."""
        result = await self.session.execute(
            select(self.model.id).where(self.model.id == str(id))
        )
        return result.scalar_one_or_none() is not None

    async def count(self, *criteria: Any) -> int:
        """Count records matching the given criteria."""
        result = await self.session.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return result.scalar_one()


class EncryptableRepository(BaseRepository[ModelType]):
    """
    Repository for models with encrypted fields.

    Encryption is applied in the write path so callers always hand over
    plain values:

        repo = UserRepository(session, crypto)
        user = await repo.create(email="a@b.sk", first_name="Jana")
        # the row holds ciphertext; decrypt before returning it
        await user.decrypt(crypto)
    """

    def __init__(self, session: AsyncSession, crypto: "CryptoClient") -> None:
        super().__init__(session)
        self.crypto = crypto

    async def _prepare(self, instance: ModelType) -> None:
        await instance.encrypt_fields(self.crypto)

    async def _prepare_values(self, values: dict[str, Any]) -> dict[str, Any]:
        return await encrypt_values(values, self.model.__encrypted_fields__, self.crypto)
