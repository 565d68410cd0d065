"""
Base Repository.

Base class for all repositories with common CRUD operations.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.core.exceptions import NotFoundError
from notes_api.core.logging import get_logger
from notes_api.models.base import Base

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses should set the model class:

        class UserRepository(BaseRepository[User]):
            model = User

    Reads after a write re-select with populate_existing so eager-loaded
    relationships are refreshed without lazy IO on an async session.
    """

    model: type[ModelType]
    not_found_message: str | None = None

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: str) -> ModelType:
        """
        Get a single record by ID.

        Raises:
            NotFoundError: If record not found
        """
        instance = await self.get_by_id_or_none(id)

        if instance is None:
            raise NotFoundError(self.not_found_message or f"{self.model.__name__} not found")

        return instance

    async def get_by_id_or_none(self, id: str) -> ModelType | None:
        """Get a single record by ID, returning None if not found."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> ModelType:
        """Create a new record."""
        instance = self.model(**kwargs)
        return await self.add(instance)

    async def add(self, instance: ModelType) -> ModelType:
        """Persist an already constructed instance and return it reloaded."""
        self.session.add(instance)
        await self.session.flush()
        return await self.get_by_id(instance.id)

    async def save(self, instance: ModelType) -> ModelType:
        """Flush pending changes on a loaded instance and return it reloaded."""
        await self.session.flush()
        return await self.get_by_id(instance.id)

    async def delete(self, id: str) -> ModelType:
        """
        Delete a record by ID and return the deleted instance.

        Raises:
            NotFoundError: If record not found
        """
        instance = await self.get_by_id(id)
        await self.session.delete(instance)
        await self.session.flush()
        logger.debug("Record deleted", extra={"model": self.model.__name__, "id": id})
        return instance
