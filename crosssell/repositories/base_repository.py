from typing import Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from crosssell.utils.logging import get_logger

# Define a generic type for SQLAlchemy models
ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository implementing common CRUD operations.

    Writes commit immediately; callers that need several writes in one
    transaction use the session directly.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    def _log_failure(self, action: str, error: SQLAlchemyError) -> None:
        self.logger.error(
            f"Error {action} {self.model.__name__}: {error}",
            exc_info=True,
        )

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a record by its ID, or None."""
        try:
            result = await self.session.execute(
                select(self.model).where(self.model.id == id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self._log_failure(f"retrieving {id} of", e)
            raise

    async def update(self, id: UUID, **kwargs) -> Optional[ModelType]:
        """Update fields of an existing record; None when it does not exist."""
        try:
            instance = await self.get_by_id(id)
            if instance is None:
                return None

            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)

            await self.session.commit()
            return instance
        except SQLAlchemyError as e:
            await self.session.rollback()
            self._log_failure(f"updating {id} of", e)
            raise

