"""Base repository pattern implementation for async SQLAlchemy.

Provides common session handling and CRUD operations that can be
shared across all repositories.
"""

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from github_issue_cache.db.models import Base

# Generic type variable for model classes
ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Base repository with common async session handling.

    All repositories should inherit from this class to get
    consistent session management and common query patterns.

    Usage:
        class IssueRepository(BaseRepository[Issue]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Issue)

    Transactions:
        Repositories never commit. The caller owns the transaction, so a
        sync can write many rows and roll all of them back together.
    """

    def __init__(
        self,
        session: AsyncSession,
        model_class: type[ModelT],
    ) -> None:
        """Initialize the repository with a session.

        Args:
            session: Async SQLAlchemy session (caller manages lifecycle)
            model_class: The SQLAlchemy model class this repository manages
        """
        self._session = session
        self._model_class = model_class

    @property
    def session(self) -> AsyncSession:
        """Access the underlying session."""
        return self._session

    # -------------------------------------------------------------------------
    # Common Read Operations
    # -------------------------------------------------------------------------

    async def get_by_id(self, id: int) -> ModelT | None:
        """Get an entity by its primary key ID.

        Args:
            id: Primary key ID

        Returns:
            Entity or None if not found
        """
        return await self._session.get(self._model_class, id)

    async def _get_by_fields(self, **values: object) -> ModelT | None:
        """Get the entity matching every given field value.

        Returns:
            First matching entity or None
        """
        stmt = select(self._model_class).where(
            *(getattr(self._model_class, name) == value for name, value in values.items())
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def count(self) -> int:
        """Count total entities of this type."""
        stmt = select(func.count()).select_from(self._model_class)
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    # -------------------------------------------------------------------------
    # Common Write Operations
    # -------------------------------------------------------------------------

    def add(self, entity: ModelT) -> ModelT:
        """Add an entity to the session (does not flush).

        The entity will be persisted when the session commits or flushes.

        Args:
            entity: Entity to add

        Returns:
            The same entity (for chaining)
        """
        self._session.add(entity)
        return entity

    async def flush(self) -> None:
        """Flush pending changes to the database.

        This executes SQL but does not commit the transaction.
        Useful for getting generated IDs before commit.
        """
        await self._session.flush()

    async def delete(self, entity: ModelT) -> None:
        """Mark an entity for deletion (happens on flush/commit)."""
        await self._session.delete(entity)

    @staticmethod
    def _assign(entity: ModelT, values: Mapping[str, Any]) -> ModelT:
        """Overwrite entity attributes from a mapping of column values."""
        for key, value in values.items():
            setattr(entity, key, value)
        return entity
