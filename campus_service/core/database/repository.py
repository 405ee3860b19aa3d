"""Minimal generic repository for SQLAlchemy models.

Provides basic CRUD operations with explicit session passing.
For complex queries, use the session directly - this is a convenience, not a cage.

Example:
    class TagRepository(BaseRepository[Tag]):
        async def find_by_creator(self, session: AsyncSession, user_id: str) -> Sequence[Tag]:
            stmt = select(Tag).where(Tag.created_by == user_id)
            result = await session.execute(stmt)
            return result.scalars().all()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import select

from campus_service.core.database.exceptions import NotFoundError
from campus_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Minimal generic repository for CRUD operations.

    Provides:
        - get(session, id) -> T | None
        - get_or_raise(session, id) -> T (raises NotFoundError)
        - create(session, instance) -> T
        - delete(session, instance) -> None

    Session is always explicit - no hidden state.
    """

    __slots__ = ("model", "_logger", "_lazy")

    def __init__(self, model: type[T]) -> None:
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class (e.g., Tag, TagStatus)
        """
        self.model = model
        # Standard logger for INFO/WARNING/ERROR
        self._logger = logging.getLogger(f"repository.{model.__name__}")
        # Lazy logger for DEBUG (zero overhead when DEBUG disabled)
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    async def get(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        *,
        options: Iterable[Any] | None = None,
        populate_existing: bool = False,
    ) -> T | None:
        """Get entity by primary key.

        Args:
            session: Database session
            id: Primary key value
            options: SQLAlchemy loader options (e.g., selectinload)
            populate_existing: Refresh an instance already in the identity map

        Returns:
            Entity if found, None otherwise
        """
        if options:
            stmt = select(self.model).where(self.model.id == id).options(*options)  # type: ignore[attr-defined]
            if populate_existing:
                stmt = stmt.execution_options(populate_existing=True)
            result = await session.execute(stmt)
            instance = result.scalar_one_or_none()
        else:
            instance = await session.get(self.model, id, populate_existing=populate_existing)

        self._lazy.debug(
            lambda: f"db.get: {self.model.__name__}({id}) -> {'found' if instance else 'not found'}"
        )
        return instance

    async def get_or_raise(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        *,
        options: Iterable[Any] | None = None,
        populate_existing: bool = False,
    ) -> T:
        """Get entity by primary key or raise NotFoundError.

        Raises:
            NotFoundError: If entity doesn't exist
        """
        instance = await self.get(
            session, id, options=options, populate_existing=populate_existing
        )
        if instance is None:
            self._logger.info(
                "Entity not found",
                extra={
                    "entity": self.model.__name__,
                    "id": str(id),
                    "operation": "db.get_or_raise",
                },
            )
            raise NotFoundError(self.model.__name__, {"id": id})
        return instance

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Add an instance and flush so server/python defaults are populated."""
        session.add(instance)
        await session.flush()
        self._lazy.debug(lambda: f"db.create: {self.model.__name__}({instance.id})")  # type: ignore[attr-defined]
        return instance

    async def delete(self, session: AsyncSession, instance: T) -> None:
        """Delete an instance and flush."""
        await session.delete(instance)
        await session.flush()
        self._lazy.debug(lambda: f"db.delete: {self.model.__name__}({instance.id})")  # type: ignore[attr-defined]


__all__ = ["BaseRepository"]
