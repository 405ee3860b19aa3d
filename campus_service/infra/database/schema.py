"""Schema creation for development databases and tests.

Production databases are migrated with alembic; ``create_schema`` only
creates tables that are missing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from campus_service.core.database import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


def import_models() -> None:
    """Register every mapped table on ``Base.metadata``."""
    import campus_service.features.tags.models  # noqa: F401
    import campus_service.features.users.models  # noqa: F401


async def create_schema(engine: AsyncEngine) -> None:
    import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured", extra={"tables": len(Base.metadata.tables)})


async def drop_schema(engine: AsyncEngine) -> None:
    import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
