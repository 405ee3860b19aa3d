"""FastAPI dependencies of the tags feature."""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campus_service.core.dependencies.database import get_db_session, get_session_factory
from campus_service.features.tags.missions import TagCollection
from campus_service.features.tags.service import FixedTagService, TagService
from campus_service.features.tags.threshold import ArchivedThresholdProvider, ThresholdProvider


def get_threshold_provider(request: Request) -> ThresholdProvider:
    return request.app.state.threshold


def get_managed_threshold(request: Request) -> ArchivedThresholdProvider:
    """Threshold provider that can persist changes (admin endpoints)."""
    return request.app.state.threshold


def tag_service_dependency(collection: TagCollection) -> Callable[..., TagService]:
    """Build a dependency returning a TagService scoped to ``collection``."""

    def _get_tag_service(
        session: Annotated[AsyncSession, Depends(get_db_session)],
        session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
        threshold: Annotated[ThresholdProvider, Depends(get_threshold_provider)],
    ) -> TagService:
        return TagService(
            session,
            collection,
            session_factory=session_factory,
            threshold=threshold,
        )

    return _get_tag_service


ThresholdDep = Annotated[ArchivedThresholdProvider, Depends(get_managed_threshold)]


def get_fixed_tag_service(session: Annotated[AsyncSession, Depends(get_db_session)]) -> FixedTagService:
    return FixedTagService(session)


FixedTagServiceDep = Annotated[FixedTagService, Depends(get_fixed_tag_service)]
