"""Archival policy.

An issue report is archived once its upvote count exceeds the archived
threshold. The check runs after the vote transaction committed, in its own
short transaction, so a vote can be committed while archival fails; the
vote is never rolled back in that case.

The transition is a conditional ``UPDATE ... WHERE archived = false``. Only
the caller whose UPDATE matched the row emits the ``archived`` event, which
keeps the event unique when several votes cross the threshold at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import InterfaceError, OperationalError

from campus_service.core.exceptions import StoreUnavailableException
from campus_service.features.tags.events import TagArchived, TagChangeEvent
from campus_service.features.tags.missions import Mission
from campus_service.features.tags.repository import get_tag_repository
from campus_service.features.tags.schemas import TagRead
from campus_service.infra.metrics.tracking import track_archived

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from campus_service.features.tags.threshold import ThresholdProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ArchivalOutcome:
    transitioned: bool
    events: list[TagChangeEvent] = field(default_factory=list)


class ArchivalPolicy:
    """Archive votable tags whose vote count exceeds the threshold."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        threshold: ThresholdProvider,
    ) -> None:
        self.session_factory = session_factory
        self.threshold = threshold
        self._tags = get_tag_repository()

    async def maybe_archive(self, tag_id: UUID, new_vote_count: int) -> ArchivalOutcome:
        """Archive the tag if it is eligible and not archived yet.

        Args:
            tag_id: Tag owning the voted status.
            new_vote_count: Counter value committed by the vote ledger.

        Returns:
            ArchivalOutcome; ``events`` holds one TagArchived event when this
            call performed the transition.

        Raises:
            NotFoundError: The tag no longer exists.
            StoreUnavailableException: The database could not be reached.
        """
        threshold = self.threshold.current()
        try:
            async with self.session_factory() as session, session.begin():
                tag = await self._tags.get_or_raise(session, tag_id)
                if not Mission(tag.mission).votable or tag.archived:
                    return ArchivalOutcome(transitioned=False)
                if new_vote_count <= threshold:
                    return ArchivalOutcome(transitioned=False)

                if not await self._tags.mark_archived(session, tag_id):
                    logger.debug("Tag archived concurrently", extra={"tag_id": str(tag_id)})
                    return ArchivalOutcome(transitioned=False)
                await session.refresh(tag)
                snapshot = TagRead.from_model(tag)
        except (OperationalError, InterfaceError) as e:
            raise StoreUnavailableException() from e

        track_archived(snapshot.collection)
        logger.info(
            "Tag archived",
            extra={
                "tag_id": str(tag_id),
                "collection": snapshot.collection,
                "vote_count": new_vote_count,
                "archived_threshold": threshold,
            },
        )
        return ArchivalOutcome(
            transitioned=True,
            events=[TagArchived.for_tag(snapshot, vote_count=new_vote_count)],
        )
