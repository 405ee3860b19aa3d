"""Vote ledger: one upvote per user and status.

A vote is a single read-modify-write unit:

    1. read the status (counter + version) and the user's vote record
    2. branch on the action
    3. write the counter and insert/delete the vote record

The counter update is guarded by the status version column, so two
transactions that read the same version cannot both commit. The loser
raises StaleDataError and ``run_in_transaction`` re-runs the whole unit
against fresh data.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import TYPE_CHECKING

from campus_service.core.database import NotFoundError, run_in_transaction
from campus_service.core.exceptions import (
    AppException,
    InvalidVoteTransitionException,
    NotVotableException,
)
from campus_service.core.settings import get_tag_settings
from campus_service.features.tags.models import TagStatus, UpVote
from campus_service.features.tags.repository import get_status_repository
from campus_service.features.tags.schemas import VoteAction
from campus_service.infra.logging import get_lazy_logger
from campus_service.infra.metrics.tracking import track_vote, track_vote_duration

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from campus_service.core.settings import TagSettings

logger = logging.getLogger(__name__)
_lazy = get_lazy_logger(__name__)


@dataclass(frozen=True, slots=True)
class VoteResult:
    """Committed outcome of a vote."""

    tag_id: UUID
    status_id: UUID
    new_count: int
    has_voted: bool


class VoteLedger:
    """Transactional upvote counter.

    The ledger only records votes. Archival is evaluated by the caller once
    ``cast_vote`` has returned, i.e. after the vote is committed.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: TagSettings | None = None,
        *,
        collection: str = "tags",
    ) -> None:
        self.session_factory = session_factory
        self.settings = settings or get_tag_settings()
        self.collection = collection
        self._statuses = get_status_repository()

    async def cast_vote(self, status_id: UUID, user_id: str, action: VoteAction) -> VoteResult:
        """Apply ``action`` for ``user_id`` on a status.

        Raises:
            NotFoundError: The status does not exist.
            NotVotableException: The status has no vote counter.
            InvalidVoteTransitionException: Upvote when already voted, or
                cancel without a vote.
            TransactionConflictException: Conflicting writers exhausted the
                retry budget.
        """

        async def _work(session: AsyncSession) -> VoteResult:
            status, vote = await self._read_state(session, status_id, user_id)
            return await self._apply(session, status, vote, user_id, action)

        started = time.perf_counter()
        try:
            result = await run_in_transaction(
                self.session_factory,
                _work,
                operation="tags.vote",
                max_attempts=self.settings.vote_max_attempts,
                initial_delay=self.settings.vote_retry_initial_delay,
                max_delay=self.settings.vote_retry_max_delay,
            )
        except NotFoundError:
            track_vote(self.collection, action.value, "not_found")
            raise
        except AppException as e:
            track_vote(self.collection, action.value, e.type)
            raise
        finally:
            track_vote_duration(self.collection, time.perf_counter() - started)

        track_vote(self.collection, action.value, "applied")
        logger.info(
            "Vote recorded",
            extra={
                "collection": self.collection,
                "status_id": str(status_id),
                "action": action.value,
                "new_count": result.new_count,
            },
        )
        return result

    async def _read_state(
        self,
        session: AsyncSession,
        status_id: UUID,
        user_id: str,
    ) -> tuple[TagStatus, UpVote | None]:
        status = await self._statuses.get_or_raise(session, status_id)
        if status.number_of_up_vote is None:
            raise NotVotableException(status_id)
        vote = await self._statuses.find_vote(session, status_id, user_id)
        _lazy.debug(
            lambda: f"vote state: status={status_id} count={status.number_of_up_vote} "
            f"version={status.version} voted={vote is not None}"
        )
        return status, vote

    async def _apply(
        self,
        session: AsyncSession,
        status: TagStatus,
        vote: UpVote | None,
        user_id: str,
        action: VoteAction,
    ) -> VoteResult:
        count = status.number_of_up_vote or 0
        if action is VoteAction.UPVOTE:
            if vote is not None:
                raise InvalidVoteTransitionException(action.value, has_voted=True)
            status.number_of_up_vote = count + 1
            session.add(UpVote(status_id=status.id, user_id=user_id))
        else:
            if vote is None:
                raise InvalidVoteTransitionException(action.value, has_voted=False)
            status.number_of_up_vote = count - 1
            await session.delete(vote)

        await session.flush()
        return VoteResult(
            tag_id=status.tag_id,
            status_id=status.id,
            new_count=status.number_of_up_vote,
            has_voted=action is VoteAction.UPVOTE,
        )
