"""Tests for the transactional vote ledger."""
from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm.exc import StaleDataError

from campus_service.core.database import NotFoundError
from campus_service.core.exceptions import (
    InvalidVoteTransitionException,
    NotVotableException,
    TransactionConflictException,
)
from campus_service.core.settings import TagSettings
from campus_service.features.tags.missions import Mission
from campus_service.features.tags.models import TagStatus, UpVote
from campus_service.features.tags.schemas import VoteAction
from campus_service.features.tags.voting import VoteLedger

UP = VoteAction.UPVOTE
CANCEL = VoteAction.CANCEL_UPVOTE


async def _stored_state(session_factory, status_id):
    async with session_factory() as session:
        status = await session.get(TagStatus, status_id)
        votes = (
            await session.execute(select(func.count()).select_from(UpVote).where(UpVote.status_id == status_id))
        ).scalar_one()
    return status.number_of_up_vote, votes


@pytest.mark.asyncio
async def test_upvote_and_cancel_keep_counter_equal_to_votes(session_factory, seed_tag) -> None:
    seeded = await seed_tag(Mission.ISSUE)
    ledger = VoteLedger(session_factory)

    first = await ledger.cast_vote(seeded.status_id, "alice", UP)
    second = await ledger.cast_vote(seeded.status_id, "bob", UP)
    cancelled = await ledger.cast_vote(seeded.status_id, "alice", CANCEL)

    assert (first.new_count, first.has_voted) == (1, True)
    assert second.new_count == 2
    assert (cancelled.new_count, cancelled.has_voted) == (1, False)
    assert cancelled.tag_id == seeded.tag_id
    assert await _stored_state(session_factory, seeded.status_id) == (1, 1)


@pytest.mark.asyncio
async def test_second_upvote_by_same_user_is_rejected(session_factory, seed_tag) -> None:
    seeded = await seed_tag(Mission.ISSUE)
    ledger = VoteLedger(session_factory)
    await ledger.cast_vote(seeded.status_id, "alice", UP)

    with pytest.raises(InvalidVoteTransitionException) as exc_info:
        await ledger.cast_vote(seeded.status_id, "alice", UP)

    assert exc_info.value.status_code == 409
    assert await _stored_state(session_factory, seeded.status_id) == (1, 1)


@pytest.mark.asyncio
async def test_cancel_without_vote_is_rejected(session_factory, seed_tag) -> None:
    seeded = await seed_tag(Mission.ISSUE)

    with pytest.raises(InvalidVoteTransitionException):
        await VoteLedger(session_factory).cast_vote(seeded.status_id, "alice", CANCEL)

    assert await _stored_state(session_factory, seeded.status_id) == (0, 0)


@pytest.mark.asyncio
async def test_status_without_counter_is_not_votable(session_factory, seed_tag) -> None:
    seeded = await seed_tag(Mission.FACILITY)

    with pytest.raises(NotVotableException) as exc_info:
        await VoteLedger(session_factory).cast_vote(seeded.status_id, "alice", UP)

    assert exc_info.value.status_code == 400
    assert await _stored_state(session_factory, seeded.status_id) == (None, 0)


@pytest.mark.asyncio
async def test_unknown_status_raises_not_found(session_factory) -> None:
    with pytest.raises(NotFoundError):
        await VoteLedger(session_factory).cast_vote(uuid4(), "alice", UP)


class _PausingLedger(VoteLedger):
    """Holds the first read of ``paused_user`` until ``resume`` is set."""

    def __init__(self, *args, paused_user: str, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.paused_user = paused_user
        self.read_done = asyncio.Event()
        self.resume = asyncio.Event()
        self.reads = 0

    async def _read_state(self, session, status_id, user_id):
        state = await super()._read_state(session, status_id, user_id)
        if user_id == self.paused_user:
            self.reads += 1
            if self.reads == 1:
                self.read_done.set()
                await self.resume.wait()
        return state


@pytest.mark.asyncio
async def test_concurrent_upvotes_are_not_lost(session_factory, seed_tag) -> None:
    seeded = await seed_tag(Mission.ISSUE)
    paused = _PausingLedger(session_factory, paused_user="alice")

    alice_task = asyncio.create_task(paused.cast_vote(seeded.status_id, "alice", UP))
    await asyncio.wait_for(paused.read_done.wait(), timeout=5)

    # Bob commits between Alice's read and her write
    bob = await VoteLedger(session_factory).cast_vote(seeded.status_id, "bob", UP)
    paused.resume.set()
    alice = await asyncio.wait_for(alice_task, timeout=5)

    assert bob.new_count == 1
    assert alice.new_count == 2
    assert paused.reads == 2
    assert await _stored_state(session_factory, seeded.status_id) == (2, 2)


class _AlwaysConflictingLedger(VoteLedger):
    async def _apply(self, session, status, vote, user_id, action):
        raise StaleDataError("simulated concurrent update")


@pytest.mark.asyncio
async def test_conflicts_exhaust_retry_budget(session_factory, seed_tag) -> None:
    seeded = await seed_tag(Mission.ISSUE)
    settings = TagSettings(vote_max_attempts=3, vote_retry_initial_delay=0, vote_retry_max_delay=0)
    ledger = _AlwaysConflictingLedger(session_factory, settings)

    with pytest.raises(TransactionConflictException) as exc_info:
        await ledger.cast_vote(seeded.status_id, "alice", UP)

    assert exc_info.value.status_code == 503
    assert exc_info.value.retryable
    assert exc_info.value.extra["attempts"] == 3
    assert await _stored_state(session_factory, seeded.status_id) == (0, 0)
