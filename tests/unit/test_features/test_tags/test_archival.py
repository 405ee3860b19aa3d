"""Tests for the archival policy."""
from __future__ import annotations

from uuid import uuid4

import pytest

from campus_service.core.database import NotFoundError
from campus_service.features.tags.archival import ArchivalPolicy
from campus_service.features.tags.events import TagArchived
from campus_service.features.tags.missions import Mission
from campus_service.features.tags.models import Tag
from campus_service.features.tags.threshold import StaticThresholdProvider


async def _archived(session_factory, tag_id) -> bool:
    async with session_factory() as session:
        return (await session.get(Tag, tag_id)).archived


@pytest.mark.asyncio
async def test_count_above_threshold_archives_once(session_factory, seed_tag) -> None:
    seeded = await seed_tag(Mission.ISSUE)
    policy = ArchivalPolicy(session_factory, StaticThresholdProvider(2))

    first = await policy.maybe_archive(seeded.tag_id, 3)
    second = await policy.maybe_archive(seeded.tag_id, 4)

    assert first.transitioned
    assert len(first.events) == 1
    event = first.events[0]
    assert isinstance(event, TagArchived)
    assert event.collection == "tags"
    assert event.tag is not None and event.tag.archived
    assert event.to_message()["event"] == "archived"

    assert not second.transitioned
    assert second.events == []
    assert await _archived(session_factory, seeded.tag_id)


@pytest.mark.asyncio
async def test_count_at_threshold_does_not_archive(session_factory, seed_tag) -> None:
    seeded = await seed_tag(Mission.ISSUE)

    outcome = await ArchivalPolicy(session_factory, StaticThresholdProvider(2)).maybe_archive(seeded.tag_id, 2)

    assert not outcome.transitioned
    assert not await _archived(session_factory, seeded.tag_id)


@pytest.mark.asyncio
@pytest.mark.parametrize("mission", [Mission.FACILITY, Mission.ACTIVITY])
async def test_non_votable_missions_are_never_archived(session_factory, seed_tag, mission) -> None:
    seeded = await seed_tag(mission)

    outcome = await ArchivalPolicy(session_factory, StaticThresholdProvider(0)).maybe_archive(seeded.tag_id, 100)

    assert not outcome.transitioned
    assert not await _archived(session_factory, seeded.tag_id)


@pytest.mark.asyncio
async def test_threshold_is_read_on_every_evaluation(session_factory, seed_tag) -> None:
    seeded = await seed_tag(Mission.ISSUE)
    threshold = StaticThresholdProvider(5)
    policy = ArchivalPolicy(session_factory, threshold)

    assert not (await policy.maybe_archive(seeded.tag_id, 3)).transitioned
    threshold.value = 2
    assert (await policy.maybe_archive(seeded.tag_id, 3)).transitioned


@pytest.mark.asyncio
async def test_missing_tag_raises_not_found(session_factory) -> None:
    with pytest.raises(NotFoundError):
        await ArchivalPolicy(session_factory, StaticThresholdProvider(0)).maybe_archive(uuid4(), 1)
