"""API routers for the tags feature.

One router per tag collection, built by ``build_router`` and mounted at
``/tags`` and ``/research/tags``:

    GET    /                         - Unarchived tags (paginated, last update desc)
    POST   /                         - Report a new tag
    GET    /users/{user_id}          - Tags reported by a user (paginated)
    GET    /{tag_id}                 - Get a tag
    PATCH  /{tag_id}                 - Edit a tag (creator only)
    DELETE /{tag_id}                 - Delete a tag (creator only)
    POST   /{tag_id}/view            - Count a view
    GET    /{tag_id}/status          - Latest status (with hasUpVote)
    GET    /{tag_id}/statuses        - Status history (paginated)
    POST   /{tag_id}/statuses        - Append a status
    POST   /{tag_id}/votes           - UPVOTE / CANCEL_UPVOTE the latest status

Plus ``settings_router`` (``/settings/archived-threshold``) and
``fixed_tags_router`` (``/fixed-tags``):

    GET    /                                       - Fixed tags (paginated, id order)
    GET    /{fixed_tag_id}                         - Get a fixed tag
    GET    /{fixed_tag_id}/sub-locations           - Sub-locations with latest status
    GET    /sub-locations/{sub_location_id}         - Get a sub-location
    GET    /sub-locations/{sub_location_id}/status  - Latest sub-location status
    GET    /sub-locations/{sub_location_id}/statuses - Status history (paginated)
    POST   /sub-locations/{sub_location_id}/statuses - Append a sub-location status

Mutating handlers commit the request session before dispatching the change
events the service returned.
"""

import logging
from collections.abc import Sequence
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from campus_service.core.dependencies.auth import AdminUserDep, AuthUserDep, OptionalAuthUser
from campus_service.core.dependencies.database import SessionDep
from campus_service.core.dependencies.events import DispatcherDep
from campus_service.core.dependencies.pagination import PageParamsDep
from campus_service.core.events import DomainEvent, EventDispatcher
from campus_service.core.pagination import Page
from campus_service.features.tags.dependencies import (
    FixedTagServiceDep,
    ThresholdDep,
    tag_service_dependency,
)
from campus_service.features.tags.missions import RESEARCH_TAGS, TAGS, TagCollection
from campus_service.features.tags.schemas import (
    FixedTagRead,
    StatusCreate,
    StatusRead,
    SubLocationRead,
    SubLocationStatusCreate,
    SubLocationStatusRead,
    TagCreate,
    TagRead,
    TagUpdate,
    ThresholdRead,
    ThresholdUpdate,
    VoteRequest,
    VoteResponse,
)
from campus_service.features.tags.service import TagService

logger = logging.getLogger(__name__)


class ViewCountRead(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tag_id: UUID
    view_count: int


async def _commit_and_dispatch(
    session: AsyncSession,
    dispatcher: EventDispatcher,
    events: Sequence[DomainEvent],
) -> None:
    await session.commit()
    if events:
        await dispatcher.dispatch(events)


def build_router(collection: TagCollection, prefix: str) -> APIRouter:
    """Router for one tag collection."""
    router = APIRouter(prefix=prefix, tags=[collection.title])
    ServiceDep = Annotated[TagService, Depends(tag_service_dependency(collection))]

    @router.get(
        "",
        response_model=Page[TagRead],
        summary="List unarchived tags",
        description="Unarchived tags, most recently updated first. Pass the returned "
        "cursor back to get the next page; an empty page ends the listing.",
        responses={400: {"description": "Stale cursor"}},
    )
    async def list_unarchived_tags(service: ServiceDep, params: PageParamsDep) -> Page[TagRead]:
        result = await service.list_unarchived(params)
        return Page[TagRead].from_result(result, TagRead.from_model)

    @router.post(
        "",
        response_model=TagRead,
        status_code=status.HTTP_201_CREATED,
        summary="Report a new tag",
        responses={401: {"description": "Not authenticated"}},
    )
    async def add_tag(
        payload: TagCreate,
        user: AuthUserDep,
        service: ServiceDep,
        session: SessionDep,
        dispatcher: DispatcherDep,
    ) -> TagRead:
        change = await service.add_tag(user.user_id, payload)
        await _commit_and_dispatch(session, dispatcher, change.events)
        return change.tag

    @router.get(
        "/users/{user_id}",
        response_model=Page[TagRead],
        summary="List tags reported by a user",
    )
    async def list_user_tags(user_id: str, service: ServiceDep, params: PageParamsDep) -> Page[TagRead]:
        result = await service.list_created_by(user_id, params)
        return Page[TagRead].from_result(result, TagRead.from_model)

    @router.get(
        "/{tag_id}",
        response_model=TagRead,
        summary="Get a tag",
        responses={404: {"description": "Tag not found"}},
    )
    async def get_tag(tag_id: UUID, service: ServiceDep) -> TagRead:
        return TagRead.from_model(await service.get_tag(tag_id))

    @router.patch(
        "/{tag_id}",
        response_model=TagRead,
        summary="Edit a tag",
        responses={403: {"description": "Not the creator"}, 404: {"description": "Tag not found"}},
    )
    async def update_tag(
        tag_id: UUID,
        payload: TagUpdate,
        user: AuthUserDep,
        service: ServiceDep,
        session: SessionDep,
        dispatcher: DispatcherDep,
    ) -> TagRead:
        change = await service.update_tag(user.user_id, tag_id, payload)
        await _commit_and_dispatch(session, dispatcher, change.events)
        return change.tag

    @router.delete(
        "/{tag_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a tag",
        responses={403: {"description": "Not the creator"}, 404: {"description": "Tag not found"}},
    )
    async def delete_tag(
        tag_id: UUID,
        user: AuthUserDep,
        service: ServiceDep,
        session: SessionDep,
        dispatcher: DispatcherDep,
    ) -> None:
        change = await service.delete_tag(user.user_id, tag_id)
        await _commit_and_dispatch(session, dispatcher, change.events)

    @router.post(
        "/{tag_id}/view",
        response_model=ViewCountRead,
        summary="Count a view of a tag",
    )
    async def view_tag(
        tag_id: UUID,
        user: OptionalAuthUser,
        service: ServiceDep,
        session: SessionDep,
    ) -> ViewCountRead:
        count = await service.view_tag(tag_id, user.user_id if user else None)
        await session.commit()
        return ViewCountRead(tag_id=tag_id, view_count=count)

    @router.get(
        "/{tag_id}/status",
        response_model=StatusRead,
        summary="Latest status of a tag",
    )
    async def get_latest_status(tag_id: UUID, user: OptionalAuthUser, service: ServiceDep) -> StatusRead:
        return await service.get_latest_status(tag_id, user.user_id if user else None)

    @router.get(
        "/{tag_id}/statuses",
        response_model=Page[StatusRead],
        summary="Status history of a tag",
    )
    async def list_statuses(tag_id: UUID, service: ServiceDep, params: PageParamsDep) -> Page[StatusRead]:
        result = await service.list_statuses(tag_id, params)
        return Page[StatusRead].from_result(result, StatusRead.from_model)

    @router.post(
        "/{tag_id}/statuses",
        response_model=StatusRead,
        status_code=status.HTTP_201_CREATED,
        summary="Append a status to a tag",
    )
    async def update_status(
        tag_id: UUID,
        payload: StatusCreate,
        user: AuthUserDep,
        service: ServiceDep,
        session: SessionDep,
        dispatcher: DispatcherDep,
    ) -> StatusRead:
        change = await service.update_status(user.user_id, tag_id, payload)
        await _commit_and_dispatch(session, dispatcher, change.events)
        return change.status

    @router.post(
        "/{tag_id}/votes",
        response_model=VoteResponse,
        summary="Vote on the latest status of a tag",
        description="UPVOTE when already voted and CANCEL_UPVOTE without a vote are "
        "rejected with 409. When the archival step fails after the vote committed, "
        "the error is returned but the vote stays recorded.",
        responses={
            400: {"description": "Status not votable"},
            409: {"description": "Invalid vote transition"},
            503: {"description": "Write conflict or store unavailable; retry the request"},
        },
    )
    async def vote(
        tag_id: UUID,
        payload: VoteRequest,
        user: AuthUserDep,
        service: ServiceDep,
        session: SessionDep,
        dispatcher: DispatcherDep,
    ) -> VoteResponse:
        outcome = await service.vote(user.user_id, tag_id, payload.action)
        await _commit_and_dispatch(session, dispatcher, outcome.events)
        return VoteResponse(
            entity_id=outcome.result.tag_id,
            new_count=outcome.result.new_count,
            has_voted=outcome.result.has_voted,
        )

    return router


tags_router = build_router(TAGS, "/tags")
research_tags_router = build_router(RESEARCH_TAGS, "/research/tags")

fixed_tags_router = APIRouter(prefix="/fixed-tags", tags=["fixed tags"])
settings_router = APIRouter(prefix="/settings", tags=["settings"])

@fixed_tags_router.get(
    "",
    response_model=Page[FixedTagRead],
    summary="List fixed tags",
    description="Fixed landmarks in identifier order.",
)
async def list_fixed_tags(service: FixedTagServiceDep, params: PageParamsDep) -> Page[FixedTagRead]:
    result = await service.list_fixed_tags(params)
    return Page[FixedTagRead].from_result(result, FixedTagRead.from_model)


@fixed_tags_router.get(
    "/sub-locations/{sub_location_id}",
    response_model=SubLocationRead,
    summary="Get a sub-location with its latest status",
)
async def get_sub_location(sub_location_id: UUID, service: FixedTagServiceDep) -> SubLocationRead:
    return await service.describe_sub_location(sub_location_id)


@fixed_tags_router.get(
    "/sub-locations/{sub_location_id}/status",
    response_model=SubLocationStatusRead,
    summary="Latest status of a sub-location",
    responses={404: {"description": "Unknown sub-location or no status yet"}},
)
async def get_sub_location_status(sub_location_id: UUID, service: FixedTagServiceDep) -> SubLocationStatusRead:
    return SubLocationStatusRead.from_model(await service.get_latest_status(sub_location_id))


@fixed_tags_router.get(
    "/sub-locations/{sub_location_id}/statuses",
    response_model=Page[SubLocationStatusRead],
    summary="Status history of a sub-location",
)
async def list_sub_location_statuses(
    sub_location_id: UUID, service: FixedTagServiceDep, params: PageParamsDep
) -> Page[SubLocationStatusRead]:
    result = await service.list_statuses(sub_location_id, params)
    return Page[SubLocationStatusRead].from_result(result, SubLocationStatusRead.from_model)


@fixed_tags_router.post(
    "/sub-locations/{sub_location_id}/statuses",
    response_model=SubLocationStatusRead,
    status_code=status.HTTP_201_CREATED,
    summary="Append a status to a sub-location",
)
async def update_sub_location_status(
    sub_location_id: UUID,
    payload: SubLocationStatusCreate,
    user: AuthUserDep,
    service: FixedTagServiceDep,
    session: SessionDep,
) -> SubLocationStatusRead:
    created = await service.add_status(user.user_id, sub_location_id, payload)
    await session.commit()
    return created


@fixed_tags_router.get(
    "/{fixed_tag_id}",
    response_model=FixedTagRead,
    summary="Get a fixed tag",
)
async def get_fixed_tag(fixed_tag_id: UUID, service: FixedTagServiceDep) -> FixedTagRead:
    return FixedTagRead.from_model(await service.get_fixed_tag(fixed_tag_id))


@fixed_tags_router.get(
    "/{fixed_tag_id}/sub-locations",
    response_model=list[SubLocationRead],
    summary="Sub-locations of a fixed tag",
    description="Each sub-location carries its latest status, or null before the first one.",
)
async def list_sub_locations(fixed_tag_id: UUID, service: FixedTagServiceDep) -> list[SubLocationRead]:
    return await service.list_sub_locations(fixed_tag_id)


@settings_router.get(
    "/archived-threshold",
    response_model=ThresholdRead,
    summary="Current archived threshold",
)
async def get_archived_threshold(threshold: ThresholdDep) -> ThresholdRead:
    return ThresholdRead(archived_threshold=threshold.current())


@settings_router.put(
    "/archived-threshold",
    response_model=ThresholdRead,
    summary="Change the archived threshold",
    responses={401: {"description": "Not authenticated"}, 403: {"description": "Not an administrator"}},
)
async def set_archived_threshold(
    payload: ThresholdUpdate,
    admin: AdminUserDep,
    threshold: ThresholdDep,
) -> ThresholdRead:
    value = await threshold.set(payload.archived_threshold)
    logger.info("Archived threshold changed via API", extra={"user_id": admin.user_id, "value": value})
    return ThresholdRead(archived_threshold=value)
