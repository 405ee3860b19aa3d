"""API router for the current user's profile.

Endpoints:
    GET  /users/me             - Profile (created on first access)
    POST /users/me/read-guide  - Record that the user has read the guide
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from campus_service.core.dependencies.auth import AuthUserDep
from campus_service.core.dependencies.database import SessionDep
from campus_service.features.users.schemas import UserProfileRead
from campus_service.features.users.service import UserService

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get(
    "/me",
    response_model=UserProfileRead,
    summary="Get my profile",
    responses={401: {"description": "Not authenticated"}},
)
async def get_my_profile(user: AuthUserDep, session: SessionDep) -> UserProfileRead:
    profile = await UserService(session).get_profile(user.user_id)
    await session.commit()
    return UserProfileRead.from_model(profile)


@router.post(
    "/me/read-guide",
    response_model=UserProfileRead,
    summary="Mark the guide as read",
    responses={401: {"description": "Not authenticated"}},
)
async def read_guide(user: AuthUserDep, session: SessionDep) -> UserProfileRead:
    profile = await UserService(session).mark_guide_read(user.user_id)
    await session.commit()
    return UserProfileRead.from_model(profile)
