"""Authentication dependencies.

Usage:
    from campus_service.core.dependencies.auth import AuthUserDep, OptionalAuthUser

    @router.post("/{tag_id}/votes")
    async def vote(tag_id: UUID, user: AuthUserDep): ...

    @router.get("/{tag_id}/status/latest")
    async def latest(tag_id: UUID, user: OptionalAuthUser): ...

The token is read from the header named by ``AUTH_TOKEN_HEADER``
(``X-Auth-Token`` by default).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request

from campus_service.core.dependencies.auth_client import get_auth_client
from campus_service.core.exceptions import ForbiddenException, NotAuthenticatedException
from campus_service.core.settings import get_auth_settings
from campus_service.infra.auth import AuthClient, AuthUser
from campus_service.infra.logging import set_log_context

logger = logging.getLogger(__name__)


async def _resolve_user(request: Request, client: AuthClient) -> AuthUser | None:
    settings = get_auth_settings()
    token = request.headers.get(settings.token_header)
    if not token:
        return None

    info = await client.validate_token(token)
    if info is None:
        logger.info("Rejected authentication token", extra={"path": request.url.path})
        return None

    user = AuthUser(user_id=info.uid, is_admin=info.uid in settings.admin_user_ids)
    request.state.user = user
    set_log_context(user_id=user.user_id)
    return user


async def get_current_user(
    request: Request,
    client: Annotated[AuthClient, Depends(get_auth_client)],
) -> AuthUser:
    """Authenticated user, or 401 when no valid token was presented."""
    user = await _resolve_user(request, client)
    if user is None:
        raise NotAuthenticatedException()
    return user


async def get_optional_user(
    request: Request,
    client: Annotated[AuthClient, Depends(get_auth_client)],
) -> AuthUser | None:
    """Authenticated user, or None for anonymous and invalid tokens."""
    return await _resolve_user(request, client)


async def require_admin(user: Annotated[AuthUser, Depends(get_current_user)]) -> AuthUser:
    if not user.is_admin:
        raise ForbiddenException(
            detail="Administrator privileges required",
            type="admin-required",
            extra={"user_id": user.user_id},
        )
    return user


AuthUserDep = Annotated[AuthUser, Depends(get_current_user)]
OptionalAuthUser = Annotated[AuthUser | None, Depends(get_optional_user)]
AdminUserDep = Annotated[AuthUser, Depends(require_admin)]
