"""Authentication client dependency factory.

``AUTH_MOCK_MODE=true`` selects MockAuthClient (token used as uid); anything
else uses HttpAuthClient against ``AUTH_SERVICE_URL``.

Pattern: factory with @lru_cache singleton, overridable in tests:
    app.dependency_overrides[get_auth_client] = lambda: MockAuthClient()
"""

from __future__ import annotations

from functools import lru_cache
import logging
from typing import Annotated

from fastapi import Depends

from campus_service.core.settings import get_app_settings, get_auth_settings
from campus_service.infra.auth import AuthClient, HttpAuthClient, MockAuthClient

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_auth_client() -> AuthClient:
    settings = get_auth_settings()
    if settings.mock_mode:
        if get_app_settings().environment == "production":
            logger.error("AUTH_MOCK_MODE is enabled in production")
        else:
            logger.warning("MOCK MODE: tokens are accepted as user ids")
        return MockAuthClient()
    return HttpAuthClient(settings)


AuthClientDep = Annotated[AuthClient, Depends(get_auth_client)]
