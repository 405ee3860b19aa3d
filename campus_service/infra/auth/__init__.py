"""Identity service clients."""

from campus_service.infra.auth.http_client import HttpAuthClient
from campus_service.infra.auth.models import AuthUser, TokenInfo
from campus_service.infra.auth.protocols import AuthClient
from campus_service.infra.auth.testing import MockAuthClient

__all__ = [
    "AuthClient",
    "AuthUser",
    "HttpAuthClient",
    "MockAuthClient",
    "TokenInfo",
]
