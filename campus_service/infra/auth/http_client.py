"""HTTP client for the identity service.

Tokens are resolved with ``GET {service_url}/token/{token}``; a 200 answer
carries ``{"uid": "..."}``, 401/403/404 mean the token is not valid.

Usage:
    client = HttpAuthClient(get_auth_settings())
    info = await client.validate_token(token)
    if info is None:
        raise NotAuthenticatedException()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from campus_service.core.exceptions import ServiceUnavailableException
from campus_service.infra.auth.models import TokenInfo
from campus_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from campus_service.core.settings import AuthSettings

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)

_INVALID_TOKEN_STATUSES = frozenset({401, 403, 404})


class HttpAuthClient:
    """Identity service client backed by a shared ``httpx.AsyncClient``.

    The underlying client is created on first use and closed by ``aclose()``
    (called from the application lifespan).
    """

    def __init__(self, settings: AuthSettings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return self.settings.service_url is not None

    @property
    def mode(self) -> str:
        return "external"

    @property
    def base_url(self) -> str:
        return str(self.settings.service_url).rstrip("/") if self.settings.service_url else ""

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.settings.request_timeout,
                verify=self.settings.verify_ssl,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def validate_token(self, token: str) -> TokenInfo | None:
        if not self.is_configured:
            logger.error("Identity service URL is not configured (AUTH_SERVICE_URL)")
            raise ServiceUnavailableException("Authentication service is not configured")

        path = self.settings.token_validation_endpoint.format(token=token)
        try:
            response = await self._get_client().get(path)
        except httpx.HTTPError as e:
            logger.warning(
                "Identity service request failed",
                extra={"error": type(e).__name__, "base_url": self.base_url},
            )
            raise ServiceUnavailableException("Authentication service unavailable") from e

        lazy_logger.debug(lambda: f"auth.validate_token -> {response.status_code}")

        if response.status_code in _INVALID_TOKEN_STATUSES:
            return None
        if response.status_code >= 400:
            logger.warning(
                "Identity service returned an error",
                extra={"status_code": response.status_code},
            )
            raise ServiceUnavailableException("Authentication service unavailable")

        try:
            return TokenInfo.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Identity service returned an unexpected payload")
            raise ServiceUnavailableException("Authentication service returned an invalid response") from e
