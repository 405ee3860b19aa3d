"""Tests for the identity service HTTP client."""
from __future__ import annotations

import httpx
import pytest

from campus_service.core.exceptions import ServiceUnavailableException
from campus_service.core.settings import AuthSettings
from campus_service.infra.auth import AuthClient, HttpAuthClient, MockAuthClient


def _client(handler) -> HttpAuthClient:
    settings = AuthSettings(service_url="https://auth.campus.test", mock_mode=False)
    return HttpAuthClient(settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_valid_token_resolves_uid() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        return httpx.Response(200, json={"uid": "alice", "email": "alice@campus.test"})

    client = _client(handler)
    try:
        info = await client.validate_token("tok-123")
    finally:
        await client.aclose()

    assert info is not None
    assert info.uid == "alice"
    assert requested == ["/token/tok-123"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403, 404])
async def test_rejected_token_returns_none(status_code: int) -> None:
    client = _client(lambda request: httpx.Response(status_code))

    assert await client.validate_token("expired") is None


@pytest.mark.asyncio
async def test_server_error_is_unavailable() -> None:
    client = _client(lambda request: httpx.Response(500))

    with pytest.raises(ServiceUnavailableException) as exc_info:
        await client.validate_token("tok")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_transport_error_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ServiceUnavailableException):
        await _client(handler).validate_token("tok")


@pytest.mark.asyncio
async def test_unexpected_payload_is_unavailable() -> None:
    client = _client(lambda request: httpx.Response(200, json={"user": "alice"}))

    with pytest.raises(ServiceUnavailableException):
        await client.validate_token("tok")


@pytest.mark.asyncio
async def test_unconfigured_client_is_unavailable() -> None:
    client = HttpAuthClient(AuthSettings(service_url=None, mock_mode=False))

    assert not client.is_configured
    with pytest.raises(ServiceUnavailableException):
        await client.validate_token("tok")


@pytest.mark.asyncio
async def test_mock_client_uses_token_as_uid() -> None:
    client = MockAuthClient(tokens={"alice-token": "alice"})

    assert isinstance(client, AuthClient)
    assert (await client.validate_token("alice-token")).uid == "alice"
    assert (await client.validate_token("bob")).uid == "bob"
    assert await client.validate_token("") is None
    assert client.calls == ["alice-token", "bob", ""]


@pytest.mark.asyncio
async def test_strict_mock_client_rejects_unknown_tokens() -> None:
    client = MockAuthClient(tokens={"alice-token": "alice"}, accept_any=False)

    assert await client.validate_token("bob") is None


@pytest.mark.asyncio
async def test_strict_mock_client_register_and_revoke() -> None:
    client = MockAuthClient(accept_any=False)

    client.register_token("carol-token", "carol")
    assert (await client.validate_token("carol-token")).uid == "carol"

    client.revoke_token("carol-token")
    client.revoke_token("never-registered")
    assert await client.validate_token("carol-token") is None
