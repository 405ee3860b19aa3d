"""Integration tests for the current-user endpoints."""
from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_profile_created_on_first_access(client: AsyncClient, api_prefix, auth_headers) -> None:
    response = await client.get(f"{api_prefix}/users/me", headers=auth_headers("alice"))

    assert response.status_code == 200
    assert response.json() == {"userId": "alice", "hasReadGuide": False, "addTagCount": 0}


@pytest.mark.asyncio
async def test_profile_requires_authentication(client: AsyncClient, api_prefix) -> None:
    response = await client.get(f"{api_prefix}/users/me")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_read_guide(client: AsyncClient, api_prefix, auth_headers) -> None:
    headers = auth_headers("alice")

    response = await client.post(f"{api_prefix}/users/me/read-guide", headers=headers)
    profile = await client.get(f"{api_prefix}/users/me", headers=headers)

    assert response.status_code == 200
    assert response.json()["hasReadGuide"] is True
    assert profile.json()["hasReadGuide"] is True


@pytest.mark.asyncio
async def test_add_tag_count_follows_add_and_delete(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    headers = auth_headers("alice")
    first = (await client.post(f"{api_prefix}/tags", json=tag_payload(), headers=headers)).json()
    await client.post(f"{api_prefix}/tags", json=tag_payload(location_name="Gym"), headers=headers)

    assert (await client.get(f"{api_prefix}/users/me", headers=headers)).json()["addTagCount"] == 2

    await client.delete(f"{api_prefix}/tags/{first['id']}", headers=headers)

    assert (await client.get(f"{api_prefix}/users/me", headers=headers)).json()["addTagCount"] == 1
