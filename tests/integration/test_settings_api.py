"""Integration tests for the archived threshold admin endpoints."""
from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_read_threshold(client: AsyncClient, api_prefix) -> None:
    response = await client.get(f"{api_prefix}/settings/archived-threshold")

    assert response.status_code == 200
    assert response.json() == {"archivedThreshold": 2}


@pytest.mark.asyncio
async def test_admin_changes_threshold(client: AsyncClient, api_prefix, auth_headers, threshold) -> None:
    response = await client.put(
        f"{api_prefix}/settings/archived-threshold",
        json={"archivedThreshold": 5},
        headers=auth_headers("admin"),
    )

    assert response.status_code == 200
    assert response.json() == {"archivedThreshold": 5}
    assert threshold.current() == 5
    assert (await client.get(f"{api_prefix}/settings/archived-threshold")).json()["archivedThreshold"] == 5


@pytest.mark.asyncio
async def test_non_admin_is_forbidden(client: AsyncClient, api_prefix, auth_headers, threshold) -> None:
    response = await client.put(
        f"{api_prefix}/settings/archived-threshold",
        json={"archivedThreshold": 0},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 403
    assert response.json()["type"] == "admin-required"
    assert threshold.current() == 2


@pytest.mark.asyncio
async def test_negative_threshold_is_invalid(client: AsyncClient, api_prefix, auth_headers) -> None:
    response = await client.put(
        f"{api_prefix}/settings/archived-threshold",
        json={"archivedThreshold": -1},
        headers=auth_headers("admin"),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_raised_threshold_applies_to_next_vote(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    await client.put(
        f"{api_prefix}/settings/archived-threshold",
        json={"archivedThreshold": 10},
        headers=auth_headers("admin"),
    )
    created = (await client.post(f"{api_prefix}/tags", json=tag_payload(), headers=auth_headers("alice"))).json()

    for voter in ("u1", "u2", "u3"):
        await client.post(
            f"{api_prefix}/tags/{created['id']}/votes", json={"action": "UPVOTE"}, headers=auth_headers(voter)
        )

    assert (await client.get(f"{api_prefix}/tags/{created['id']}")).json()["archived"] is False
