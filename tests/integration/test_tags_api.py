"""Integration tests for the tag collection endpoints."""
from __future__ import annotations

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

pytestmark = pytest.mark.integration


async def _add_tag(client: AsyncClient, prefix: str, headers: dict[str, str], payload: dict, collection: str = "tags"):
    response = await client.post(f"{prefix}/{collection}", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_add_and_get_tag(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    created = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload())

    assert created["createUserId"] == "alice"
    assert created["category"]["missionName"] == "問題回報"
    assert created["coordinates"] == {"latitude": 24.7869, "longitude": 120.9975}
    assert created["archived"] is False
    assert created["viewCount"] == 0
    assert len(created["geohash"]) == 9
    assert created["collection"] == "tags"

    response = await client.get(f"{api_prefix}/tags/{created['id']}")
    assert response.status_code == 200
    assert response.json()["locationName"] == "Library 2F restroom"


@pytest.mark.asyncio
async def test_add_tag_requires_authentication(client: AsyncClient, api_prefix, tag_payload) -> None:
    response = await client.post(f"{api_prefix}/tags", json=tag_payload())

    assert response.status_code == 401
    assert response.json()["type"] == "not-authenticated"


@pytest.mark.asyncio
async def test_validation_error_is_problem_document(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    payload = tag_payload(coordinates={"latitude": 123.0, "longitude": 0.0})

    response = await client.post(f"{api_prefix}/tags", json=payload, headers=auth_headers("alice"))

    assert response.status_code == 422
    body = response.json()
    assert body["type"] == "validation-error"
    assert body["status"] == 422
    assert any("latitude" in error["field"] for error in body["errors"])


@pytest.mark.asyncio
async def test_unknown_tag_is_404_problem(client: AsyncClient, api_prefix) -> None:
    response = await client.get(f"{api_prefix}/tags/{uuid4()}")

    assert response.status_code == 404
    body = response.json()
    assert body["type"] == "tag-not-found"
    assert body["status"] == 404


@pytest.mark.asyncio
async def test_listing_pages_with_cursor(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    headers = auth_headers("alice")
    created_ids = [
        (await _add_tag(client, api_prefix, headers, tag_payload(location_name=f"spot {i}")))["id"] for i in range(5)
    ]

    seen: list[str] = []
    cursor = ""
    pages = 0
    while True:
        response = await client.get(f"{api_prefix}/tags", params={"pageSize": 2, "cursor": cursor})
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"items", "cursor", "empty"}
        pages += 1
        if body["empty"]:
            assert body["items"] == []
            assert body["cursor"] == ""
            break
        assert body["cursor"]
        seen.extend(item["id"] for item in body["items"])
        cursor = body["cursor"]

    assert pages == 4
    assert sorted(seen) == sorted(created_ids)
    assert len(seen) == len(set(seen))


@pytest.mark.asyncio
async def test_stale_cursor_is_rejected(client: AsyncClient, api_prefix) -> None:
    response = await client.get(f"{api_prefix}/tags/users/alice", params={"cursor": str(uuid4())})

    assert response.status_code == 400
    assert response.json()["type"] == "stale-cursor"


@pytest.mark.asyncio
@pytest.mark.parametrize("cursor", ["not-a-cursor", f"99999999999999999999,{uuid4()}"])
async def test_malformed_cursor_starts_from_the_top(
    client: AsyncClient, api_prefix, auth_headers, tag_payload, cursor: str
) -> None:
    created = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload())

    response = await client.get(f"{api_prefix}/tags", params={"cursor": cursor})

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["items"]] == [created["id"]]


@pytest.mark.asyncio
async def test_only_creator_may_edit_or_delete(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    created = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload())
    url = f"{api_prefix}/tags/{created['id']}"

    patch = await client.patch(url, json={"locationName": "hacked"}, headers=auth_headers("mallory"))
    delete = await client.delete(url, headers=auth_headers("mallory"))

    assert patch.status_code == 403
    assert patch.json()["type"] == "not-tag-creator"
    assert delete.status_code == 403

    patch = await client.patch(url, json={"locationName": "Library 3F"}, headers=auth_headers("alice"))
    assert patch.status_code == 200
    assert patch.json()["locationName"] == "Library 3F"

    delete = await client.delete(url, headers=auth_headers("alice"))
    assert delete.status_code == 204
    assert (await client.get(url)).status_code == 404


@pytest.mark.asyncio
async def test_status_history(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    created = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload())
    url = f"{api_prefix}/tags/{created['id']}"

    appended = await client.post(f"{url}/statuses", json={"statusName": "處理中"}, headers=auth_headers("bob"))
    assert appended.status_code == 201
    assert appended.json()["numberOfUpVote"] == 0
    assert appended.json()["createUserId"] == "bob"

    latest = (await client.get(f"{url}/status")).json()
    history = (await client.get(f"{url}/statuses")).json()

    assert latest["statusName"] == "處理中"
    assert latest["hasUpVote"] is None
    assert [s["statusName"] for s in history["items"]] == ["處理中", "待處理"]


@pytest.mark.asyncio
async def test_view_counter(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    created = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload())
    url = f"{api_prefix}/tags/{created['id']}/view"

    await client.post(url)
    response = await client.post(url, headers=auth_headers("bob"))

    assert response.status_code == 200
    assert response.json() == {"tagId": created["id"], "viewCount": 2}


@pytest.mark.asyncio
async def test_votes_archive_issue_past_threshold(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    created = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload())
    url = f"{api_prefix}/tags/{created['id']}"

    counts = []
    for voter in ("u1", "u2", "u3"):
        response = await client.post(f"{url}/votes", json={"action": "UPVOTE"}, headers=auth_headers(voter))
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["hasVoted"] is True
        assert body["entityId"] == created["id"]
        counts.append(body["newCount"])

    assert counts == [1, 2, 3]
    assert (await client.get(url)).json()["archived"] is True
    listed = (await client.get(f"{api_prefix}/tags")).json()
    assert created["id"] not in {item["id"] for item in listed["items"]}

    latest = (await client.get(f"{url}/status", headers=auth_headers("u2"))).json()
    assert latest["hasUpVote"] is True
    assert latest["numberOfUpVote"] == 3


class _UnreachableTagRepository:
    async def get_or_raise(self, session, tag_id):
        raise OperationalError("SELECT tags", {}, ConnectionError("connection lost"))


@pytest.mark.asyncio
async def test_archival_failure_is_503_but_vote_is_kept(
    client: AsyncClient, api_prefix, auth_headers, tag_payload, monkeypatch
) -> None:
    created = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload())
    url = f"{api_prefix}/tags/{created['id']}"
    monkeypatch.setattr(
        "campus_service.features.tags.archival.get_tag_repository", lambda: _UnreachableTagRepository()
    )

    response = await client.post(f"{url}/votes", json={"action": "UPVOTE"}, headers=auth_headers("bob"))

    assert response.status_code == 503
    assert response.json()["type"] == "store-unavailable"
    assert response.headers["Retry-After"] == "1"

    latest = (await client.get(f"{url}/status", headers=auth_headers("bob"))).json()
    assert latest["numberOfUpVote"] == 1
    assert latest["hasUpVote"] is True
    again = await client.post(f"{url}/votes", json={"action": "UPVOTE"}, headers=auth_headers("bob"))
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_double_vote_and_cancel(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    created = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload())
    url = f"{api_prefix}/tags/{created['id']}/votes"
    headers = auth_headers("bob")

    assert (await client.post(url, json={"action": "UPVOTE"}, headers=headers)).status_code == 200
    again = await client.post(url, json={"action": "UPVOTE"}, headers=headers)
    cancel = await client.post(url, json={"action": "CANCEL_UPVOTE"}, headers=headers)
    cancel_again = await client.post(url, json={"action": "CANCEL_UPVOTE"}, headers=headers)

    assert again.status_code == 409
    assert again.json()["type"] == "invalid-vote-transition"
    assert cancel.status_code == 200
    assert cancel.json()["newCount"] == 0
    assert cancel.json()["hasVoted"] is False
    assert cancel_again.status_code == 409


@pytest.mark.asyncio
async def test_facility_tag_is_not_votable(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    created = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload(mission="設施回報"))

    response = await client.post(
        f"{api_prefix}/tags/{created['id']}/votes", json={"action": "UPVOTE"}, headers=auth_headers("bob")
    )

    assert response.status_code == 400
    assert response.json()["type"] == "status-not-votable"


@pytest.mark.asyncio
async def test_research_collection_is_separate(client: AsyncClient, api_prefix, auth_headers, tag_payload) -> None:
    research = await _add_tag(client, api_prefix, auth_headers("alice"), tag_payload(), collection="research/tags")
    url = f"{api_prefix}/research/tags/{research['id']}"

    status = await client.post(
        f"{url}/statuses",
        json={"statusName": "人多", "statusDescName": "long queue"},
        headers=auth_headers("bob"),
    )

    assert research["collection"] == "research"
    assert status.json()["description"] == "long queue"
    assert (await client.get(f"{api_prefix}/tags/{research['id']}")).status_code == 404
    assert (await client.get(f"{api_prefix}/tags")).json()["empty"] is True


@pytest.mark.asyncio
async def test_fixed_tags_listing(client: AsyncClient, api_prefix, session_factory) -> None:
    from campus_service.features.tags.models import FixedTag

    async with session_factory() as session:
        session.add_all(
            [FixedTag(location_name=f"Gate {i}", latitude=24.78, longitude=120.99 + i / 100) for i in range(3)]
        )
        await session.commit()

    first = (await client.get(f"{api_prefix}/fixed-tags", params={"pageSize": 2})).json()
    second = (await client.get(f"{api_prefix}/fixed-tags", params={"pageSize": 2, "cursor": first["cursor"]})).json()

    ids = [item["id"] for item in first["items"] + second["items"]]
    assert len(first["items"]) == 2
    assert len(second["items"]) == 1
    assert ids == sorted(ids)
    assert first["items"][0]["coordinates"]["latitude"] == 24.78


@pytest.mark.asyncio
async def test_fixed_tag_sub_location_statuses(client: AsyncClient, api_prefix, auth_headers, session_factory) -> None:
    from campus_service.features.tags.models import FixedTag, FixedTagSubLocation

    async with session_factory() as session:
        fixed_tag = FixedTag(location_name="Student Center", latitude=24.7867, longitude=120.9973)
        session.add(fixed_tag)
        await session.flush()
        store = FixedTagSubLocation(fixed_tag_id=fixed_tag.id, type="restaurant-store", name="Noodles", floor="B1")
        session.add(store)
        await session.commit()
        fixed_tag_id, store_id = str(fixed_tag.id), str(store.id)
    url = f"{api_prefix}/fixed-tags/sub-locations/{store_id}"

    assert (await client.get(f"{api_prefix}/fixed-tags/{fixed_tag_id}")).json()["locationName"] == "Student Center"
    missing = await client.get(f"{url}/status")
    assert missing.status_code == 404
    assert missing.json()["type"] == "sublocationstatus-not-found"

    unauthenticated = await client.post(f"{url}/statuses", json={"statusName": "有點擁擠"})
    assert unauthenticated.status_code == 401

    for name in ("有點擁擠", "非常擁擠"):
        response = await client.post(f"{url}/statuses", json={"statusName": name}, headers=auth_headers("alice"))
        assert response.status_code == 201, response.text
        assert response.json()["createUserId"] == "alice"

    listed = (await client.get(f"{api_prefix}/fixed-tags/{fixed_tag_id}/sub-locations")).json()
    history = (await client.get(f"{url}/statuses", params={"pageSize": 1})).json()

    assert [(s["id"], s["type"], s["name"]) for s in listed] == [(store_id, "restaurant-store", "Noodles")]
    assert listed[0]["status"]["statusName"] == "非常擁擠"
    assert (await client.get(f"{url}/status")).json()["statusName"] == "非常擁擠"
    assert [s["statusName"] for s in history["items"]] == ["非常擁擠"]
    assert history["cursor"]


@pytest.mark.asyncio
async def test_unknown_sub_location_is_404(client: AsyncClient, api_prefix) -> None:
    response = await client.get(f"{api_prefix}/fixed-tags/sub-locations/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["type"] == "fixedtagsublocation-not-found"
