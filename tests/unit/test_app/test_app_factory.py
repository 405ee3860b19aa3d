"""Tests for the application factory, middleware and error handlers."""
from __future__ import annotations

from uuid import uuid4

from httpx import ASGITransport, AsyncClient
import pytest
from starlette.routing import NoMatchFound

from campus_service.app.main import create_app
from campus_service.core.settings import clear_all_caches
from campus_service.infra.database import drop_schema


def _api_paths(app) -> set[str]:
    return set(app.openapi()["paths"])


def _has_route(app, name: str) -> bool:
    try:
        app.url_path_for(name)
    except NoMatchFound:
        return False
    return True


@pytest.mark.unit
class TestCreateApp:
    def test_routes_are_mounted_under_prefix(self, session_factory, threshold):
        app = create_app(session_factory, threshold=threshold)
        paths = _api_paths(app)

        assert "/api/v1/tags" in paths
        assert "/api/v1/research/tags" in paths
        assert "/api/v1/fixed-tags" in paths
        assert "/api/v1/fixed-tags/sub-locations/{sub_location_id}/statuses" in paths
        assert "/api/v1/settings/archived-threshold" in paths
        assert "/api/v1/users/me" in paths
        assert app.url_path_for("tag_changes") == "/api/v1/realtime/tags"
        assert app.url_path_for("metrics") == "/metrics"

    def test_optional_surfaces_can_be_disabled(self, monkeypatch, session_factory, threshold):
        monkeypatch.setenv("APP_METRICS_ENABLED", "false")
        monkeypatch.setenv("WS_ENABLED", "false")
        clear_all_caches()

        app = create_app(session_factory, threshold=threshold)

        assert not _has_route(app, "metrics")
        assert not _has_route(app, "tag_changes")
        assert "/api/v1/tags" in _api_paths(app)

    def test_realtime_subscribes_to_dispatcher(self, session_factory, threshold):
        app = create_app(session_factory, threshold=threshold)

        assert app.state.dispatcher.subscriber_names == ["realtime"]
        assert app.state.threshold is threshold
        assert app.state.session_factory is session_factory


@pytest.mark.unit
class TestMiddlewareAndErrors:
    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client: AsyncClient, api_prefix):
        response = await client.get(f"{api_prefix}/health/live", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, client: AsyncClient, api_prefix):
        response = await client.get(f"{api_prefix}/health/live")

        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_problem_document_carries_request_id(self, client: AsyncClient, api_prefix):
        response = await client.get(f"{api_prefix}/tags/{uuid4()}", headers={"X-Request-ID": "req-7"})

        body = response.json()
        assert body["request_id"] == "req-7"
        assert body["title"] == "Not Found"
        assert body["instance"].endswith(response.request.url.path)

    @pytest.mark.asyncio
    async def test_malformed_identifier_is_validation_error(self, client: AsyncClient, api_prefix):
        response = await client.get(f"{api_prefix}/tags/not-a-uuid")

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "path.tag_id"

    @pytest.mark.asyncio
    async def test_store_unavailable_is_503_with_retry_after(self, session_factory, threshold, db_engine):
        app = create_app(session_factory, threshold=threshold)
        # Every query now fails in the driver
        await drop_schema(db_engine)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/api/v1/tags")

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "1"
        assert response.json()["type"] == "store-unavailable"
