"""Integration tests for liveness and readiness checks and the metrics endpoint."""
from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_liveness(client: AsyncClient, api_prefix) -> None:
    response = await client.get(f"{api_prefix}/health/live")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["service"] == "campus-service"


@pytest.mark.asyncio
async def test_readiness_checks_database(client: AsyncClient, api_prefix) -> None:
    response = await client.get(f"{api_prefix}/health/ready")

    assert response.status_code == 200
    assert response.json() == {"ready": True, "checks": {"database": True}}


@pytest.mark.asyncio
async def test_metrics_exposes_request_counters(client: AsyncClient, api_prefix) -> None:
    await client.get(f"{api_prefix}/health/live")

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "http_requests_total" in response.text
