"""Prometheus metrics endpoint.

    GET /metrics - Prometheus scrape endpoint (text exposition format)

Serves the application registry only: HTTP request metrics, vote and
archival counters, pagination and cursor metrics, event dispatch counters
and the current archived threshold.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from campus_service.infra.metrics.prometheus import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    data = generate_latest(REGISTRY)
    return Response(
        content=data,
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
