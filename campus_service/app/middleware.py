"""Middleware configuration for FastAPI application."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING
import uuid

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from campus_service.infra.logging import clear_log_context, set_log_context
from campus_service.infra.metrics.prometheus import (
    http_request_duration_seconds,
    http_requests_total,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import FastAPI, Request, Response

    from campus_service.core.settings import AppSettings

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to the request, the log context and the response."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        set_log_context(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            clear_log_context()
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request counts and durations per route template."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        method = request.method
        start_time = time.perf_counter()
        status_code = 500  # Default to error in case of exception

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Process-Time"] = str(time.perf_counter() - start_time)
            return response
        finally:
            # Route template ("/api/v1/tags/{tag_id}") keeps label cardinality low
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - start_time
            )
            http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()


def configure_middleware(app: FastAPI, app_settings: AppSettings) -> None:
    """Configure middleware for the application.

    Args:
        app: FastAPI application instance.
        app_settings: Application settings (CORS, metrics).
    """
    logger.info("Configuring CORS", extra={"origins": app_settings.cors_origins})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=app_settings.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )

    if app_settings.metrics_enabled:
        app.add_middleware(MetricsMiddleware)

    # Added last so it runs first and the request ID is in every log line
    app.add_middleware(RequestIDMiddleware)
