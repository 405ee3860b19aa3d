"""Global exception handlers for FastAPI application.

Every error leaves the API as an RFC 7807 problem document:

    {"type": "invalid-vote-transition", "title": "Conflict", "status": 409,
     "detail": "...", "instance": "...", "request_id": "...", ...extra}

Retryable failures (503) carry a ``Retry-After`` header.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from campus_service.core.database import NotFoundError
from campus_service.core.exceptions import AppException
from campus_service.core.schemas.problem_details import (
    ProblemDetails,
    ValidationErrorItem,
    ValidationProblemDetails,
)
from campus_service.infra.metrics import tracking

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _create_problem_detail(
    status_code: int,
    detail: str,
    type_: str = "about:blank",
    title: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create RFC 7807 Problem Details response body.

    Args:
        status_code: HTTP status code.
        detail: Human-readable error description.
        type_: Error type identifier.
        title: Short human-readable summary.
        instance: URI identifying this occurrence.
        extra: Additional context information.
    """
    problem = ProblemDetails(
        type=type_,
        title=title or AppException._default_title(status_code),
        status=status_code,
        detail=detail,
        instance=instance,
    )
    response_data = problem.model_dump(exclude_none=True)
    if extra:
        response_data.update(extra)
    return response_data


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException instances into problem responses."""
    request_id = _get_request_id(request)

    tracking.track_error(
        error_type=exc.type,
        endpoint=request.url.path,
        status_code=exc.status_code,
        extra={"detail": exc.detail},
    )

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Application exception occurred",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    problem_data = _create_problem_detail(
        status_code=exc.status_code,
        detail=exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance or str(request.url),
        extra=exc.extra,
    )
    if request_id:
        problem_data["request_id"] = request_id

    headers = {}
    if exc.retryable:
        headers["Retry-After"] = str(exc.extra.get("retry_after", 1))

    return JSONResponse(
        status_code=exc.status_code,
        content=problem_data,
        headers=headers or None,
    )


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Map repository NotFoundError to 404."""
    request_id = _get_request_id(request)
    tracking.track_error(error_type="not-found", endpoint=request.url.path, status_code=404)
    logger.info(
        "Entity not found",
        extra={"request_id": request_id, "path": request.url.path, "model": exc.model_name},
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=exc.message,
        type_=f"{exc.model_name.lower()}-not-found",
        title="Not Found",
        instance=str(request.url),
        extra={key: str(value) for key, value in exc.identifier.items()},
    )
    if request_id:
        problem_data["request_id"] = request_id
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=problem_data)


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """Connection-level database failures escaping a service become 503."""
    request_id = _get_request_id(request)
    tracking.track_error(error_type="store-unavailable", endpoint=request.url.path, status_code=503)
    logger.error(
        "Database unavailable",
        extra={"request_id": request_id, "path": request.url.path, "exception_type": type(exc).__name__},
    )
    problem_data = _create_problem_detail(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="The data store is temporarily unavailable",
        type_="store-unavailable",
        instance=str(request.url),
    )
    if request_id:
        problem_data["request_id"] = request_id
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=problem_data,
        headers={"Retry-After": "1"},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert request validation errors into problem responses with field errors."""
    request_id = _get_request_id(request)

    validation_errors = []
    for error in exc.errors():
        field_path = ".".join(str(loc) for loc in error["loc"])
        validation_errors.append(
            ValidationErrorItem(
                field=field_path,
                message=error["msg"],
                type=error["type"],
            )
        )
        tracking.track_validation_error(request.url.path, field_path)

    logger.warning(
        "Request validation failed",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
        },
    )

    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(validation_errors)} field(s)",
        instance=str(request.url),
        errors=validation_errors,
    )
    response_data = problem.model_dump(exclude_none=True)
    if request_id:
        response_data["request_id"] = request_id

    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=response_data)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback, return a generic 500."""
    request_id = _get_request_id(request)

    tracking.track_unhandled_exception(
        exception_type=type(exc).__name__,
        endpoint=request.url.path,
    )
    logger.error(
        "Unexpected exception occurred",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=exc,
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        type_="internal-error",
        title="Internal Server Error",
        instance=str(request.url),
    )
    if request_id:
        problem_data["request_id"] = request_id

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=problem_data)


def configure_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(OperationalError, database_unavailable_handler)
    app.add_exception_handler(InterfaceError, database_unavailable_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers configured")
