"""Health check API endpoints.

- Liveness probes: /health/live - Is the process alive?
- Readiness probes: /health/ready - Can the service reach its database?
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# Import dependencies at runtime so FastAPI treats them as Depends()
from campus_service.core.dependencies.database import SessionFactoryDep  # noqa: TC001
from campus_service.core.settings import get_app_settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


class LivenessResponse(BaseModel):
    status: Literal["ok"] = "ok"
    service: str
    version: str


class ReadinessResponse(BaseModel):
    ready: bool
    checks: dict[str, bool]


@router.get("/live", response_model=LivenessResponse, summary="Liveness probe")
async def liveness_check() -> LivenessResponse:
    settings = get_app_settings()
    return LivenessResponse(service=settings.service_name, version=settings.version)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={503: {"model": ReadinessResponse, "description": "Database unreachable"}},
)
async def readiness_check(session_factory: SessionFactoryDep) -> JSONResponse:
    """Run ``SELECT 1``; 503 while the database is unreachable."""
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError:
        logger.warning("Readiness check failed: database unreachable", exc_info=True)
        database_ok = False

    body = ReadinessResponse(ready=database_ok, checks={"database": database_ok})
    return JSONResponse(
        status_code=status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )
