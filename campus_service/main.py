"""Main entry point for campus-service.

``python -m campus_service.main`` serves the API; the ``campus-service``
console script exposes the full CLI (``campus-service serve``).
"""

from __future__ import annotations


def run_fastapi_server() -> None:
    """Run the FastAPI application server with uvicorn."""
    import uvicorn

    from campus_service.core.settings import get_app_settings, get_logging_settings

    settings = get_app_settings()
    log_settings = get_logging_settings()

    uvicorn.run(
        "campus_service.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        access_log=settings.debug,
        log_level=log_settings.level.lower(),
    )


if __name__ == "__main__":
    run_fastapi_server()
