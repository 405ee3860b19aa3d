"""Database engine/session infrastructure."""

from campus_service.infra.database.schema import create_schema, drop_schema, import_models
from campus_service.infra.database.session import (
    build_engine,
    build_session_factory,
    dispose_engine,
    get_engine,
    get_session_factory,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "create_schema",
    "dispose_engine",
    "drop_schema",
    "get_engine",
    "get_session_factory",
    "import_models",
]
