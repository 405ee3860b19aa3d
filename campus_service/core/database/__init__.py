"""Core database package: declarative base, mixins, repository and transactions."""

from campus_service.core.database.base import (
    Base,
    CreatedAtMixin,
    UUIDPKMixin,
    from_epoch_millis,
    to_epoch_millis,
    utcnow_millis,
)
from campus_service.core.database.exceptions import NotFoundError, RepositoryError
from campus_service.core.database.repository import BaseRepository
from campus_service.core.database.transaction import run_in_transaction

__all__ = [
    "Base",
    "BaseRepository",
    "CreatedAtMixin",
    "NotFoundError",
    "RepositoryError",
    "UUIDPKMixin",
    "from_epoch_millis",
    "run_in_transaction",
    "to_epoch_millis",
    "utcnow_millis",
]
