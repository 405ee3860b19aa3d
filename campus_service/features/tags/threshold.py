"""Archived threshold providers.

The archival policy reads the threshold through ``current()`` without
touching the database. ``ArchivedThresholdProvider`` keeps that value in
memory and refreshes it from the ``tag_settings`` row on a fixed interval,
so another process changing the row is observed within
``refresh_seconds``. Changes made through ``set()`` on this process are
visible immediately.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Protocol

from sqlalchemy.exc import SQLAlchemyError

from campus_service.features.tags.repository import get_setting_repository
from campus_service.infra.metrics.tracking import set_archived_threshold

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

ARCHIVED_THRESHOLD_KEY = "archived_threshold"


class ThresholdProvider(Protocol):
    """Source of the process-wide archived threshold."""

    def current(self) -> int: ...


class StaticThresholdProvider:
    """Fixed threshold, for tests and single-shot tools."""

    def __init__(self, value: int) -> None:
        self.value = value

    def current(self) -> int:
        return self.value


class ArchivedThresholdProvider:
    """Database-backed threshold with a polling watcher.

    Attributes:
        refresh_seconds: Upper bound on how stale ``current()`` may be.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        default: int,
        refresh_seconds: float = 5.0,
    ) -> None:
        self.session_factory = session_factory
        self.refresh_seconds = refresh_seconds
        self._value = default
        self._subscribers: list[Callable[[int], None]] = []
        self._running = False
        self._task: asyncio.Task[None] | None = None
        set_archived_threshold(default)

    def current(self) -> int:
        return self._value

    def subscribe(self, callback: Callable[[int], None]) -> Callable[[], None]:
        """Call ``callback(new_value)`` whenever the threshold changes."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._subscribers.remove(callback)

        return _unsubscribe

    async def refresh(self) -> int:
        """Re-read the settings row; keeps the current value when the row is absent."""
        async with self.session_factory() as session:
            stored = await get_setting_repository().read(session, ARCHIVED_THRESHOLD_KEY)
        if stored is not None:
            self._update(stored)
        return self._value

    async def set(self, value: int) -> int:
        """Persist a new threshold and apply it locally."""
        if value < 0:
            raise ValueError("archived threshold must be >= 0")
        async with self.session_factory() as session, session.begin():
            await get_setting_repository().write(session, ARCHIVED_THRESHOLD_KEY, value)
        self._update(value)
        logger.info("Archived threshold set", extra={"archived_threshold": value})
        return value

    def _update(self, value: int) -> None:
        if value == self._value:
            return
        previous, self._value = self._value, value
        set_archived_threshold(value)
        logger.info(
            "Archived threshold changed",
            extra={"previous": previous, "archived_threshold": value},
        )
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("Threshold subscriber failed")

    async def start(self) -> None:
        """Load the stored value and start the background watcher."""
        if self._running:
            logger.warning("Threshold watcher already running")
            return
        try:
            await self.refresh()
        except SQLAlchemyError:
            logger.exception("Initial threshold load failed, using default")
        self._running = True
        self._task = asyncio.create_task(self._watch())
        logger.info(
            "Threshold watcher started",
            extra={"refresh_seconds": self.refresh_seconds, "archived_threshold": self._value},
        )

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("Threshold watcher stopped")

    async def _watch(self) -> None:
        while self._running:
            await asyncio.sleep(self.refresh_seconds)
            try:
                await self.refresh()
            except SQLAlchemyError:
                logger.warning("Threshold refresh failed, keeping last value", exc_info=True)
