"""Retrying transactional unit of work.

``run_in_transaction`` opens a fresh session, runs ``work`` inside
``session.begin()`` and commits. Optimistic-concurrency failures (a versioned
row changed underneath us, or a unique key raced) roll the attempt back and
re-run ``work`` from scratch with a bounded attempt count. ``work`` must
therefore be safe to re-execute: read everything it needs inside the session
it is given.

Example:
    async def _apply(session: AsyncSession) -> int:
        status = await session.get(TagStatus, status_id)
        status.number_of_up_vote += 1
        return status.number_of_up_vote

    count = await run_in_transaction(
        session_factory, _apply, operation="vote", max_attempts=5
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from campus_service.core.exceptions import (
    StoreUnavailableException,
    TransactionConflictException,
)
from campus_service.utils.retry import RetryError, retry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

R = TypeVar("R")

CONFLICT_ERRORS: tuple[type[Exception], ...] = (StaleDataError, IntegrityError)


async def run_in_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    work: Callable[[AsyncSession], Awaitable[R]],
    *,
    operation: str,
    max_attempts: int = 5,
    initial_delay: float = 0.01,
    max_delay: float = 0.25,
) -> R:
    """Run ``work`` atomically, retrying on write conflicts.

    Args:
        session_factory: Factory producing a new AsyncSession per attempt.
        work: Coroutine function receiving the session; its return value is
            returned once the transaction commits.
        operation: Name used in logs, metrics and the conflict error.
        max_attempts: Total attempts before giving up.

    Returns:
        Whatever ``work`` returned on the committed attempt.

    Raises:
        TransactionConflictException: Every attempt hit a write conflict.
        StoreUnavailableException: The database could not be reached.
        Exception: Anything else raised by ``work`` propagates unchanged,
            after the attempt has been rolled back.
    """

    @retry(
        max_attempts=max_attempts,
        initial_delay=initial_delay,
        max_delay=max_delay,
        exceptions=CONFLICT_ERRORS,
        operation=operation,
    )
    async def _attempt() -> R:
        async with session_factory() as session, session.begin():
            return await work(session)

    try:
        return await _attempt()
    except RetryError as e:
        raise TransactionConflictException(operation, e.attempts) from e
    except (OperationalError, InterfaceError) as e:
        logger.warning(
            "Database unavailable during transaction",
            extra={"operation": operation, "error": type(e.orig).__name__ if e.orig else str(e)},
        )
        raise StoreUnavailableException() from e
