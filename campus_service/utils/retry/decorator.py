from __future__ import annotations

import asyncio
from functools import wraps
import logging
import time
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from campus_service.infra.metrics.tracking import (
    track_retry_attempt,
    track_retry_exhausted,
    track_retry_success,
)

from .exceptions import RetryError, RetryStatistics
from .strategies import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    jitter_range: tuple[float, float] = (0.5, 1.5),
    exceptions: tuple[type[Exception], ...] = (Exception,),
    retry_if: Callable[[Exception], bool] | None = None,
    operation: str | None = None,
    on_retry: Callable[[Exception, int], None] | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Retry an async callable with exponential backoff.

    Exceptions that are not retryable propagate unchanged. When every attempt
    failed with a retryable exception, RetryError is raised from the last one.

    Args:
        max_attempts: Total number of calls, the first one included.
        operation: Name used in logs and metrics (defaults to the function name).
    """
    strategy = RetryStrategy(
        max_attempts=max_attempts,
        initial_delay=initial_delay,
        max_delay=max_delay,
        exponential_base=exponential_base,
        jitter=jitter,
        jitter_range=jitter_range,
        exceptions=exceptions,
        retry_if=retry_if,
    )

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        name = operation or func.__name__

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            statistics = RetryStatistics(start_time=time.monotonic())

            for attempt in range(max_attempts):
                try:
                    result = await func(*args, **kwargs)
                    if statistics.attempts > 0:
                        track_retry_success(name, statistics.attempts + 1)
                    return result
                except Exception as e:
                    if not strategy.should_retry(e):
                        raise

                    if attempt >= max_attempts - 1:
                        statistics.end_time = time.monotonic()
                        track_retry_exhausted(name)
                        logger.error(
                            f"All retry attempts exhausted for {name}",
                            extra={
                                "operation": name,
                                "attempts": attempt + 1,
                                "last_exception": str(e),
                                "total_delay": statistics.total_delay,
                                "duration": statistics.duration,
                            },
                        )
                        raise RetryError(e, attempt + 1, statistics) from e

                    delay = strategy.calculate_delay(attempt)
                    statistics.attempts += 1
                    statistics.total_delay += delay
                    statistics.exceptions.append(type(e).__name__)

                    track_retry_attempt(name, attempt + 2)

                    logger.warning(
                        f"Retrying {name} after {delay:.3f}s (attempt {attempt + 1}/{max_attempts})",
                        extra={
                            "operation": name,
                            "attempt": attempt + 1,
                            "max_attempts": max_attempts,
                            "delay": delay,
                            "exception": type(e).__name__,
                        },
                    )

                    if on_retry:
                        on_retry(e, attempt + 1)

                    await asyncio.sleep(delay)

            msg = "Retry logic error: exhausted all attempts"
            raise RuntimeError(msg)

        return async_wrapper

    return decorator
