from __future__ import annotations

from campus_service.utils.retry.decorator import retry
from campus_service.utils.retry.exceptions import RetryError, RetryStatistics
from campus_service.utils.retry.strategies import RetryStrategy

__all__ = ["retry", "RetryError", "RetryStatistics", "RetryStrategy"]
