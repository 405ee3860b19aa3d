"""Helper functions for tracking business and operational metrics."""

from __future__ import annotations

import logging
from typing import Any

from campus_service.infra.metrics import business

logger = logging.getLogger(__name__)


# ============================================================================
# Error Tracking
# ============================================================================


def track_error(
    error_type: str,
    endpoint: str,
    status_code: int,
    extra: dict[str, Any] | None = None,
) -> None:
    """Track an error occurrence.

    Args:
        error_type: Type of error (e.g., 'stale-cursor', 'not-found')
        endpoint: API endpoint where error occurred
        status_code: HTTP status code
        extra: Additional context for logging
    """
    business.errors_total.labels(
        error_type=error_type,
        endpoint=endpoint,
        status_code=str(status_code),
    ).inc()

    logger.debug(
        f"Tracked error: {error_type}",
        extra={"endpoint": endpoint, "status_code": status_code, **(extra or {})},
    )


def track_validation_error(endpoint: str, field: str) -> None:
    """Track a validation error for a specific field.

    Example:
            track_validation_error("/api/v1/tags", "body.coordinates.latitude")
    """
    business.validation_errors_total.labels(endpoint=endpoint, field=field).inc()


def track_unhandled_exception(exception_type: str, endpoint: str) -> None:
    """Track an unhandled exception."""
    business.exceptions_unhandled_total.labels(
        exception_type=exception_type,
        endpoint=endpoint,
    ).inc()


# ============================================================================
# Voting / Archival Tracking
# ============================================================================


def track_vote(collection: str, action: str, outcome: str) -> None:
    """Track a vote ledger call.

    Example:
            track_vote("tags", "UPVOTE", "applied")
    """
    business.votes_total.labels(collection=collection, action=action, outcome=outcome).inc()


def track_vote_duration(collection: str, seconds: float) -> None:
    """Record the wall time of a vote transaction, retries included."""
    business.vote_transaction_duration_seconds.labels(collection=collection).observe(seconds)


def track_archived(collection: str) -> None:
    """Track an archived transition."""
    business.archived_total.labels(collection=collection).inc()


def set_archived_threshold(value: int) -> None:
    """Publish the threshold currently observed by this process."""
    business.archived_threshold.set(value)


# ============================================================================
# Pagination Tracking
# ============================================================================


def track_page(listing: str, empty: bool) -> None:
    """Track a served page."""
    business.pages_fetched_total.labels(listing=listing, empty=str(empty).lower()).inc()


def track_stale_cursor(listing: str, policy: str) -> None:
    """Track an identifier cursor that could not be resolved."""
    business.stale_cursors_total.labels(listing=listing, policy=policy).inc()


# ============================================================================
# Event Tracking
# ============================================================================


def track_event_dispatched(event_type: str) -> None:
    business.events_dispatched_total.labels(event_type=event_type).inc()


def track_subscriber_failure(subscriber: str) -> None:
    business.event_subscriber_failures_total.labels(subscriber=subscriber).inc()


# ============================================================================
# Retry Tracking
# ============================================================================


def track_retry_attempt(operation: str, attempt_number: int) -> None:
    """Track a retry attempt.

    Args:
        operation: Name of the operation being retried
        attempt_number: Current attempt number (1-indexed)
    """
    business.retry_attempts_total.labels(
        operation=operation,
        attempt_number=str(attempt_number),
    ).inc()


def track_retry_exhausted(operation: str) -> None:
    """Track when all retry attempts are exhausted."""
    business.retry_exhausted_total.labels(operation=operation).inc()


def track_retry_success(operation: str, attempts_needed: int) -> None:
    """Track successful operation after retries.

    Args:
        operation: Name of the operation
        attempts_needed: Number of attempts needed to succeed
    """
    business.retry_success_after_failure_total.labels(
        operation=operation,
        attempts_needed=str(attempts_needed),
    ).inc()
