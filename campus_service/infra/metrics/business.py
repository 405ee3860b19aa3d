"""Domain metrics for tagging, voting and archival."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

from campus_service.infra.metrics.prometheus import DEFAULT_LATENCY_BUCKETS, REGISTRY

# ============================================================================
# Error Metrics
# ============================================================================

errors_total = Counter(
    "errors_total",
    "Total number of errors by type and endpoint",
    ["error_type", "endpoint", "status_code"],
    registry=REGISTRY,
)

exceptions_unhandled_total = Counter(
    "exceptions_unhandled_total",
    "Total number of unhandled exceptions",
    ["exception_type", "endpoint"],
    registry=REGISTRY,
)

validation_errors_total = Counter(
    "validation_errors_total",
    "Total number of validation errors",
    ["endpoint", "field"],
    registry=REGISTRY,
)

# ============================================================================
# Voting and Archival
# ============================================================================

votes_total = Counter(
    "tag_votes_total",
    "Vote ledger operations by action and outcome",
    ["collection", "action", "outcome"],  # outcome: applied, invalid_transition, not_votable, conflict
    registry=REGISTRY,
)

vote_transaction_duration_seconds = Histogram(
    "tag_vote_transaction_duration_seconds",
    "Duration of vote transactions including retries",
    ["collection"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

archived_total = Counter(
    "tags_archived_total",
    "Tags transitioned to archived by the archival policy",
    ["collection"],
    registry=REGISTRY,
)

archived_threshold = Gauge(
    "tags_archived_threshold",
    "Currently observed archived threshold",
    registry=REGISTRY,
)

# ============================================================================
# Pagination
# ============================================================================

pages_fetched_total = Counter(
    "pages_fetched_total",
    "Pages served by the page fetcher",
    ["listing", "empty"],
    registry=REGISTRY,
)

stale_cursors_total = Counter(
    "stale_cursors_total",
    "Identifier cursors whose entity no longer exists",
    ["listing", "policy"],
    registry=REGISTRY,
)

# ============================================================================
# Change Events
# ============================================================================

events_dispatched_total = Counter(
    "change_events_dispatched_total",
    "Domain events handed to the dispatcher",
    ["event_type"],
    registry=REGISTRY,
)

event_subscriber_failures_total = Counter(
    "change_event_subscriber_failures_total",
    "Subscriber callbacks that raised while handling an event",
    ["subscriber"],
    registry=REGISTRY,
)

# ============================================================================
# Retry Metrics
# ============================================================================

retry_attempts_total = Counter(
    "retry_attempts_total",
    "Total number of retry attempts",
    ["operation", "attempt_number"],
    registry=REGISTRY,
)

retry_exhausted_total = Counter(
    "retry_exhausted_total",
    "Total number of times retry attempts were exhausted",
    ["operation"],
    registry=REGISTRY,
)

retry_success_after_failure_total = Counter(
    "retry_success_after_failure_total",
    "Total number of successful operations after retries",
    ["operation", "attempts_needed"],
    registry=REGISTRY,
)
