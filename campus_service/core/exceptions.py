"""Custom exception classes for the application."""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    All custom exceptions should inherit from this class.
    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.
        retryable: Whether the client may retry the whole request unchanged.

    Example:
            raise AppException(
            status_code=404,
            detail="Tag not found",
            type="tag-not-found",
            extra={"tag_id": "..."}
        )
    """

    retryable: bool = False

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            status_code: HTTP status code.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for HTTP status code."""
        titles = {
            400: "Bad Request",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found",
            409: "Conflict",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class UnauthorizedException(AppException):
    """Exception raised for authentication failures."""

    def __init__(
        self,
        detail: str,
        type: str = "unauthorized",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=401,
            detail=detail,
            type=type,
            title="Unauthorized",
            instance=instance,
            extra=extra,
        )


class NotAuthenticatedException(UnauthorizedException):
    """The action requires a signed-in user and no valid token was presented.

    Never retried: the client must authenticate first.
    """

    def __init__(self, detail: str = "Authentication required", **kwargs: Any) -> None:
        super().__init__(detail=detail, type="not-authenticated", **kwargs)


class ForbiddenException(AppException):
    """Exception raised for authorization failures.

    Example:
            raise ForbiddenException(
            detail="Only the creator may update this tag",
            type="not-tag-creator",
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "forbidden",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=403,
            detail=detail,
            type=type,
            title="Forbidden",
            instance=instance,
            extra=extra,
        )


class ConflictException(AppException):
    """Exception raised for resource state conflicts."""

    def __init__(
        self,
        detail: str,
        type: str = "conflict",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=409,
            detail=detail,
            type=type,
            title="Conflict",
            instance=instance,
            extra=extra,
        )


class BadRequestException(AppException):
    """Exception raised for malformed or semantically invalid requests."""

    def __init__(
        self,
        detail: str,
        type: str = "bad-request",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Bad Request",
            instance=instance,
            extra=extra,
        )


class NotVotableException(BadRequestException):
    """The target status carries no vote counter.

    Only statuses of votable missions (issue reports) have a counter.
    """

    def __init__(self, status_id: Any, **kwargs: Any) -> None:
        super().__init__(
            detail=f"Status {status_id} does not accept votes",
            type="status-not-votable",
            extra={"status_id": str(status_id)},
            **kwargs,
        )


class InvalidVoteTransitionException(ConflictException):
    """Upvote while already voted, or cancel while not voted."""

    def __init__(self, action: str, has_voted: bool, **kwargs: Any) -> None:
        state = "already voted" if has_voted else "not voted"
        super().__init__(
            detail=f"Cannot {action}: user has {state}",
            type="invalid-vote-transition",
            extra={"action": action, "has_voted": has_voted},
            **kwargs,
        )


class StaleCursorException(BadRequestException):
    """The cursor references an entity that no longer exists.

    The client should restart pagination from an empty cursor.
    """

    def __init__(self, cursor: str, **kwargs: Any) -> None:
        super().__init__(
            detail="Cursor references an entity that no longer exists; restart from an empty cursor",
            type="stale-cursor",
            extra={"cursor": cursor},
            **kwargs,
        )


class ServiceUnavailableException(AppException):
    """Exception raised when a backing service is unavailable.

    Example:
            raise ServiceUnavailableException(
            detail="Database is temporarily unavailable",
            extra={"service": "database", "retry_after": 1}
        )
    """

    retryable = True

    def __init__(
        self,
        detail: str,
        type: str = "service-unavailable",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=503,
            detail=detail,
            type=type,
            title="Service Unavailable",
            instance=instance,
            extra=extra,
        )


class TransactionConflictException(ServiceUnavailableException):
    """Concurrent writers kept conflicting until the retry budget ran out."""

    def __init__(self, operation: str, attempts: int, **kwargs: Any) -> None:
        super().__init__(
            detail=f"{operation} conflicted with concurrent updates after {attempts} attempts",
            type="transaction-conflict",
            extra={"operation": operation, "attempts": attempts, "retry_after": 1},
            **kwargs,
        )


class StoreUnavailableException(ServiceUnavailableException):
    """Network or infrastructure failure talking to the database."""

    def __init__(self, detail: str = "Database is temporarily unavailable", **kwargs: Any) -> None:
        kwargs.setdefault("extra", {"service": "database", "retry_after": 1})
        super().__init__(detail=detail, type="store-unavailable", **kwargs)


__all__ = [
    "AppException",
    "BadRequestException",
    "ConflictException",
    "ForbiddenException",
    "InvalidVoteTransitionException",
    "NotAuthenticatedException",
    "NotVotableException",
    "ServiceUnavailableException",
    "StaleCursorException",
    "StoreUnavailableException",
    "TransactionConflictException",
    "UnauthorizedException",
]
