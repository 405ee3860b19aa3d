"""Authentication client protocol.

Any class with these members satisfies the protocol (structural typing), so
tests can swap in MockAuthClient through ``app.dependency_overrides``.

Implementations:
    - HttpAuthClient: asks the identity service over HTTP
    - MockAuthClient: token is the uid (development and tests)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from campus_service.infra.auth.models import TokenInfo


@runtime_checkable
class AuthClient(Protocol):
    """Resolves tokens to identity service uids."""

    @property
    def is_configured(self) -> bool:
        """Whether the client can validate tokens at all."""
        ...

    @property
    def mode(self) -> str:
        """``external`` for the HTTP client, ``mock`` for the test double."""
        ...

    async def validate_token(self, token: str) -> TokenInfo | None:
        """Resolve a token.

        Returns:
            TokenInfo for a valid token, None for an unknown or expired one.

        Raises:
            ServiceUnavailableException: The identity service could not be
                reached or answered with a server error.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
