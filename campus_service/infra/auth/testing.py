"""Protocol-based auth test double.

Without registered tokens every non-empty token is accepted and used as the
uid, which is also what ``AUTH_MOCK_MODE=true`` does for local development.

Example:
    client = MockAuthClient(tokens={"alice-token": "alice"}, accept_any=False)
    app.dependency_overrides[get_auth_client] = lambda: client
"""

from __future__ import annotations

from campus_service.infra.auth.models import TokenInfo


class MockAuthClient:
    def __init__(self, tokens: dict[str, str] | None = None, *, accept_any: bool = True) -> None:
        self.tokens = dict(tokens or {})
        self.accept_any = accept_any
        self.calls: list[str] = []

    @property
    def is_configured(self) -> bool:
        return True

    @property
    def mode(self) -> str:
        return "mock"

    def register_token(self, token: str, uid: str) -> None:
        self.tokens[token] = uid

    def revoke_token(self, token: str) -> None:
        self.tokens.pop(token, None)

    async def validate_token(self, token: str) -> TokenInfo | None:
        self.calls.append(token)
        if token in self.tokens:
            return TokenInfo(uid=self.tokens[token])
        if self.accept_any and token:
            return TokenInfo(uid=token)
        return None

    async def aclose(self) -> None:
        return None
