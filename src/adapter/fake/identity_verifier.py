"""In-memory implementation of IdentityVerifier for testing."""

import asyncio

from domain.model.errors import AudienceMismatchError, IdentityProviderError, InvalidTokenError
from domain.model.session import VerifiedProfile


class FakeIdentityVerifier:
    """Resolves tokens registered with add_token(); everything else is invalid."""

    def __init__(self, default_audience: str | None = "test-client-id"):
        self.default_audience = default_audience
        self.tokens: dict[str, tuple[str, VerifiedProfile]] = {}
        self.calls: list[tuple[str, str | None]] = []
        self.fail_with: Exception | None = None

    def add_token(self, token: str, profile: VerifiedProfile, audience: str | None = None) -> None:
        self.tokens[token] = (audience or self.default_audience, profile)

    async def verify(self, token: str, expected_audience: str | None = None) -> VerifiedProfile:
        self.calls.append((token, expected_audience))
        # yield to the loop so concurrent callers interleave like real network I/O
        await asyncio.sleep(0)

        if self.fail_with is not None:
            raise self.fail_with

        audience = expected_audience or self.default_audience
        if not audience:
            raise IdentityProviderError("Identity provider audience is not configured")

        entry = self.tokens.get(token)
        if entry is None:
            raise InvalidTokenError()

        token_audience, profile = entry
        if token_audience != audience:
            raise AudienceMismatchError()
        return profile
