"""Identity verifier port: outbound interface for external identity providers."""

from typing import Protocol

from domain.model.session import VerifiedProfile


class IdentityVerifier(Protocol):
    """Port for verifying externally issued identity tokens.

    verify() raises InvalidTokenError, AudienceMismatchError or
    IdentityProviderError; it never returns an unverified profile.
    When expected_audience is None the implementation falls back to its
    configured client id.
    """

    async def verify(
        self, token: str, expected_audience: str | None = None,
    ) -> VerifiedProfile: ...
