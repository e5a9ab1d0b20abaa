"""Google ID token verifier.

Implements IdentityVerifier by checking Google-issued OpenID Connect ID tokens
against Google's published signing keys (JWKS).

Key set: https://www.googleapis.com/oauth2/v3/certs
"""

import logging
import os
import time
from typing import Any

import httpx
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from domain.model.errors import AudienceMismatchError, IdentityProviderError, InvalidTokenError
from domain.model.session import VerifiedProfile

logger = logging.getLogger(__name__)

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_JWKS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")
IDENTITY_HTTP_TIMEOUT_SECONDS = float(os.getenv("IDENTITY_HTTP_TIMEOUT_SECONDS", "5"))
JWKS_CACHE_TTL_SECONDS = int(os.getenv("JWKS_CACHE_TTL_SECONDS", "3600"))
JWKS_MIN_REFRESH_SECONDS = int(os.getenv("JWKS_MIN_REFRESH_SECONDS", "60"))
SIGNING_ALGORITHMS = ["RS256"]


class GoogleIdentityVerifier:
    """Verifies Google ID tokens and extracts the signed-in profile."""

    def __init__(
        self,
        client_id: str | None = GOOGLE_CLIENT_ID,
        jwks_url: str = GOOGLE_JWKS_URL,
        timeout: float = IDENTITY_HTTP_TIMEOUT_SECONDS,
        cache_ttl: int = JWKS_CACHE_TTL_SECONDS,
        min_refresh_interval: int = JWKS_MIN_REFRESH_SECONDS,
    ):
        self.client_id = client_id
        self.jwks_url = jwks_url
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.min_refresh_interval = min_refresh_interval
        self._keys: dict[str, dict[str, Any]] = {}
        self._fetched_at = 0.0

    async def verify(self, token: str, expected_audience: str | None = None) -> VerifiedProfile:
        audience = self._resolve_audience(expected_audience)

        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise InvalidTokenError("Identity token is malformed")

        key = await self._get_signing_key(header.get("kid"))

        try:
            # audience is compared below so a mismatch gets its own error kind
            claims = jwt.decode(
                token,
                key,
                algorithms=SIGNING_ALGORITHMS,
                issuer=GOOGLE_ISSUERS,
                options={"verify_aud": False, "verify_at_hash": False},
            )
        except ExpiredSignatureError:
            raise InvalidTokenError("Identity token has expired")
        except JWTClaimsError:
            raise InvalidTokenError("Identity token has invalid claims")
        except JWTError:
            raise InvalidTokenError()

        if not _audience_matches(claims.get("aud"), audience):
            logger.warning("Identity token audience mismatch", extra={"expectedAudience": audience})
            raise AudienceMismatchError()

        if not claims.get("sub"):
            raise InvalidTokenError("Identity token has no subject")

        return _to_profile(claims)

    def _resolve_audience(self, expected_audience: str | None) -> str:
        if expected_audience:
            return expected_audience
        if not self.client_id:
            logger.error("No identity token audience configured (GOOGLE_CLIENT_ID unset)")
            raise IdentityProviderError("Identity provider is not configured")
        logger.warning(
            "No expected audience supplied; falling back to configured client id",
            extra={"clientId": self.client_id},
        )
        return self.client_id

    async def _get_signing_key(self, kid: str | None) -> dict[str, Any]:
        if not kid:
            raise InvalidTokenError("Identity token has no key id")

        if self._cache_expired() or (kid not in self._keys and self._refresh_allowed()):
            # Google rotates keys; an unknown kid forces a refresh at most once per interval
            await self._refresh_keys()

        key = self._keys.get(kid)
        if key is None:
            raise InvalidTokenError("Identity token signed with unknown key")
        return key

    def _cache_expired(self) -> bool:
        return not self._fetched_at or (time.monotonic() - self._fetched_at) >= self.cache_ttl

    def _refresh_allowed(self) -> bool:
        return (time.monotonic() - self._fetched_at) >= self.min_refresh_interval

    async def _refresh_keys(self) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await _fetch_with_retry(client, self.jwks_url)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Failed to fetch identity provider keys", extra={"error": str(e)[:200]})
            raise IdentityProviderError("Identity provider is unavailable")

        keys = data.get("keys") if isinstance(data, dict) else None
        if not isinstance(keys, list):
            logger.error("Identity provider returned malformed key set")
            raise IdentityProviderError("Identity provider is unavailable")

        self._keys = {k["kid"]: k for k in keys if isinstance(k, dict) and k.get("kid")}
        self._fetched_at = time.monotonic()
        logger.debug("Identity provider keys refreshed", extra={"keyCount": len(self._keys)})


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
async def _fetch_with_retry(client: httpx.AsyncClient, url: str) -> httpx.Response:
    """Fetch URL with automatic retry on transient failures."""
    return await client.get(url)


def _audience_matches(aud: str | list | None, expected: str) -> bool:
    if isinstance(aud, str):
        return aud == expected
    if isinstance(aud, list):
        return expected in aud
    return False


def _to_profile(claims: dict[str, Any]) -> VerifiedProfile:
    verified = claims.get("email_verified", False)
    if isinstance(verified, str):
        # older Google tokens encode the flag as a string
        verified = verified.lower() == "true"
    return VerifiedProfile(
        subject=str(claims["sub"]),
        email=claims.get("email"),
        name=claims.get("name"),
        given_name=claims.get("given_name"),
        family_name=claims.get("family_name"),
        picture=claims.get("picture"),
        email_verified=bool(verified),
    )
