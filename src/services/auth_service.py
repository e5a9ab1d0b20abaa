"""Auth service: registration, login, sessions and federated sign-in.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.
Storage and the identity provider are injected at construction; the service
keeps no other state between calls.
"""

import functools
import logging
import os
import re
from datetime import datetime, timedelta, timezone
from enum import Enum

from domain.model.errors import (
    AccountLinkRefusedError,
    DomainError,
    DuplicateEmailError,
    FederatedLoginError,
    IdentityProviderError,
    IncompleteProfileError,
    InvalidCredentialsError,
    InvalidSessionError,
    InvalidTokenError,
    UserNotFoundError,
    ValidationError,
)
from domain.model.session import (
    FEDERATED_USER_AGENT,
    LOCAL_USER_AGENT,
    AuthResult,
    FederatedAuthResult,
    Session,
    SessionHandle,
    VerifiedProfile,
)
from domain.model.user import LOCAL_PROVIDER, User, UserRole
from port.identity_verifier import IdentityVerifier
from port.session_repository import SessionRepository
from port.user_repository import UserRepository
from utils.credentials import MAX_PASSWORD_BYTES, generate_token, hash_password, verify_password

logger = logging.getLogger(__name__)

SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "24"))
MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class LinkPolicy(str, Enum):
    """When a federated sign-in may attach itself to an existing local account."""
    ALWAYS = "always"
    VERIFIED = "verified"
    NEVER = "never"


FEDERATED_LINK_POLICY = LinkPolicy(os.getenv("FEDERATED_LINK_POLICY", LinkPolicy.VERIFIED.value))


@functools.lru_cache(maxsize=1)
def _placeholder_digest() -> str:
    """Digest checked against when the account has no password of its own."""
    return hash_password(generate_token())


def validate_email(email: str) -> None:
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")


class AuthService:
    """Session-based authentication over a user store and a session store."""

    def __init__(
        self,
        users: UserRepository,
        sessions: SessionRepository,
        identity_verifier: IdentityVerifier | None = None,
        session_ttl: timedelta = timedelta(hours=SESSION_TTL_HOURS),
        link_policy: LinkPolicy = FEDERATED_LINK_POLICY,
    ):
        self.users = users
        self.sessions = sessions
        self.identity_verifier = identity_verifier
        self.session_ttl = session_ttl
        self.link_policy = link_policy

    # ── local credentials ────────────────────────────────────

    def register(
        self, name: str, email: str, password: str, user_agent: str = LOCAL_USER_AGENT,
    ) -> AuthResult:
        """Create a local account and open its first session.

        Raises:
            ValidationError: missing field, bad email, password too short
            DuplicateEmailError: email already registered
        """
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email or not password:
            raise ValidationError("All fields are required")
        validate_email(email)
        validate_password(password)

        user = self.users.create(
            email=email,
            password_hash=hash_password(password),
            name=name,
            role=UserRole.CUSTOMER,
            provider=LOCAL_PROVIDER,
        )
        session = self._open_session(user, user_agent)

        logger.info("User registered", extra={"userId": user.id, "email": user.email})
        return AuthResult(user=user.to_profile(), session=session)

    def login(self, email: str, password: str, user_agent: str = LOCAL_USER_AGENT) -> AuthResult:
        """Authenticate by email and password and open a new session.

        Unknown email and wrong password raise the same error.

        Raises:
            ValidationError: email or password missing
            InvalidCredentialsError: no such account or wrong password
        """
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.users.get_by_email(email)
        digest = user.password_hash if user and user.password_hash else _placeholder_digest()
        matched = verify_password(password, digest)
        if not user or not user.password_hash or not matched:
            logger.info("Login rejected", extra={"email": email})
            raise InvalidCredentialsError()

        user = self.users.update(user.id, last_login_at=datetime.now(timezone.utc))
        session = self._open_session(user, user_agent)

        logger.info("User logged in", extra={"userId": user.id, "email": user.email})
        return AuthResult(user=user.to_profile(), session=session)

    # ── sessions ─────────────────────────────────────────────

    def validate_session(self, session_id: str) -> AuthResult:
        """Resolve a session id to its live session and owner.

        A session whose user no longer exists is deleted on the spot.

        Raises:
            InvalidSessionError: unknown or expired session
            UserNotFoundError: session owner was deleted
        """
        if not session_id:
            raise InvalidSessionError()

        session = self.sessions.get(session_id)
        if session is None:
            raise InvalidSessionError()

        user = self.users.get_by_id(session.user_id)
        if user is None:
            self.sessions.delete(session_id)
            logger.warning("Orphaned session purged", extra={"userId": session.user_id})
            raise UserNotFoundError()

        return AuthResult(user=user.to_profile(), session=session)

    def logout(self, session_id: str) -> None:
        if session_id and self.sessions.delete(session_id):
            logger.info("Session closed")

    def logout_all_sessions(self, user_id: str) -> int:
        if not user_id:
            return 0
        count = self.sessions.delete_all_for_user(user_id)
        logger.info("All sessions closed", extra={"userId": user_id, "count": count})
        return count

    # ── federated identity ───────────────────────────────────

    async def federated_login(
        self, identity_token: str, expected_audience: str | None = None,
    ) -> FederatedAuthResult:
        """Sign in with an external ID token, creating or linking the account.

        Raises:
            InvalidTokenError, AudienceMismatchError, IdentityProviderError:
                the token could not be verified
            IncompleteProfileError: provider returned no email or name
            AccountLinkRefusedError: a local account owns the email and the
                link policy forbids attaching this identity to it
        """
        if not identity_token:
            raise InvalidTokenError("Identity token is required")
        if self.identity_verifier is None:
            raise IdentityProviderError("Federated sign-in is not configured")

        profile = await self._verify(identity_token, expected_audience)
        if not profile.email or not profile.name:
            raise IncompleteProfileError()

        user = self.users.get_by_email(profile.email)
        if user is None:
            user = self._create_federated_user(profile)
        else:
            user = self._link_federated_user(user, profile)

        session = self._open_session(user, FEDERATED_USER_AGENT)
        logger.info(
            "Federated login",
            extra={"userId": user.id, "email": user.email, "provider": profile.provider},
        )
        return FederatedAuthResult(
            user=user.to_profile(),
            session=SessionHandle(session_id=session.session_id, expires_at=session.expires_at),
        )

    async def _verify(self, identity_token: str, expected_audience: str | None) -> VerifiedProfile:
        try:
            return await self.identity_verifier.verify(identity_token, expected_audience)
        except FederatedLoginError:
            raise
        except Exception as e:
            # raw provider errors stay in the log, never in the response
            logger.error("Identity verification failed", extra={"error": str(e)[:200]})
            raise IdentityProviderError() from e

    def _create_federated_user(self, profile: VerifiedProfile) -> User:
        try:
            user = self.users.create(
                email=profile.email,
                # random secret nobody knows: password login stays impossible
                password_hash=hash_password(generate_token()),
                name=profile.name,
                role=UserRole.PATIENT,
                first_name=profile.given_name,
                last_name=profile.family_name,
                avatar=profile.picture,
                provider=profile.provider,
                provider_id=profile.subject,
                is_email_verified=profile.email_verified,
                last_login_at=datetime.now(timezone.utc),
            )
        except DuplicateEmailError:
            # lost a creation race with a concurrent sign-in for the same email
            logger.info("Federated user created concurrently, linking", extra={"email": profile.email})
            existing = self.users.get_by_email(profile.email)
            if existing is None:
                raise DomainError("Failed to create user")
            return self._link_federated_user(existing, profile)

        logger.info("Federated user created", extra={"userId": user.id, "email": user.email})
        return user

    def _link_federated_user(self, user: User, profile: VerifiedProfile) -> User:
        if not self._may_link(user, profile):
            logger.warning(
                "Federated link refused",
                extra={"userId": user.id, "policy": self.link_policy.value},
            )
            raise AccountLinkRefusedError()

        changes = {
            "name": profile.name or user.name,
            "first_name": profile.given_name or user.first_name,
            "last_name": profile.family_name or user.last_name,
            "avatar": profile.picture or user.avatar,
            "is_email_verified": profile.email_verified or user.is_email_verified,
            "provider": profile.provider,
            "provider_id": profile.subject,
            "last_login_at": datetime.now(timezone.utc),
        }
        if user.provider != profile.provider:
            logger.info("Federated account linked", extra={"userId": user.id, "provider": profile.provider})
        return self.users.update(user.id, **changes)

    def _may_link(self, user: User, profile: VerifiedProfile) -> bool:
        if user.provider == profile.provider and user.provider_id == profile.subject:
            return True
        if self.link_policy is LinkPolicy.ALWAYS:
            return True
        if self.link_policy is LinkPolicy.VERIFIED:
            return profile.email_verified
        return False

    def _open_session(self, user: User, user_agent: str) -> Session:
        return self.sessions.create(
            user_id=user.id,
            user_agent=user_agent,
            session_id=generate_token(),
            ttl=self.session_ttl,
        )
