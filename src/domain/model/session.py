from dataclasses import dataclass
from datetime import datetime, timezone

from domain.model.user import UserProfile

LOCAL_USER_AGENT = "Electron App"
FEDERATED_USER_AGENT = "Google OAuth"


@dataclass
class Session:
    """Time-bounded bearer token bound to a user."""
    session_id: str
    user_id: str
    user_agent: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= _as_utc(self.expires_at)


@dataclass
class SessionHandle:
    """Narrow session shape returned to federated sign-in callers."""
    session_id: str
    expires_at: datetime


@dataclass
class AuthResult:
    user: UserProfile
    session: Session


@dataclass
class FederatedAuthResult:
    user: UserProfile
    session: SessionHandle


@dataclass
class VerifiedProfile:
    """Identity claims extracted from a verified external ID token."""
    subject: str
    email: str | None
    name: str | None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None
    email_verified: bool = False
    provider: str = "google"


def _as_utc(value: datetime) -> datetime:
    # pymongo hands back naive datetimes unless tz_aware=True
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
