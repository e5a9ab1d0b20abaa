from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "customer"
    PATIENT = "patient"
    ADMIN = "admin"


LOCAL_PROVIDER = "local"


@dataclass
class UserProfile:
    """Public view of a user. Never carries the password digest."""
    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None
    provider: str = LOCAL_PROVIDER
    provider_id: str | None = None
    is_email_verified: bool = False
    last_login_at: datetime | None = None


@dataclass
class User:
    """Domain model representing a stored user account."""
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime
    role: UserRole = UserRole.CUSTOMER
    password_hash: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None
    provider: str = LOCAL_PROVIDER
    provider_id: str | None = None
    is_email_verified: bool = False
    last_login_at: datetime | None = None

    def to_profile(self) -> UserProfile:
        """Drop the password digest and return the public projection."""
        return UserProfile(**{
            f.name: getattr(self, f.name) for f in fields(UserProfile)
        })


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively; store and look them up lower-cased."""
    return email.strip().lower()
