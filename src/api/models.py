"""Pydantic models for API request/response."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from domain.model.session import Session, SessionHandle
from domain.model.user import UserProfile


# ── requests ─────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    """Request model for user registration."""
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    """Request model for user login."""
    email: str
    password: str


class SessionRequest(BaseModel):
    """Request carrying a session id (validate, logout)."""
    session_id: str


class LogoutAllRequest(BaseModel):
    """Target user; defaults to the caller."""
    user_id: Optional[str] = None


class FederatedLoginRequest(BaseModel):
    """Request model for Google sign-in."""
    identity_token: str = Field(..., description="ID token issued by the identity provider")
    expected_audience: Optional[str] = Field(None, description="OAuth client id the token must be issued for")


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


# ── responses ────────────────────────────────────────────────


class UserResponse(BaseModel):
    """Response model for user (never includes the password digest)."""
    id: str
    name: str
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    provider: str
    provider_id: Optional[str] = None
    is_email_verified: bool = False
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None


class SessionResponse(BaseModel):
    session_id: str
    user_id: str
    user_agent: str
    created_at: datetime
    expires_at: datetime


class SessionHandleResponse(BaseModel):
    session_id: str
    expires_at: datetime


class AuthResponse(BaseModel):
    """Response model for register, login and session validation."""
    user: UserResponse
    session: SessionResponse


class FederatedAuthResponse(BaseModel):
    user: UserResponse
    session: SessionHandleResponse


class SuccessResponse(BaseModel):
    success: bool = True
    deleted: Optional[int] = Field(None, description="Number of sessions removed")


class GoogleConfigResponse(BaseModel):
    client_id: str
    scope: str


def to_user_response(profile: UserProfile) -> UserResponse:
    """Convert domain UserProfile to API UserResponse."""
    return UserResponse(
        id=profile.id,
        name=profile.name,
        email=profile.email,
        role=profile.role.value,
        first_name=profile.first_name,
        last_name=profile.last_name,
        avatar=profile.avatar,
        provider=profile.provider,
        provider_id=profile.provider_id,
        is_email_verified=profile.is_email_verified,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
        last_login_at=profile.last_login_at,
    )


def to_session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        user_id=session.user_id,
        user_agent=session.user_agent,
        created_at=session.created_at,
        expires_at=session.expires_at,
    )


def to_session_handle_response(handle: SessionHandle) -> SessionHandleResponse:
    return SessionHandleResponse(session_id=handle.session_id, expires_at=handle.expires_at)
