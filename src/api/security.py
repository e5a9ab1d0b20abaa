"""Bearer-session authentication dependencies.

Clients send the opaque session id as ``Authorization: Bearer <session_id>``;
it is resolved through AuthService.validate_session on every request.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from api.dependencies import get_auth_service
from domain.model.errors import InvalidSessionError, PermissionDeniedError
from domain.model.session import AuthResult
from domain.model.user import UserProfile, UserRole
from services.auth_service import AuthService

security = HTTPBearer(auto_error=False)


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResult:
    """Resolve the bearer session. Raises InvalidSessionError if missing or expired."""
    if not credentials:
        raise InvalidSessionError("Not authenticated")
    return auth_service.validate_session(credentials.credentials)


def get_current_user_required(
    current: AuthResult = Depends(get_current_session),
) -> UserProfile:
    return current.user


def require_admin(user: UserProfile = Depends(get_current_user_required)) -> UserProfile:
    if user.role is not UserRole.ADMIN:
        raise PermissionDeniedError("Administrator role required")
    return user
