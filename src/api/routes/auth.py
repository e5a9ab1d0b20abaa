"""Authentication routes (register, login, sessions, Google sign-in).

Handlers are thin: they call AuthService and let the exception handlers in
api.errors turn domain errors into ``{"error": {"code", "message"}}`` bodies.
"""

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, status

from adapter.external.google_identity import GOOGLE_CLIENT_ID
from api.dependencies import get_auth_service
from api.models import (
    AuthResponse,
    FederatedAuthResponse,
    FederatedLoginRequest,
    GoogleConfigResponse,
    LoginRequest,
    LogoutAllRequest,
    RegisterRequest,
    SessionRequest,
    SuccessResponse,
    UserResponse,
    to_session_handle_response,
    to_session_response,
    to_user_response,
)
from api.security import get_current_user_required
from domain.model.errors import PermissionDeniedError
from domain.model.session import AuthResult
from domain.model.user import UserProfile, UserRole
from services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

GOOGLE_OAUTH_SCOPE = os.getenv("GOOGLE_OAUTH_SCOPE", "openid email profile")


def _to_auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(user=to_user_response(result.user), session=to_session_response(result.session))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Register a new local account and open a session.

    Errors: VALIDATION_ERROR (400), DUPLICATE_EMAIL (409)
    """
    result = auth_service.register(request.name, request.email, request.password)
    return _to_auth_response(result)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Login with email and password.

    Errors: VALIDATION_ERROR (400), INVALID_CREDENTIALS (401)
    """
    result = auth_service.login(request.email, request.password)
    return _to_auth_response(result)


@router.post("/validate", response_model=AuthResponse)
def validate(request: SessionRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Resolve a session id to its user.

    Errors: INVALID_SESSION (401), USER_NOT_FOUND (401)
    """
    result = auth_service.validate_session(request.session_id)
    return _to_auth_response(result)


@router.post("/logout", response_model=SuccessResponse)
def logout(request: SessionRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Close one session. Succeeds even if the session is already gone."""
    auth_service.logout(request.session_id)
    return SuccessResponse()


@router.post("/logout-all", response_model=SuccessResponse)
def logout_all(
    request: LogoutAllRequest,
    current_user: UserProfile = Depends(get_current_user_required),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Close every session of a user. Succeeds even if there are none.

    Callers may only target their own account unless they are an admin.

    Errors: INVALID_SESSION (401), PERMISSION_DENIED (403)
    """
    user_id = request.user_id or current_user.id
    if user_id != current_user.id and current_user.role is not UserRole.ADMIN:
        raise PermissionDeniedError("Cannot close another user's sessions")
    deleted = auth_service.logout_all_sessions(user_id)
    return SuccessResponse(deleted=deleted)


@router.post("/google", response_model=FederatedAuthResponse)
async def google_login(
    request: FederatedLoginRequest, auth_service: AuthService = Depends(get_auth_service),
):
    """Sign in with a Google ID token.

    Errors: INVALID_TOKEN (401), AUDIENCE_MISMATCH (401), INCOMPLETE_PROFILE (422),
    IDENTITY_PROVIDER_ERROR (502), ACCOUNT_LINK_REFUSED (409)
    """
    result = await auth_service.federated_login(request.identity_token, request.expected_audience)
    return FederatedAuthResponse(
        user=to_user_response(result.user),
        session=to_session_handle_response(result.session),
    )


@router.get("/google/config", response_model=GoogleConfigResponse)
async def google_config():
    """Public OAuth parameters the desktop client needs to start Google sign-in."""
    if not GOOGLE_CLIENT_ID:
        logger.warning("Google sign-in config requested but GOOGLE_CLIENT_ID is unset")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google sign-in is not configured",
        )
    return GoogleConfigResponse(client_id=GOOGLE_CLIENT_ID, scope=GOOGLE_OAUTH_SCOPE)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: UserProfile = Depends(get_current_user_required)):
    """Get the user behind the bearer session."""
    return to_user_response(current_user)
