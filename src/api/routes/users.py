"""Account routes for the signed-in user, plus the admin user listing."""

from fastapi import APIRouter, Depends

from api.dependencies import get_user_service
from api.models import (
    ChangePasswordRequest,
    SuccessResponse,
    UpdateProfileRequest,
    UserResponse,
    to_user_response,
)
from api.security import get_current_user_required, require_admin
from domain.model.user import UserProfile
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
def get_profile(
    current_user: UserProfile = Depends(get_current_user_required),
    user_service: UserService = Depends(get_user_service),
):
    return to_user_response(user_service.get_profile(current_user.id))


@router.patch("/me", response_model=UserResponse)
def update_profile(
    request: UpdateProfileRequest,
    current_user: UserProfile = Depends(get_current_user_required),
    user_service: UserService = Depends(get_user_service),
):
    """Change name and/or email.

    Errors: VALIDATION_ERROR (400), DUPLICATE_EMAIL (409)
    """
    profile = user_service.update_profile(current_user.id, name=request.name, email=request.email)
    return to_user_response(profile)


@router.post("/me/password", response_model=SuccessResponse)
def change_password(
    request: ChangePasswordRequest,
    current_user: UserProfile = Depends(get_current_user_required),
    user_service: UserService = Depends(get_user_service),
):
    user_service.change_password(current_user.id, request.current_password, request.new_password)
    return SuccessResponse()


@router.delete("/me", response_model=SuccessResponse)
def delete_account(
    current_user: UserProfile = Depends(get_current_user_required),
    user_service: UserService = Depends(get_user_service),
):
    """Delete the account and all of its sessions."""
    user_service.delete_account(current_user.id)
    return SuccessResponse()


@router.get("", response_model=list[UserResponse])
def list_users(
    _admin: UserProfile = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    return [to_user_response(p) for p in user_service.list_users()]
