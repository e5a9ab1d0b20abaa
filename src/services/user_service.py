"""User account service: profile edits, password change, account deletion."""

import logging

from domain.model.errors import InvalidCredentialsError, UserNotFoundError, ValidationError
from domain.model.user import UserProfile
from port.session_repository import SessionRepository
from port.user_repository import UserRepository
from services.auth_service import validate_email, validate_password
from utils.credentials import hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2


class UserService:
    def __init__(self, users: UserRepository, sessions: SessionRepository):
        self.users = users
        self.sessions = sessions

    def get_profile(self, user_id: str) -> UserProfile:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user.to_profile()

    def update_profile(
        self, user_id: str, name: str | None = None, email: str | None = None,
    ) -> UserProfile:
        """Update the editable profile fields (name and email only).

        Raises:
            ValidationError: name too short or malformed email
            DuplicateEmailError: email belongs to another account
            UserNotFoundError: no such user
        """
        changes = {}
        if name is not None:
            name = name.strip()
            if len(name) < MIN_NAME_LENGTH:
                raise ValidationError(f"Name must be at least {MIN_NAME_LENGTH} characters")
            changes["name"] = name
        if email is not None:
            email = email.strip()
            validate_email(email)
            changes["email"] = email

        if not changes:
            return self.get_profile(user_id)

        user = self.users.update(user_id, **changes)
        logger.info("Profile updated", extra={"userId": user_id, "fields": sorted(changes)})
        return user.to_profile()

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """Replace the password after checking the current one.

        Raises:
            UserNotFoundError: no such user
            InvalidCredentialsError: current password is wrong
            ValidationError: new password too short
        """
        user = self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        if not verify_password(current_password or "", user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")
        validate_password(new_password or "")

        self.users.update(user_id, password_hash=hash_password(new_password))
        logger.info("Password changed", extra={"userId": user_id})

    def delete_account(self, user_id: str) -> None:
        """Delete a user and every session they own."""
        if self.users.get_by_id(user_id) is None:
            raise UserNotFoundError()

        removed = self.sessions.delete_all_for_user(user_id)
        self.users.delete(user_id)
        logger.info("Account deleted", extra={"userId": user_id, "sessionsRemoved": removed})

    def list_users(self) -> list[UserProfile]:
        return [user.to_profile() for user in self.users.list_all()]
