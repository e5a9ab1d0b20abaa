from typing import Any, Protocol

from domain.model.user import User, UserRole


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Emails are matched case-insensitively by every implementation.
    """

    def create(
        self,
        email: str,
        password_hash: str,
        name: str,
        role: UserRole = UserRole.CUSTOMER,
        **profile: Any,
    ) -> User:
        """Create a new user. Raise DuplicateEmailError if the email is taken."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def update(self, user_id: str, **fields: Any) -> User:
        """Merge fields into a user and bump updated_at.

        Raise UserNotFoundError if absent, DuplicateEmailError if a changed
        email collides with another account.
        """
        ...

    def delete(self, user_id: str) -> bool:
        """Delete a user. Return True if a record was removed."""
        ...

    def list_all(self) -> list[User]:
        """Return every user, oldest first."""
        ...
