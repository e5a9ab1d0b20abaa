from datetime import timedelta
from typing import Protocol

from domain.model.session import Session


class SessionRepository(Protocol):
    """Protocol defining the interface for session data access."""

    def create(
        self,
        user_id: str,
        user_agent: str,
        session_id: str | None = None,
        ttl: timedelta | None = None,
    ) -> Session:
        """Persist a session. Generate session_id when None, stamp created_at/expires_at."""
        ...

    def get(self, session_id: str) -> Session | None:
        """Return a live session or None.

        An expired session is deleted before None is returned.
        """
        ...

    def delete(self, session_id: str) -> bool:
        """Delete one session. Return True if it existed."""
        ...

    def delete_all_for_user(self, user_id: str) -> int:
        """Delete every session of a user. Return the number removed."""
        ...
