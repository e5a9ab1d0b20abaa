"""In-memory implementation of SessionRepository for testing."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from domain.model.session import Session
from utils.credentials import generate_token

DEFAULT_TTL = timedelta(hours=24)


class FakeSessionRepository:
    def __init__(self, now=None):
        self.store: dict[str, Session] = {}
        # injectable clock so tests can move past expires_at
        self.now = now or (lambda: datetime.now(timezone.utc))

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        user_id: str,
        user_agent: str,
        session_id: str | None = None,
        ttl: timedelta | None = None,
    ) -> Session:
        created_at = self.now()
        session = Session(
            session_id=session_id or generate_token(),
            user_id=user_id,
            user_agent=user_agent,
            created_at=created_at,
            expires_at=created_at + (ttl or DEFAULT_TTL),
        )
        self.store[session.session_id] = session
        return replace(session)

    def delete(self, session_id: str) -> bool:
        return self.store.pop(session_id, None) is not None

    def delete_all_for_user(self, user_id: str) -> int:
        doomed = [sid for sid, s in self.store.items() if s.user_id == user_id]
        for sid in doomed:
            del self.store[sid]
        return len(doomed)

    # ── read operations ──────────────────────────────────────

    def get(self, session_id: str) -> Session | None:
        session = self.store.get(session_id)
        if not session:
            return None
        if session.is_expired(self.now()):
            self.delete(session_id)
            return None
        return replace(session)
