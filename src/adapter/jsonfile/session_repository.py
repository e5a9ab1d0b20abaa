"""JSON file implementation of SessionRepository."""

from datetime import datetime, timedelta, timezone
from logging import getLogger

from adapter.jsonfile.store import JsonFileStore, parse_datetime
from domain.model.session import Session
from utils.credentials import generate_token

logger = getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


class JsonSessionRepository:
    def __init__(self, store: JsonFileStore):
        self.store = store

    def _to_domain(self, doc: dict) -> Session:
        return Session(
            session_id=doc['session_id'],
            user_id=doc['user_id'],
            user_agent=doc.get('user_agent', ''),
            created_at=parse_datetime(doc['created_at']),
            expires_at=parse_datetime(doc['expires_at']),
        )

    def create(
        self,
        user_id: str,
        user_agent: str,
        session_id: str | None = None,
        ttl: timedelta | None = None,
    ) -> Session:
        now = datetime.now(timezone.utc)
        doc = {
            'session_id': session_id or generate_token(),
            'user_id': user_id,
            'user_agent': user_agent,
            'created_at': now.isoformat(),
            'expires_at': (now + (ttl or DEFAULT_TTL)).isoformat(),
        }
        with self.store.transaction() as data:
            data['sessions'].append(doc)
        return self._to_domain(doc)

    def get(self, session_id: str) -> Session | None:
        doc = next((s for s in self.store.read()['sessions'] if s['session_id'] == session_id), None)
        if doc is None:
            return None

        session = self._to_domain(doc)
        if session.is_expired():
            # only an expired hit rewrites the file
            self.delete(session_id)
            logger.debug("Expired session removed", extra={"userId": session.user_id})
            return None
        return session

    def delete(self, session_id: str) -> bool:
        with self.store.transaction() as data:
            before = len(data['sessions'])
            data['sessions'] = [s for s in data['sessions'] if s['session_id'] != session_id]
            return len(data['sessions']) < before

    def delete_all_for_user(self, user_id: str) -> int:
        with self.store.transaction() as data:
            before = len(data['sessions'])
            data['sessions'] = [s for s in data['sessions'] if s['user_id'] != user_id]
            return before - len(data['sessions'])
