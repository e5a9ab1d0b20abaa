"""MongoDB implementation of SessionRepository."""

from datetime import datetime, timedelta, timezone
from logging import getLogger

from pymongo.database import Database
from pymongo.errors import PyMongoError

from adapter.mongodb import SESSIONS_COLLECTION_NAME
from domain.model.session import Session
from utils.credentials import generate_token

logger = getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


class MongoSessionRepository:
    def __init__(self, db: Database):
        self.collection = db[SESSIONS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for sessions collection.

        The TTL index lets MongoDB sweep expired sessions in the background;
        get() still checks expiry because the sweeper runs only once a minute.
        """
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('session_id', 1)], 'idx_sessions_session_id', unique=True)
            create_index_safe(self.collection, [('user_id', 1)], 'idx_sessions_user_id')
            create_index_safe(
                self.collection, [('expires_at', 1)], 'idx_sessions_expires_at', expireAfterSeconds=0,
            )
            return True
        except PyMongoError as e:
            logger.error("Failed to create sessions indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> Session:
        return Session(
            session_id=doc['session_id'],
            user_id=doc['user_id'],
            user_agent=doc.get('user_agent', ''),
            created_at=doc['created_at'],
            expires_at=doc['expires_at'],
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
            'created_at': now,
            'expires_at': now + (ttl or DEFAULT_TTL),
        }
        try:
            self.collection.insert_one(doc)
        except PyMongoError as e:
            logger.error("Failed to create session", extra={"userId": user_id, "error": str(e)})
            raise

        logger.debug("Session created", extra={"userId": user_id, "userAgent": user_agent})
        return self._to_domain(doc)

    def get(self, session_id: str) -> Session | None:
        try:
            doc = self.collection.find_one({'session_id': session_id})
        except PyMongoError as e:
            logger.error("Failed to get session", extra={"error": str(e)})
            raise

        if not doc:
            return None

        session = self._to_domain(doc)
        if session.is_expired():
            self.delete(session_id)
            logger.debug("Expired session removed", extra={"userId": session.user_id})
            return None
        return session

    def delete(self, session_id: str) -> bool:
        try:
            result = self.collection.delete_one({'session_id': session_id})
        except PyMongoError as e:
            logger.error("Failed to delete session", extra={"error": str(e)})
            raise
        return result.deleted_count > 0

    def delete_all_for_user(self, user_id: str) -> int:
        try:
            result = self.collection.delete_many({'user_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to delete user sessions", extra={"userId": user_id, "error": str(e)})
            raise
        return result.deleted_count
