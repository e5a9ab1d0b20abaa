"""Storage selection and service wiring for the API.

Storage is chosen once at startup: MongoDB when reachable, otherwise the JSON
file store. The fallback is logged as a warning because it changes durability
and how email uniqueness is enforced.
"""

import logging
from dataclasses import dataclass

from fastapi import HTTPException, Request

from adapter.external.google_identity import GoogleIdentityVerifier
from adapter.jsonfile.session_repository import JsonSessionRepository
from adapter.jsonfile.store import JSON_DB_PATH, JsonFileStore
from adapter.jsonfile.user_repository import JsonUserRepository
from adapter.mongodb.connection import get_mongodb_client, DATABASE_NAME
from adapter.mongodb.indexes import ensure_all_indexes
from adapter.mongodb.session_repository import MongoSessionRepository
from adapter.mongodb.user_repository import MongoUserRepository
from port.identity_verifier import IdentityVerifier
from port.session_repository import SessionRepository
from port.user_repository import UserRepository
from services.auth_service import AuthService
from services.user_service import UserService

logger = logging.getLogger(__name__)

MONGODB_BACKEND = "mongodb"
JSON_FILE_BACKEND = "jsonfile"


@dataclass
class Storage:
    backend: str
    users: UserRepository
    sessions: SessionRepository


def init_storage(json_path: str = JSON_DB_PATH) -> Storage:
    """Connect to MongoDB, falling back to the JSON file store."""
    client = get_mongodb_client()
    if client is not None:
        db = client[DATABASE_NAME]
        if ensure_all_indexes(db):
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")
        logger.info("Storage backend selected", extra={"backend": MONGODB_BACKEND})
        return Storage(
            backend=MONGODB_BACKEND,
            users=MongoUserRepository(db),
            sessions=MongoSessionRepository(db),
        )

    store = JsonFileStore(json_path)
    logger.warning(
        "storage_backend_fallback",
        extra={
            "backend": JSON_FILE_BACKEND,
            "path": str(store.path),
            "reason": "MongoDB unavailable",
        },
    )
    return Storage(
        backend=JSON_FILE_BACKEND,
        users=JsonUserRepository(store),
        sessions=JsonSessionRepository(store),
    )


def build_services(
    storage: Storage, identity_verifier: IdentityVerifier | None = None,
) -> tuple[AuthService, UserService]:
    verifier = identity_verifier or GoogleIdentityVerifier()
    auth_service = AuthService(storage.users, storage.sessions, identity_verifier=verifier)
    user_service = UserService(storage.users, storage.sessions)
    return auth_service, user_service


def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Authentication service unavailable")
    return service


def get_user_service(request: Request) -> UserService:
    service = getattr(request.app.state, "user_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="User service unavailable")
    return service
