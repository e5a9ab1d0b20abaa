"""MongoDB implementation of UserRepository."""

import uuid
from datetime import datetime, timezone
from logging import getLogger
from typing import Any

from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb import USERS_COLLECTION_NAME
from domain.model.errors import DuplicateEmailError, UserNotFoundError
from domain.model.user import LOCAL_PROVIDER, User, UserRole, normalize_email

logger = getLogger(__name__)


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            name=doc['name'],
            email=doc['email'],
            created_at=doc['created_at'],
            updated_at=doc['updated_at'],
            role=UserRole(doc.get('role', UserRole.CUSTOMER.value)),
            password_hash=doc.get('password_hash'),
            first_name=doc.get('first_name'),
            last_name=doc.get('last_name'),
            avatar=doc.get('avatar'),
            provider=doc.get('provider', LOCAL_PROVIDER),
            provider_id=doc.get('provider_id'),
            is_email_verified=doc.get('is_email_verified', False),
            last_login_at=doc.get('last_login_at'),
        )

    def create(
        self,
        email: str,
        password_hash: str,
        name: str,
        role: UserRole = UserRole.CUSTOMER,
        **profile: Any,
    ) -> User:
        """Create a new user and return the User object."""
        user_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc)
        user_doc = {
            'provider': LOCAL_PROVIDER,
            'is_email_verified': False,
            **profile,
            '_id': user_id,
            'email': normalize_email(email),
            'password_hash': password_hash,
            'name': name,
            'role': UserRole(role).value,
            'created_at': now,
            'updated_at': now,
        }
        try:
            self.collection.insert_one(user_doc)
        except DuplicateKeyError:
            logger.warning("User creation failed: email already exists", extra={"email": user_doc['email']})
            raise DuplicateEmailError()
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"email": user_doc['email'], "error": str(e)})
            raise

        logger.info("User created", extra={"userId": user_id, "email": user_doc['email']})
        return self._to_domain(user_doc)

    def update(self, user_id: str, **fields: Any) -> User:
        """Merge fields into the user document and bump updated_at."""
        changes = dict(fields)
        if 'email' in changes:
            changes['email'] = normalize_email(changes['email'])
        if 'role' in changes:
            changes['role'] = UserRole(changes['role']).value
        changes['updated_at'] = datetime.now(timezone.utc)

        try:
            doc = self.collection.find_one_and_update(
                {'_id': user_id},
                {'$set': changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            logger.warning("User update failed: email already exists", extra={"userId": user_id})
            raise DuplicateEmailError()
        except PyMongoError as e:
            logger.error("Failed to update user", extra={"userId": user_id, "error": str(e)})
            raise

        if doc is None:
            raise UserNotFoundError()
        return self._to_domain(doc)

    def delete(self, user_id: str) -> bool:
        try:
            result = self.collection.delete_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to delete user", extra={"userId": user_id, "error": str(e)})
            raise
        return result.deleted_count > 0

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'email': normalize_email(email)})
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"email": email, "error": str(e)})
            raise
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            raise
        return self._to_domain(doc) if doc else None

    def list_all(self) -> list[User]:
        try:
            docs = self.collection.find({}).sort('created_at', ASCENDING)
            return [self._to_domain(doc) for doc in docs]
        except PyMongoError as e:
            logger.error("Failed to list users", extra={"error": str(e)})
            raise
