"""JSON file implementation of UserRepository.

Used when MongoDB is unreachable. Email uniqueness is enforced here, inside
the store transaction, since the file has no unique index.
"""

import uuid
from datetime import datetime, timezone
from logging import getLogger
from typing import Any

from adapter.jsonfile.store import JsonFileStore, parse_datetime
from domain.model.errors import DuplicateEmailError, UserNotFoundError
from domain.model.user import LOCAL_PROVIDER, User, UserRole, normalize_email

logger = getLogger(__name__)

_DATETIME_FIELDS = ('created_at', 'updated_at', 'last_login_at')


class JsonUserRepository:
    def __init__(self, store: JsonFileStore):
        self.store = store

    def _to_domain(self, doc: dict) -> User:
        return User(
            id=doc['id'],
            name=doc['name'],
            email=doc['email'],
            created_at=parse_datetime(doc['created_at']),
            updated_at=parse_datetime(doc['updated_at']),
            role=UserRole(doc.get('role', UserRole.CUSTOMER.value)),
            password_hash=doc.get('password_hash'),
            first_name=doc.get('first_name'),
            last_name=doc.get('last_name'),
            avatar=doc.get('avatar'),
            provider=doc.get('provider', LOCAL_PROVIDER),
            provider_id=doc.get('provider_id'),
            is_email_verified=doc.get('is_email_verified', False),
            last_login_at=parse_datetime(doc.get('last_login_at')),
        )

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        email: str,
        password_hash: str,
        name: str,
        role: UserRole = UserRole.CUSTOMER,
        **profile: Any,
    ) -> User:
        email = normalize_email(email)
        now = datetime.now(timezone.utc).isoformat()
        doc = {
            'provider': LOCAL_PROVIDER,
            'is_email_verified': False,
            **_serialize(profile),
            'id': uuid.uuid4().hex,
            'email': email,
            'password_hash': password_hash,
            'name': name,
            'role': UserRole(role).value,
            'created_at': now,
            'updated_at': now,
        }
        with self.store.transaction() as data:
            if any(u['email'] == email for u in data['users']):
                logger.warning("User creation failed: email already exists", extra={"email": email})
                raise DuplicateEmailError()
            data['users'].append(doc)

        logger.info("User created", extra={"userId": doc['id'], "email": email})
        return self._to_domain(doc)

    def update(self, user_id: str, **fields: Any) -> User:
        changes = _serialize(fields)
        if 'email' in changes:
            changes['email'] = normalize_email(changes['email'])
        changes['updated_at'] = datetime.now(timezone.utc).isoformat()

        with self.store.transaction() as data:
            doc = _find(data['users'], 'id', user_id)
            if doc is None:
                raise UserNotFoundError()
            if 'email' in changes:
                other = _find(data['users'], 'email', changes['email'])
                if other is not None and other['id'] != user_id:
                    raise DuplicateEmailError()
            doc.update(changes)

        return self._to_domain(doc)

    def delete(self, user_id: str) -> bool:
        with self.store.transaction() as data:
            before = len(data['users'])
            data['users'] = [u for u in data['users'] if u['id'] != user_id]
            return len(data['users']) < before

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        doc = _find(self.store.read()['users'], 'email', normalize_email(email))
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        doc = _find(self.store.read()['users'], 'id', user_id)
        return self._to_domain(doc) if doc else None

    def list_all(self) -> list[User]:
        users = [self._to_domain(doc) for doc in self.store.read()['users']]
        return sorted(users, key=lambda u: u.created_at)


def _find(docs: list[dict], key: str, value: str) -> dict | None:
    for doc in docs:
        if doc.get(key) == value:
            return doc
    return None


def _serialize(fields: dict[str, Any]) -> dict[str, Any]:
    out = {}
    for key, value in fields.items():
        if key in _DATETIME_FIELDS and isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, UserRole):
            value = value.value
        out[key] = value
    return out
