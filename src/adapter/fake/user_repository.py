"""In-memory implementation of UserRepository for testing."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from domain.model.errors import DuplicateEmailError, UserNotFoundError
from domain.model.user import User, UserRole, normalize_email


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}

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
        if self._find_email(email):
            raise DuplicateEmailError()

        user_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc)

        user = User(
            id=user_id,
            name=name,
            email=email,
            created_at=now,
            updated_at=now,
            role=role,
            password_hash=password_hash,
            **profile,
        )
        self.store[user_id] = user
        return replace(user)

    def update(self, user_id: str, **fields: Any) -> User:
        user = self.store.get(user_id)
        if not user:
            raise UserNotFoundError()

        if 'email' in fields:
            fields['email'] = normalize_email(fields['email'])
            other = self._find_email(fields['email'])
            if other and other.id != user_id:
                raise DuplicateEmailError()

        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = datetime.now(timezone.utc)
        return replace(user)

    def delete(self, user_id: str) -> bool:
        return self.store.pop(user_id, None) is not None

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        user = self._find_email(normalize_email(email))
        return replace(user) if user else None

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return replace(user) if user else None

    def list_all(self) -> list[User]:
        return [replace(u) for u in sorted(self.store.values(), key=lambda u: u.created_at)]

    def _find_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return user
        return None
