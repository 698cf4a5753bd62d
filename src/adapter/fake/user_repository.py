"""In-memory implementation of UserRepository for testing."""

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from bson import ObjectId

from adapter.mongodb.user_repository import to_object_id
from domain.model.errors import NotFoundError
from domain.model.user import User, UserCreateData, UserUpdateData


class FakeUserRepository:
    def __init__(self):
        self.store: dict[ObjectId, User] = {}
        # Password hashes live beside the users, as in the real collection
        self.passwords: dict[ObjectId, str] = {}
        self._lock = threading.Lock()

    # ── write operations ─────────────────────────────────────

    def create(self, data: UserCreateData, timeout: float | None = None) -> str:
        oid = ObjectId()
        now = datetime.now(timezone.utc)

        user = User(
            id=str(oid),
            first_name=data.first_name,
            last_name=data.last_name,
            nickname=data.nickname,
            email=data.email,
            country=data.country,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self.store[oid] = user
            self.passwords[oid] = data.password
        return user.id

    def update(self, user_id: str, patch: UserUpdateData, timeout: float | None = None) -> User:
        oid = to_object_id(user_id)
        changes = patch.present_fields()
        password = changes.pop('password', None)

        with self._lock:
            user = self.store.get(oid)
            if user is None:
                raise NotFoundError(f"update failed for id '{user_id}'")

            now = datetime.now(timezone.utc)
            updated_at = max(now, user.updated_at + timedelta(microseconds=1))
            user = replace(user, updated_at=updated_at, **changes)
            self.store[oid] = user
            if password is not None:
                self.passwords[oid] = password
        return replace(user)

    def delete(self, user_id: str, timeout: float | None = None) -> None:
        oid = to_object_id(user_id)
        with self._lock:
            if self.store.pop(oid, None) is None:
                raise NotFoundError(f"delete failed for id '{user_id}'")
            self.passwords.pop(oid, None)

    # ── read operations ──────────────────────────────────────

    def list(
        self,
        page: int = 0,
        limit: int = 10,
        country: str | None = None,
        email: str | None = None,
        timeout: float | None = None,
    ) -> list[User]:
        if page < 0 or limit < 1:
            raise ValueError(f"invalid window: page={page}, limit={limit}")

        with self._lock:
            matches = [
                (oid, user) for oid, user in self.store.items()
                if (country is None or user.country == country)
                and (email is None or user.email == email)
            ]
        matches.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return [replace(user) for _, user in matches[page:page + limit]]
