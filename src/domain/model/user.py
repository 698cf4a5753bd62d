# domain/model/user.py

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime


class _Unset:
    """Marker for a patch field that was not supplied."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass
class User:
    """Domain model representing a stored user.

    Has no password attribute; the hash only lives in storage.
    """
    id: str
    first_name: str
    last_name: str
    nickname: str
    email: str
    country: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class UserCreateData:
    """Input for creating a user. ``password`` holds the hash once it reaches a repository."""
    first_name: str
    last_name: str
    nickname: str
    email: str
    country: str
    password: str


@dataclass(frozen=True)
class UserUpdateData:
    """Partial update. Fields left as ``UNSET`` are not touched in storage."""
    first_name: str | _Unset = UNSET
    last_name: str | _Unset = UNSET
    nickname: str | _Unset = UNSET
    email: str | _Unset = UNSET
    country: str | _Unset = UNSET
    password: str | _Unset = UNSET

    def present_fields(self) -> dict[str, str]:
        """Return only the fields that were supplied, keyed by attribute name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def with_password(self, password: str | _Unset) -> UserUpdateData:
        return replace(self, password=password)
