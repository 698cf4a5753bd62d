from fastapi import HTTPException

from adapter.mongodb.connection import get_database
from adapter.mongodb.user_repository import MongoUserRepository
from api.security import BcryptPasswordHasher
from port.password_hasher import PasswordHasher
from port.user_repository import UserRepository
from utils.config import get_settings


def get_user_repo() -> UserRepository:
    """Get the MongoDB user repository, raising 503 if the database is unavailable."""
    db = get_database()
    if db is None:
        raise HTTPException(status_code=503, detail="database unavailable")
    return MongoUserRepository(db)


def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_request_timeout() -> float | None:
    """Deadline in seconds applied to each repository call made for a request."""
    return get_settings().request_timeout
