from typing import Protocol

from domain.model.user import User, UserCreateData, UserUpdateData


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    ``timeout`` is the caller's deadline in seconds for a single operation.
    Implementations abort and raise when it expires. ``None`` means no deadline.
    """

    def list(
        self,
        page: int = 0,
        limit: int = 10,
        country: str | None = None,
        email: str | None = None,
        timeout: float | None = None,
    ) -> list[User]:
        """List users newest first, skipping ``page`` matches. Raise PersistenceError on failure."""
        ...

    def create(self, data: UserCreateData, timeout: float | None = None) -> str:
        """Store a new user and return its identifier. Raise PersistenceError on failure."""
        ...

    def update(self, user_id: str, patch: UserUpdateData, timeout: float | None = None) -> User:
        """Apply the present fields of ``patch`` and return the updated user.

        Raise NotFoundError for unknown or malformed ids, PersistenceError otherwise.
        """
        ...

    def delete(self, user_id: str, timeout: float | None = None) -> None:
        """Remove a user. Raise NotFoundError for unknown or malformed ids."""
        ...
