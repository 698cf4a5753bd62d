"""Password hashing for credentials stored at rest."""

import logging

import bcrypt

from domain.model.errors import HashingError
from utils.config import DEFAULT_BCRYPT_ROUNDS

logger = logging.getLogger(__name__)


class BcryptPasswordHasher:
    """Hash passwords with bcrypt and a fresh random salt per call.

    Args:
        rounds: bcrypt cost factor (2^rounds iterations), between 4 and 31
    """

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash password using bcrypt.

        Args:
            plaintext: Plain text password

        Returns:
            Bcrypt hashed password as string

        Raises:
            HashingError: if bcrypt rejects the input (e.g. longer than 72 bytes)
        """
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            hashed = bcrypt.hashpw(plaintext.encode('utf-8'), salt)
        except (ValueError, TypeError) as e:
            raise HashingError(f"failed to hash password: {e}") from e
        return hashed.decode('utf-8')

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check a plain text password against a stored bcrypt hash."""
        try:
            return bcrypt.checkpw(plaintext.encode('utf-8'), digest.encode('utf-8'))
        except ValueError as e:
            logger.debug(f"bcrypt verification failed: {e}")
            return False
