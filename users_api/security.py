"""Password hashing with bcrypt."""

import logging

import bcrypt

from .errors import PasswordHashingError

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 10


class PasswordHasher:
    """Salted, slow one-way hashing with a fixed cost factor."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Bcrypt hashed password as string

        Raises:
            PasswordHashingError: if bcrypt rejects the input
        """
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        except (ValueError, TypeError) as e:
            logger.error(f"[Security] Password hashing failed: {type(e).__name__}")
            raise PasswordHashingError() from e
        return hashed.decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Return True if plain_password matches hashed_password."""
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            # Malformed hash or oversized input
            return False
