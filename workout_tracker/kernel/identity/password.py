"""
Password hashing utilities using bcrypt.
"""

from functools import lru_cache

import bcrypt

from workout_tracker.config import get_settings
from workout_tracker.kernel.errors import HashingError, VerificationError

# Secure default when no rounds are configured
DEFAULT_BCRYPT_ROUNDS = 12


class PasswordHasher:
    """
    Password hashing service.

    The work factor is fixed per instance; hashes produced with a different
    cost still verify and are reported by needs_rehash().
    """

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds

    @staticmethod
    def _truncate_password(password: str) -> bytes:
        """
        Encode and truncate a password to 72 bytes.

        bcrypt only uses the first 72 bytes of a password, and recent
        releases raise instead of truncating silently.
        """
        return password.encode("utf-8")[:72]

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string

        Raises:
            HashingError: If the primitive fails
        """
        pwd_bytes = self._truncate_password(password)
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            hashed = bcrypt.hashpw(pwd_bytes, salt)
        except (ValueError, MemoryError) as exc:
            raise HashingError("Failed to hash password") from exc
        return hashed.decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored hashed password

        Returns:
            True if password matches, False otherwise

        Raises:
            VerificationError: If the stored hash is malformed
        """
        pwd_bytes = self._truncate_password(plain_password)
        try:
            hash_bytes = hashed_password.encode("utf-8")
            return bcrypt.checkpw(pwd_bytes, hash_bytes)
        except (ValueError, TypeError, AttributeError) as exc:
            raise VerificationError("Stored password hash is malformed") from exc

    def needs_rehash(self, hashed_password: str) -> bool:
        """
        Check if a password hash should be regenerated.

        True when the hash was made with a different cost or cannot be parsed.
        """
        # Format: $2b$XX$<salt+digest> where XX is the cost
        parts = hashed_password.split("$")
        if len(parts) != 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) != self.rounds


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Get the process-wide hasher built from settings."""
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)

