"""Password hashing and verification with bcrypt."""

import logging
from functools import lru_cache

import bcrypt

from app.core.errors import PasswordHashingError

logger = logging.getLogger(__name__)

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12
BCRYPT_MIN_ROUNDS = 4
BCRYPT_MAX_ROUNDS = 31
# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> bytes:
    """
    Hash a plain-text password for storage. Do not store plain passwords.

    Returns the full bcrypt record ($2b$<cost>$<salt><digest>), so verification
    needs nothing else. Raises PasswordHashingError if bcrypt cannot produce one.
    """
    try:
        return bcrypt.hashpw(_password_bytes(plain_password), bcrypt.gensalt(rounds=rounds))
    except (OSError, ValueError, TypeError) as e:
        logger.exception("Password hashing failed")
        raise PasswordHashingError() from e


def verify_password(plain_password: str, hashed: bytes | str) -> bool:
    """Verify a plain password against a stored hash. False for any bad or mismatched record."""
    if isinstance(hashed, str):
        hashed = hashed.encode("utf-8")
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed)
    except (ValueError, TypeError):
        return False


@lru_cache
def _dummy_record(rounds: int) -> bytes:
    """One throwaway record per cost, shared by every PasswordHasher in the process."""
    return hash_password("dummy-password-for-timing", rounds=rounds)


class PasswordHasher:
    """bcrypt hashing at a fixed, configured cost."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        if not (BCRYPT_MIN_ROUNDS <= rounds <= BCRYPT_MAX_ROUNDS):
            raise ValueError(
                f"bcrypt rounds must be between {BCRYPT_MIN_ROUNDS} and {BCRYPT_MAX_ROUNDS}"
            )
        self.rounds = rounds
        # Built here so the first unknown-identifier login does not pay for it.
        _dummy_record(rounds)

    def hash(self, plain_password: str) -> bytes:
        return hash_password(plain_password, rounds=self.rounds)

    def verify(self, plain_password: str, hashed: bytes | str) -> bool:
        return verify_password(plain_password, hashed)

    def dummy_verify(self, plain_password: str) -> None:
        """Spend one verification's worth of time when there is no account to check against."""
        verify_password(plain_password, _dummy_record(self.rounds))
