# goodie/core/security.py
"""Password hashing with bcrypt."""

from functools import lru_cache

import bcrypt

from goodie.core.config import get_settings
from goodie.core.errors import ValidationError


class PasswordHasher:
    """
    Salted, adaptive one-way hashing for credentials.

    The salt and work factor are embedded in the digest, so only the
    work factor used for *new* hashes is configurable. At the default
    of 10 rounds a single verification costs tens of milliseconds.

    Examples
    --------
    >>> hasher = PasswordHasher(rounds=4)
    >>> digest = hasher.hash("secret1")
    >>> hasher.compare("secret1", digest)
    True
    >>> hasher.compare("wrong", digest)
    False
    """

    def __init__(self, rounds: int = 10):
        self._rounds = rounds

    def hash(self, plaintext: str) -> str:
        """
        Hash a plaintext password.

        Raises
        ------
        ValueError
            If the password is empty.
        """
        if not plaintext:
            raise ValueError("Password cannot be empty.")
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def compare(self, plaintext: str | None, digest: str | None) -> bool:
        """
        Check a plaintext password against a stored digest.

        Returns False (never raises) when either argument is missing
        or the digest is not a valid bcrypt hash.
        """
        if not plaintext or not digest:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("utf-8"))
        except (ValueError, TypeError):
            return False


# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def check_password_policy(password: str | None, min_length: int) -> None:
    """
    Raise ValidationError (400) when a new password is unacceptable.
    """
    if not password or len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters long.")
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"Password cannot exceed {BCRYPT_MAX_BYTES} bytes.")


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().PASSWORD_HASH_ROUNDS)
