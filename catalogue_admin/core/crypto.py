"""Password hashing and random token helpers."""

from __future__ import annotations

import secrets

import bcrypt

BCRYPT_ROUNDS = 12


def hash_password(password: str, *, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login attempt; malformed stored hashes simply fail."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def random_token(nbytes: int = 16) -> str:
    """Hex token used for stored upload names."""
    return secrets.token_hex(nbytes)


__all__ = ["hash_password", "verify_password", "random_token"]
