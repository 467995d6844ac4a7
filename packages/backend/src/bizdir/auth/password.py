"""Password hashing utilities.

bcrypt with a configurable work factor (BIZDIR_BCRYPT_ROUNDS, default 10).
bcrypt salts automatically and produces hashes starting with "$2b$".
Passwords are truncated to 72 bytes (bcrypt's limit).
"""

from typing import Optional

import bcrypt

from bizdir.config import settings


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Verify a password against its hash. Never compares plaintext."""
    if not password or not password_hash:
        return False
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False
