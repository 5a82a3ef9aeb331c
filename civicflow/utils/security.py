"""
Security utilities: credential hashing for the local profile cache.

The local cache is a convenience, not the security boundary; credentials are
verified by the authentication provider. Hashing only keeps clear-text
passwords out of the persisted profile blob.
"""

import hashlib
import hmac
import logging
import secrets
from typing import Optional

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 120_000
_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """
    Hash a password with PBKDF2-SHA256 and a random salt.

    Returns:
        "pbkdf2_sha256$<iterations>$<salt>$<hex digest>"
    """
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS)
    return f"{_ALGORITHM}${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Exact-match check of a password against a stored hash."""
    try:
        algorithm, iterations, salt, expected = password_hash.split("$")
    except ValueError:
        logger.warning("Stored password hash has an unexpected format")
        return False

    if algorithm != _ALGORITHM:
        logger.warning(f"Unsupported password hash algorithm: {algorithm}")
        return False

    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def normalize_email(email: str) -> str:
    """Case-insensitive email key."""
    return email.strip().lower()
