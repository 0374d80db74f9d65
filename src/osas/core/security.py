"""
Security Utilities

Password hashing and the opaque secrets used by the session scheme:

- API key: long-lived bearer secret, one per account
- CSRF token: rotated on every successful login, single slot per account
- Reset token: emailed once, stored only as a SHA-256 hash
"""

import hashlib
import hmac
import secrets

import bcrypt

API_KEY_BYTES = 32
# Width of every api_key column; longer bearer values can never match an account
API_KEY_MAX_LENGTH = 128
CSRF_TOKEN_BYTES = 32
RESET_TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False


def generate_api_key() -> str:
    return secrets.token_hex(API_KEY_BYTES)


def generate_csrf_token() -> str:
    return secrets.token_hex(CSRF_TOKEN_BYTES)


def generate_reset_token() -> str:
    return secrets.token_urlsafe(RESET_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """
    Hash a token for storage using SHA-256.

    Args:
        token: The plain text token

    Returns:
        Hex-encoded SHA-256 digest
    """
    return hashlib.sha256(token.encode()).hexdigest()


def tokens_match(supplied: str | None, stored: str | None) -> bool:
    """Constant-time comparison of two secrets. Missing values never match."""
    if not supplied or not stored:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))
