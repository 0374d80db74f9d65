"""
Core module - Configuration, database, security, and utilities.
"""

from osas.core.config import get_settings, settings
from osas.core.database import Base, close_db, get_db, init_db
from osas.core.errors import ServiceError
from osas.core.security import (
    generate_api_key,
    generate_csrf_token,
    hash_password,
    tokens_match,
    verify_password,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Errors
    "ServiceError",
    # Security
    "hash_password",
    "verify_password",
    "generate_api_key",
    "generate_csrf_token",
    "tokens_match",
]
