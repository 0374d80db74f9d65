"""
Authentication and Authorization Module

Provides the request gate shared by every privileged endpoint. A request
must carry two secrets:

- Authorization: Bearer <api_key>  (long-lived, one per account)
- X-CSRF-Token: <token>           (rotated on every successful login)

The gate runs the same four steps, in order, for students and staff:

1. API key present and not oversized  else 401
2. Rate limit for the API key passes  else 429
3. CSRF header present                else 403
4. Key + token resolve to an account  else 401

Staff accounts must additionally be approved (else 403).

SECURITY NOTE:
- Tokens are compared in constant time
- Only one CSRF token is valid per account; a new login invalidates the
  previous session's token
- Secrets are never logged
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.database import get_db
from osas.core.errors import AuthError, ForbiddenError
from osas.core.rate_limit import enforce_rate_limit
from osas.core.security import API_KEY_MAX_LENGTH, tokens_match
from osas.modules.accounts.models import StaffAccount, StaffStatus, StudentAccount
from osas.modules.accounts.repository import StaffRepository, StudentRepository

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation; missing keys are reported by the gate
bearer_scheme = HTTPBearer(
    auto_error=False,
    description="API key returned at login",
)

CSRF_HEADER = "X-CSRF-Token"

AccountT = TypeVar("AccountT", StudentAccount, StaffAccount)
Resolver = Callable[[AsyncSession, str, str | None], Awaitable[AccountT | None]]


async def resolve_student(
    db: AsyncSession,
    api_key: str,
    csrf_token: str | None,
) -> StudentAccount | None:
    """
    Resolve a student from an API key and CSRF token.

    Returns:
        The student account, or None if the key is unknown or the supplied
        CSRF token does not match the stored one
    """
    student = await StudentRepository.get_by_api_key(db, api_key)
    if student is None:
        return None
    if csrf_token is not None and not tokens_match(csrf_token, student.csrf_token):
        return None
    return student


async def resolve_staff(
    db: AsyncSession,
    api_key: str,
    csrf_token: str | None,
) -> StaffAccount | None:
    """Resolve a staff member from an API key and CSRF token."""
    staff = await StaffRepository.get_by_api_key(db, api_key)
    if staff is None:
        return None
    if csrf_token is not None and not tokens_match(csrf_token, staff.csrf_token):
        return None
    return staff


async def authenticate_request(
    db: AsyncSession,
    credentials: HTTPAuthorizationCredentials | None,
    csrf_token: str | None,
    resolver: Resolver,
) -> AccountT:
    """
    Run the four-step gate.

    Raises:
        AuthError: Missing API key or unresolvable key/token pair
        RateLimitError: Request budget for the key is spent
        ForbiddenError: Missing CSRF header
    """
    api_key = credentials.credentials.strip() if credentials else ""
    if not api_key:
        raise AuthError("API key is required", error_code="API_KEY_REQUIRED")
    if len(api_key) > API_KEY_MAX_LENGTH:
        # Not a key we could have issued; never reaches the rate_limits table
        raise AuthError("Invalid API key or unauthorized access", error_code="INVALID_SESSION")

    await enforce_rate_limit(db, api_key)

    if not csrf_token or not csrf_token.strip():
        raise ForbiddenError("CSRF token is required", error_code="CSRF_TOKEN_REQUIRED")

    account = await resolver(db, api_key, csrf_token.strip())
    if account is None:
        logger.warning(f"Rejected request with unknown API key or stale CSRF token ({api_key[:8]}...)")
        raise AuthError("Invalid API key or unauthorized access", error_code="INVALID_SESSION")

    return account


async def get_current_student(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    csrf_token: str | None = Header(None, alias=CSRF_HEADER),
    db: AsyncSession = Depends(get_db),
) -> StudentAccount:
    """Dependency returning the authenticated student."""
    return await authenticate_request(db, credentials, csrf_token, resolve_student)


async def get_current_staff(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    csrf_token: str | None = Header(None, alias=CSRF_HEADER),
    db: AsyncSession = Depends(get_db),
) -> StaffAccount:
    """
    Dependency returning the authenticated, approved staff member.

    Raises:
        ForbiddenError: If the staff account is pending or declined
    """
    staff = await authenticate_request(db, credentials, csrf_token, resolve_staff)

    if staff.status != StaffStatus.APPROVED:
        logger.warning(f"Blocked request from unapproved staff account {staff.id}")
        raise ForbiddenError(
            "Your account is pending approval. Please contact administrator.",
            error_code="ACCOUNT_NOT_APPROVED",
        )

    return staff
