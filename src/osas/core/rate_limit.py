"""
Rate Limiting Module

Fixed-window request limiter keyed by API key and persisted in the
database, so every instance of the API shares the same counters.

Algorithm (per API key):
- No record: insert (count=1, window_start=now) and allow
- Window elapsed: reset to (1, now) and allow
- count < capacity: increment and allow
- Otherwise: deny

SECURITY: The check runs before the session is resolved, so a flood of
requests with a stolen or guessed key is throttled before any account
lookup happens. Read-then-write is not atomic; concurrent requests on one
key may slightly exceed the nominal capacity.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.config import settings
from osas.core.errors import RateLimitError
from osas.modules.rate_limits import repository

logger = logging.getLogger(__name__)


async def check_rate_limit(
    db: AsyncSession,
    api_key: str,
    *,
    capacity: int | None = None,
    window_seconds: int | None = None,
    now: datetime | None = None,
) -> bool:
    """
    Count one request against the key's current window.

    Args:
        db: Database session
        api_key: The caller's API key
        capacity: Requests allowed per window (defaults to settings)
        window_seconds: Window length (defaults to settings)
        now: Current time (injectable for tests)

    Returns:
        True if the request is allowed, False if the window is exhausted
    """
    capacity = capacity if capacity is not None else settings.rate_limit_capacity
    window_seconds = window_seconds if window_seconds is not None else settings.rate_limit_window_seconds
    now = now or datetime.now(UTC)

    record = await repository.get_by_api_key(db, api_key)

    if record is None:
        if await repository.insert_first_request(db, api_key, now):
            return True
        # Lost the insert race to a concurrent request; count against its row
        record = await repository.get_by_api_key(db, api_key)
        if record is None:
            return True

    elapsed = (now - record.window_start).total_seconds()

    if elapsed >= window_seconds:
        record.request_count = 1
        record.window_start = now
    elif record.request_count < capacity:
        record.request_count += 1
    else:
        return False

    await repository.save(db, record)
    return True


async def seconds_until_reset(
    db: AsyncSession,
    api_key: str,
    *,
    window_seconds: int | None = None,
    now: datetime | None = None,
) -> int:
    """Seconds left in the key's current window (used for Retry-After)."""
    window_seconds = window_seconds if window_seconds is not None else settings.rate_limit_window_seconds
    now = now or datetime.now(UTC)

    record = await repository.get_by_api_key(db, api_key)
    if record is None:
        return 0

    remaining = window_seconds - int((now - record.window_start).total_seconds())
    return max(remaining, 1)


async def enforce_rate_limit(db: AsyncSession, api_key: str) -> None:
    """
    Count the request and raise if the key is over its budget.

    Raises:
        RateLimitError: If the window is exhausted
    """
    if await check_rate_limit(db, api_key):
        return

    retry_after = await seconds_until_reset(db, api_key)
    # Only a key prefix is logged
    logger.warning(f"Rate limit exceeded for API key {api_key[:8]}...")
    raise RateLimitError(retry_after_seconds=retry_after)
