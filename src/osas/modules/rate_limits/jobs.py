"""
Rate Limit Background Jobs

Evicts rate-limit records whose window started longer ago than the
retention period. Keys that stop sending requests would otherwise keep
their row forever.

Schedule:
- Runs hourly
- Can be triggered manually via the debug job endpoints
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from osas.core.config import settings
from osas.core.database import async_session_maker
from osas.core.scheduler import register_job
from osas.modules.rate_limits import repository

logger = logging.getLogger(__name__)

JOB_ID_EVICT_STALE = "rate_limits_evict_stale"


async def evict_stale_rate_limits(now: datetime | None = None) -> dict[str, Any]:
    """
    Delete rate-limit records older than the retention period.

    Returns:
        Dict with the cutoff used and the number of deleted records
    """
    now = now or datetime.now(UTC)
    cutoff = now - timedelta(hours=settings.rate_limit_retention_hours)

    async with async_session_maker() as db:
        deleted = await repository.delete_stale(db, cutoff)

    logger.info(f"Evicted {deleted} stale rate-limit records (window before {cutoff.isoformat()})")
    return {"cutoff": cutoff.isoformat(), "deleted": deleted}


def register_rate_limit_jobs() -> None:
    """Register rate-limit maintenance jobs with the scheduler."""
    logger.info("Registering rate-limit background jobs...")

    register_job(
        job_id=JOB_ID_EVICT_STALE,
        func=evict_stale_rate_limits,
        trigger=IntervalTrigger(hours=1),
    )
    logger.info(f"Registered job: {JOB_ID_EVICT_STALE} (interval: 1 hour)")
