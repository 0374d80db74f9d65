"""
Unit tests for the stale rate-limit eviction job.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from osas.core import scheduler
from osas.modules.rate_limits.jobs import (
    JOB_ID_EVICT_STALE,
    evict_stale_rate_limits,
    register_rate_limit_jobs,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


class TestEvictStaleRateLimits:
    @pytest.mark.asyncio
    async def test_deletes_records_older_than_retention(self, mock_db):
        session_cm = MagicMock()
        session_cm.__aenter__ = AsyncMock(return_value=mock_db)
        session_cm.__aexit__ = AsyncMock(return_value=False)

        with (
            patch(
                "osas.modules.rate_limits.jobs.async_session_maker", return_value=session_cm
            ),
            patch("osas.modules.rate_limits.jobs.repository") as mock_repo,
        ):
            mock_repo.delete_stale = AsyncMock(return_value=3)

            result = await evict_stale_rate_limits(now=NOW)

        cutoff = NOW - timedelta(hours=24)
        mock_repo.delete_stale.assert_awaited_once_with(mock_db, cutoff)
        assert result == {"cutoff": cutoff.isoformat(), "deleted": 3}


class TestRegisterRateLimitJobs:
    def test_registers_hourly_job(self):
        with (
            patch.dict(scheduler._job_registry, clear=True),
            patch("osas.core.scheduler._scheduler", None),
        ):
            register_rate_limit_jobs()
            job = scheduler._job_registry[JOB_ID_EVICT_STALE]

        assert job.func is evict_stale_rate_limits
        assert isinstance(job.trigger, IntervalTrigger)
        assert job.trigger.interval == timedelta(hours=1)
