"""
Unit tests for the background job registry.
"""

from unittest.mock import AsyncMock, patch

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from osas.core import scheduler


@pytest.fixture
def empty_registry():
    with patch.dict(scheduler._job_registry, clear=True):
        yield scheduler._job_registry


class TestJobRegistry:
    """Tests for register_job and trigger_job_manually."""

    def test_register_job_without_running_scheduler(self, empty_registry):
        job = AsyncMock()
        scheduler.register_job("sample_job", job, IntervalTrigger(hours=1))

        assert "sample_job" in empty_registry
        jobs = scheduler.list_registered_jobs()
        assert jobs == [
            {"job_id": "sample_job", "registered": True, "next_run_time": None, "is_paused": True}
        ]

    @pytest.mark.asyncio
    async def test_trigger_returns_job_result(self, empty_registry):
        job = AsyncMock(return_value={"deleted": 3})
        scheduler.register_job("sample_job", job, IntervalTrigger(hours=1))

        result = await scheduler.trigger_job_manually("sample_job")

        assert result["status"] == "success"
        assert result["result"] == {"deleted": 3}
        job.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_trigger_reports_job_failure(self, empty_registry):
        job = AsyncMock(side_effect=RuntimeError("boom"))
        scheduler.register_job("sample_job", job, IntervalTrigger(hours=1))

        result = await scheduler.trigger_job_manually("sample_job")

        assert result["status"] == "error"
        assert result["error"] == "boom"

    @pytest.mark.asyncio
    async def test_trigger_unknown_job(self, empty_registry):
        with pytest.raises(ValueError):
            await scheduler.trigger_job_manually("nope")

    def test_pause_without_scheduler(self, empty_registry):
        assert scheduler.pause_job("sample_job") is False
        assert scheduler.resume_job("sample_job") is False
