"""
Background Job Scheduler

Runs OSAS maintenance jobs (currently the hourly rate-limit eviction) on an
APScheduler AsyncIOScheduler that shares the API's event loop.

Jobs are registered by feature modules into a registry. The registry is
what gets scheduled when the lifespan starts the scheduler, and what the
development-only debug endpoints list, trigger, pause and resume.

A job is an argument-free coroutine function that opens its own database
session and returns a small summary dict. A failing run is logged by the
listener; the next run happens on schedule as usual.

Usage:
    from osas.core.scheduler import register_job, start_scheduler, stop_scheduler

    register_job("rate_limits_evict_stale", evict_stale_rate_limits, IntervalTrigger(hours=1))
    await start_scheduler()
    ...
    await stop_scheduler()
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class RegisteredJob:
    func: JobFunc
    trigger: BaseTrigger


_scheduler: AsyncIOScheduler | None = None

# job id -> job, filled by register_job() before or after startup
_job_registry: dict[str, RegisteredJob] = {}

# Jobs run in UTC; scholarship dates use settings.timezone, not this
SCHEDULER_TIMEZONE = "UTC"

JOB_DEFAULTS = {
    # A run missed while the API was down is executed once, not once per missed slot
    "coalesce": True,
    "max_instances": 1,
    "misfire_grace_time": 5 * 60,
}


def _job_listener(event: JobExecutionEvent) -> None:
    """Log each scheduled run with the summary the job returned."""
    if event.exception:
        logger.error(
            f"Scheduled job {event.job_id} failed: {event.exception}",
            exc_info=event.exception,
        )
    else:
        logger.info(f"Scheduled job {event.job_id} finished: {event.retval}")


def _add_to_scheduler(job_id: str, job: RegisteredJob) -> None:
    if _scheduler is None:
        return
    _scheduler.add_job(job.func, trigger=job.trigger, id=job_id, replace_existing=True)
    logger.info(f"Scheduled job: {job_id}")


async def start_scheduler() -> AsyncIOScheduler:
    """
    Create and start the background scheduler.

    Every job registered so far is added before the scheduler starts.

    Returns:
        The started scheduler instance
    """
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        logger.warning("Scheduler already running, returning existing instance")
        return _scheduler

    logger.info("Initializing background job scheduler...")

    _scheduler = AsyncIOScheduler(
        timezone=SCHEDULER_TIMEZONE,
        job_defaults=JOB_DEFAULTS,
    )
    _scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    for job_id, job in _job_registry.items():
        _add_to_scheduler(job_id, job)

    _scheduler.start()

    logger.info(f"Background job scheduler started with {len(_job_registry)} jobs")
    return _scheduler


async def stop_scheduler() -> None:
    """Stop the scheduler, waiting for running jobs to complete."""
    global _scheduler

    if _scheduler is None or not _scheduler.running:
        logger.debug("Scheduler not running, nothing to stop")
        return

    logger.info("Stopping background job scheduler...")
    _scheduler.shutdown(wait=True)
    _scheduler = None
    logger.info("Background job scheduler stopped")


def register_job(job_id: str, func: JobFunc, trigger: BaseTrigger) -> None:
    """
    Register a job.

    Jobs registered before `start_scheduler()` are scheduled at startup;
    jobs registered afterwards are scheduled immediately.

    Args:
        job_id: Unique identifier for the job
        func: Async function to execute
        trigger: APScheduler trigger (IntervalTrigger, CronTrigger, etc.)
    """
    job = RegisteredJob(func=func, trigger=trigger)
    _job_registry[job_id] = job
    _add_to_scheduler(job_id, job)


async def trigger_job_manually(job_id: str) -> dict[str, Any]:
    """
    Run a registered job immediately, bypassing the schedule.

    Returns:
        Dict with job_id, status ("success" or "error"), executed_at and
        either the job's result or the error message

    Raises:
        ValueError: If job_id is not found in the registry
    """
    if job_id not in _job_registry:
        raise ValueError(
            f"Job {job_id} not found in registry. Available jobs: {list(_job_registry.keys())}"
        )

    executed_at = datetime.now(UTC)
    logger.info(f"Manually triggering job: {job_id}")

    try:
        result = await _job_registry[job_id].func()
    except Exception as e:
        logger.error(f"Manual execution of job {job_id} failed: {e}", exc_info=True)
        return {
            "job_id": job_id,
            "status": "error",
            "executed_at": executed_at.isoformat(),
            "error": str(e),
        }

    logger.info(f"Manual execution of job {job_id} completed successfully")
    return {
        "job_id": job_id,
        "status": "success",
        "executed_at": executed_at.isoformat(),
        "result": result,
    }


def list_registered_jobs() -> list[dict[str, Any]]:
    """List registered jobs with their next run time and pause state."""
    jobs = []

    for job_id in _job_registry:
        job_info: dict[str, Any] = {"job_id": job_id, "registered": True}

        scheduled_job = _scheduler.get_job(job_id) if _scheduler is not None else None
        if scheduled_job:
            next_run = scheduled_job.next_run_time
            job_info["next_run_time"] = next_run.isoformat() if next_run else None
            job_info["is_paused"] = next_run is None
        else:
            job_info["next_run_time"] = None
            job_info["is_paused"] = True

        jobs.append(job_info)

    return jobs


def pause_job(job_id: str) -> bool:
    """Pause a scheduled job. Returns False if it is not scheduled."""
    if _scheduler is None or _scheduler.get_job(job_id) is None:
        logger.warning(f"Job not found for pausing: {job_id}")
        return False

    _scheduler.pause_job(job_id)
    logger.info(f"Paused job: {job_id}")
    return True


def resume_job(job_id: str) -> bool:
    """Resume a paused job. Returns False if it is not scheduled."""
    if _scheduler is None or _scheduler.get_job(job_id) is None:
        logger.warning(f"Job not found for resuming: {job_id}")
        return False

    _scheduler.resume_job(job_id)
    logger.info(f"Resumed job: {job_id}")
    return True
