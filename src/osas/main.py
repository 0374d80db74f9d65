"""
OSAS API - Main Application Entry Point

Builds the FastAPI app for the scholarship office:
- /api/v1 routes for students, staff and sign-in
- ServiceError subclasses rendered as {"detail": {"error", "message"}}
- Liveness (/health) and database readiness (/ready) probes
- The rate-limit eviction job on the background scheduler
- /debug/jobs endpoints, development only
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from osas.api import api_router
from osas.core.config import settings
from osas.core.database import async_session_maker, close_db, init_db
from osas.core.errors import ServiceError
from osas.core.scheduler import (
    list_registered_jobs,
    pause_job,
    resume_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from osas.modules.rate_limits.jobs import register_rate_limit_jobs

logging.basicConfig(
    level=logging.DEBUG if settings.is_development else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Connect the database and start the job scheduler; undo both on shutdown.

    Outside production a failing database or scheduler is logged and the
    API starts anyway, so routes that need neither stay usable.
    """
    # Startup
    logger.info(f"Starting OSAS API in {settings.python_env} mode...")

    try:
        await init_db()
        logger.info("[OK] Database connected")
    except Exception as e:
        logger.error(f"[FAIL] Database connection failed: {e}")
        if settings.is_production:
            raise

    try:
        # Register jobs before starting the scheduler
        register_rate_limit_jobs()

        await start_scheduler()
        logger.info("[OK] Background scheduler started")
    except Exception as e:
        logger.error(f"[FAIL] Background scheduler failed to start: {e}")
        if settings.is_production:
            raise

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down OSAS API...")

    # Stop the scheduler first (wait for running jobs)
    await stop_scheduler()
    logger.info("[OK] Background scheduler stopped")

    await close_db()
    logger.info("[OK] Cleanup complete")


app = FastAPI(
    title="OSAS API",
    description="Office of Student Affairs and Services Scholarship API",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# Error Handlers
# ============================================


@app.exception_handler(ServiceError)
async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    """Convert service errors to the structured error shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"error": exc.error_code, "message": exc.message}},
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": {
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred. Please try again later.",
            }
        },
    )


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to OSAS API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> JSONResponse:
    """Readiness check endpoint; ready once the database answers."""
    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return JSONResponse(content={"status": "ready"})


# ============================================
# Background Job Debug Endpoints
# ============================================
# Manual triggering of background jobs for testing and debugging. Mounted
# only in development; in production jobs run on their schedule.

debug_router = APIRouter(prefix="/debug", tags=["Debug"])


@debug_router.get("/jobs")
async def list_jobs():
    """Registered jobs with their next run time and pause state."""
    return {"jobs": list_registered_jobs()}


@debug_router.post("/jobs/{job_id}/trigger")
async def trigger_job(job_id: str):
    """
    Manually trigger a background job.

    Args:
        job_id: The ID of the job to trigger. Available jobs:
            - rate_limits_evict_stale

    Raises:
        HTTPException 400: If job_id is not found.
    """
    try:
        return await trigger_job_manually(job_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@debug_router.post("/jobs/{job_id}/pause")
async def pause_job_endpoint(job_id: str):
    """Pause a scheduled job; it stays registered."""
    return {"job_id": job_id, "paused": pause_job(job_id)}


@debug_router.post("/jobs/{job_id}/resume")
async def resume_job_endpoint(job_id: str):
    return {"job_id": job_id, "resumed": resume_job(job_id)}


if settings.is_development:
    app.include_router(debug_router)
