"""
Applications Admin Router

Staff endpoints for reviewing applications.

Endpoints:
- GET /admin/applications - List applications with filters and pagination
- PUT /admin/applications - Approve, decline or reopen an application
- GET /admin/dashboard - Yearly statistics

All endpoints require an approved staff session. Status changes are
audit-logged and the student is notified by email after the response.
"""

import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.auth import get_current_staff
from osas.core.database import get_db
from osas.core.email import send_application_status_update
from osas.modules.accounts.models import StaffAccount
from osas.modules.applications import service
from osas.modules.applications.schemas import (
    AdminApplicationListResponse,
    DashboardResponse,
    StatusFilter,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from osas.modules.shared.schemas import MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/applications",
    response_model=AdminApplicationListResponse,
    summary="List Applications",
    description="""
Paginated applications, pending first, then approved, then declined;
newest first within each status.

**Filters:**
- `status`: all, pending, approved or declined
- `search`: Student name, student number or scholarship title
""",
)
async def list_applications(
    status_filter: StatusFilter = Query("all", alias="status"),
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> AdminApplicationListResponse:
    return await service.list_for_admin(
        db,
        status_filter=status_filter,
        search=search,
        page=page,
        limit=limit,
    )


@router.put(
    "/applications",
    response_model=StatusUpdateResponse,
    summary="Update Application Status",
    responses={
        400: {"description": "Application already has that status"},
        404: {"description": "Application not found"},
        409: {"description": "Student already holds another active application"},
    },
)
async def update_application_status(
    data: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> StatusUpdateResponse:
    application = await service.update_status(db, data.application_id, data.status)

    logger.info(
        f"Staff {staff.id} set application {application.id} to {application.status.value}"
    )

    background_tasks.add_task(
        send_application_status_update,
        to_email=application.student.email,
        first_name=application.student.first_name,
        scholarship_title=application.scholarship.title,
        status=application.status.value,
    )

    return StatusUpdateResponse(
        message=f"Application status updated to {application.status.value}",
        data=service.to_admin_item(application),
    )


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Dashboard Statistics",
)
async def dashboard(
    year: int | None = Query(None, ge=2000, le=2100, description="Defaults to the current year"),
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> DashboardResponse:
    stats = await service.get_dashboard(db, year or date.today().year)
    return DashboardResponse(data=stats)
