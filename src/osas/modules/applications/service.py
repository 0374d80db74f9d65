"""
Applications Service Layer

Listing applications for students and staff, staff status decisions and
the dashboard statistics.

Status transitions:
- Any move between pending, approved and declined is allowed
- Setting the status an application already has is rejected
- A declined application cannot be reopened while the student holds
  another pending or approved application
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.errors import ConflictError, NotFoundError, ValidationError
from osas.modules.accounts.schemas import StudentSummary
from osas.modules.applications import repository
from osas.modules.applications.models import (
    ACTIVE_STATUSES,
    Application,
    ApplicationStatus,
)
from osas.modules.applications.schemas import (
    AdminApplicationItem,
    AdminApplicationListResponse,
    ApplicationFormItem,
    DashboardStats,
    MonthlyCount,
    ScholarshipCount,
    StatusFilter,
    StudentApplicationItem,
)
from osas.modules.scholarships.service import to_item
from osas.modules.shared.ids import is_valid_uuid
from osas.modules.shared.schemas import Pagination, page_offset

logger = logging.getLogger(__name__)


class ApplicationNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__(message="Application not found", error_code="APPLICATION_NOT_FOUND")


class SameStatusError(ValidationError):
    def __init__(self, status: ApplicationStatus):
        super().__init__(
            message=f"Application is already {status.value}",
            error_code="STATUS_UNCHANGED",
        )


class ReopenConflictError(ConflictError):
    def __init__(self):
        super().__init__(
            message="Student already has another active or pending application",
            error_code="ACTIVE_APPLICATION_EXISTS",
        )


# ============================================
# Converters
# ============================================


def _forms_of(application: Application) -> list[ApplicationFormItem]:
    return [ApplicationFormItem.model_validate(form) for form in application.forms]


def to_student_item(application: Application) -> StudentApplicationItem:
    return StudentApplicationItem(
        id=application.id,
        status=application.status,
        applied_at=application.applied_at,
        scholarship=to_item(application.scholarship),
        forms=_forms_of(application),
    )


def to_admin_item(application: Application) -> AdminApplicationItem:
    return AdminApplicationItem(
        id=application.id,
        status=application.status,
        applied_at=application.applied_at,
        student=StudentSummary.model_validate(application.student),
        scholarship=to_item(application.scholarship),
        forms=_forms_of(application),
    )


# ============================================
# Listings
# ============================================


async def list_for_student(db: AsyncSession, student_id: str) -> list[StudentApplicationItem]:
    applications = await repository.list_for_student(db, student_id)
    return [to_student_item(a) for a in applications]


async def list_for_admin(
    db: AsyncSession,
    *,
    status_filter: StatusFilter = "all",
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> AdminApplicationListResponse:
    """
    Applications for staff review.

    Args:
        db: Database session
        status_filter: "all" or one application status
        search: Student name, student number or scholarship title
        page: 1-based page number
        limit: Items per page
    """
    status = None if status_filter == "all" else ApplicationStatus(status_filter)

    applications, total = await repository.get_applications_for_admin(
        db,
        status=status,
        search=search.strip() if search else None,
        skip=page_offset(page, limit),
        limit=limit,
    )
    return AdminApplicationListResponse(
        data=[to_admin_item(a) for a in applications],
        pagination=Pagination.build(page, limit, total),
    )


# ============================================
# Status Decisions
# ============================================


async def update_status(
    db: AsyncSession,
    application_id: str,
    new_status: ApplicationStatus,
) -> Application:
    """
    Move an application to a new status.

    Raises:
        ApplicationNotFoundError: Unknown application
        SameStatusError: Application already has that status
        ReopenConflictError: Reopening would give the student two active applications
    """
    if not is_valid_uuid(application_id):
        raise ApplicationNotFoundError()

    application = await repository.get_by_id(db, application_id)
    if application is None:
        raise ApplicationNotFoundError()

    if application.status == new_status:
        raise SameStatusError(new_status)

    if application.status == ApplicationStatus.DECLINED and new_status in ACTIVE_STATUSES:
        others = await repository.get_active_for_student(
            db,
            application.student_id,
            exclude_id=application.id,
        )
        if others:
            raise ReopenConflictError()

    try:
        return await repository.update_status(db, application, new_status)
    except IntegrityError as e:
        await db.rollback()
        raise ReopenConflictError() from e


# ============================================
# Dashboard
# ============================================


async def get_dashboard(db: AsyncSession, year: int) -> DashboardStats:
    stats = await repository.get_dashboard_stats(db, year)
    monthly = stats["monthly_applications"]

    return DashboardStats(
        year=year,
        total_students=stats["total_students"],
        total_applications=stats["total_applications"],
        total_scholars=stats["total_scholars"],
        total_pending=stats["total_pending"],
        monthly_applications=[
            MonthlyCount(month=month, total=monthly.get(month, 0)) for month in range(1, 13)
        ],
        status_distribution=stats["status_distribution"],
        top_scholarships=[ScholarshipCount(**row) for row in stats["top_scholarships"]],
    )
