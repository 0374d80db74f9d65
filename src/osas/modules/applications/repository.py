"""
Applications Repository

Database operations for scholarship applications and their documents.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import case, extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from osas.modules.accounts.models import StudentAccount
from osas.modules.applications.models import (
    ACTIVE_STATUSES,
    Application,
    ApplicationForm,
    ApplicationStatus,
)
from osas.modules.scholarships.models import Scholarship

logger = logging.getLogger(__name__)

TOP_SCHOLARSHIPS_LIMIT = 5


async def get_by_id(db: AsyncSession, application_id: str) -> Application | None:
    return await db.get(Application, application_id)


async def get_active_for_student(
    db: AsyncSession,
    student_id: str,
    *,
    exclude_id: str | None = None,
) -> list[Application]:
    """Pending or approved applications of a student."""
    query = select(Application).where(
        Application.student_id == student_id,
        Application.status.in_(ACTIVE_STATUSES),
    )
    if exclude_id:
        query = query.where(Application.id != exclude_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_with_forms(
    db: AsyncSession,
    *,
    student_id: str,
    scholarship_id: str,
    documents: list[tuple[str, str]],
    applied_at: datetime,
) -> Application:
    """
    Insert an application and one form row per document in one transaction.

    Args:
        db: Database session
        student_id: Applicant
        scholarship_id: Scholarship applied for
        documents: (form name, stored file path) pairs
        applied_at: Submission time

    Returns:
        The created application with its forms loaded
    """
    application = Application(
        student_id=student_id,
        scholarship_id=scholarship_id,
        status=ApplicationStatus.PENDING,
        applied_at=applied_at,
        forms=[
            ApplicationForm(form_name=form_name, file_path=file_path, uploaded_at=applied_at)
            for form_name, file_path in documents
        ],
    )

    db.add(application)
    await db.commit()
    await db.refresh(application)

    logger.info(
        f"Created application {application.id} for student {student_id} "
        f"with {len(documents)} documents"
    )
    return application


async def list_for_student(db: AsyncSession, student_id: str) -> list[Application]:
    """A student's applications, newest first."""
    result = await db.execute(
        select(Application)
        .where(Application.student_id == student_id)
        .order_by(Application.applied_at.desc())
    )
    return list(result.scalars().all())


async def get_applications_for_admin(
    db: AsyncSession,
    *,
    status: ApplicationStatus | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Application], int]:
    """
    Applications for the staff dashboard.

    Ordered pending first, then approved, then declined; newest first
    within each status.

    Args:
        db: Database session
        status: Filter by status (optional)
        search: Case-insensitive match on student name, student number or
                scholarship title (optional)
        skip: Records to skip
        limit: Maximum records to return

    Returns:
        Tuple of (applications on this page, total matching applications)
    """
    query = (
        select(Application)
        .join(StudentAccount, Application.student_id == StudentAccount.id)
        .join(Scholarship, Application.scholarship_id == Scholarship.id)
    )

    if status:
        query = query.where(Application.status == status)

    if search:
        search_pattern = f"%{search}%"
        query = query.where(
            or_(
                StudentAccount.first_name.ilike(search_pattern),
                StudentAccount.last_name.ilike(search_pattern),
                func.concat(StudentAccount.first_name, " ", StudentAccount.last_name).ilike(
                    search_pattern
                ),
                StudentAccount.student_number.ilike(search_pattern),
                Scholarship.title.ilike(search_pattern),
            )
        )

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    status_order = case(
        (Application.status == ApplicationStatus.PENDING, 0),
        (Application.status == ApplicationStatus.APPROVED, 1),
        else_=2,
    )
    query = query.order_by(status_order, Application.applied_at.desc()).offset(skip).limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all()), total


async def update_status(
    db: AsyncSession,
    application: Application,
    new_status: ApplicationStatus,
) -> Application:
    old_status = application.status
    application.status = new_status
    await db.commit()
    await db.refresh(application)

    logger.info(
        f"Application {application.id} status changed: {old_status.value} -> {new_status.value}"
    )
    return application


async def get_dashboard_stats(db: AsyncSession, year: int) -> dict[str, Any]:
    """
    Aggregate statistics for one calendar year.

    Returns:
        Dict with totals, per-status counts, monthly counts and the most
        applied-for scholarships
    """
    students_result = await db.execute(
        select(func.count(StudentAccount.id)).where(
            extract("year", StudentAccount.created_at) == year
        )
    )
    total_students = students_result.scalar() or 0

    in_year = extract("year", Application.applied_at) == year

    status_result = await db.execute(
        select(
            func.count(Application.id).label("total"),
            func.count(case((Application.status == ApplicationStatus.PENDING, 1))).label("pending"),
            func.count(case((Application.status == ApplicationStatus.APPROVED, 1))).label("approved"),
            func.count(case((Application.status == ApplicationStatus.DECLINED, 1))).label("declined"),
        ).where(in_year)
    )
    counts = status_result.one()

    month = extract("month", Application.applied_at)
    monthly_result = await db.execute(
        select(month.label("month"), func.count(Application.id).label("total"))
        .where(in_year)
        .group_by(month)
        .order_by(month)
    )
    monthly = {int(row.month): row.total for row in monthly_result}

    top_result = await db.execute(
        select(Scholarship.title, func.count(Application.id).label("total"))
        .join(Application, Application.scholarship_id == Scholarship.id)
        .where(in_year)
        .group_by(Scholarship.id, Scholarship.title)
        .order_by(func.count(Application.id).desc())
        .limit(TOP_SCHOLARSHIPS_LIMIT)
    )

    return {
        "total_students": total_students,
        "total_applications": counts.total or 0,
        "total_scholars": counts.approved or 0,
        "total_pending": counts.pending or 0,
        "status_distribution": {
            ApplicationStatus.PENDING.value: counts.pending or 0,
            ApplicationStatus.APPROVED.value: counts.approved or 0,
            ApplicationStatus.DECLINED.value: counts.declined or 0,
        },
        "monthly_applications": monthly,
        "top_scholarships": [
            {"title": row.title, "total": row.total} for row in top_result
        ],
    }
