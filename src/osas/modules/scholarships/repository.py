"""
Scholarships Repository

Database operations for scholarships, courses and required forms.
"""

import logging

from sqlalchemy import and_, exists, func, not_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from osas.modules.scholarships.models import (
    Course,
    Scholarship,
    ScholarshipForm,
    ScholarshipStatus,
    scholarship_courses,
    scholarship_form_requirements,
)

logger = logging.getLogger(__name__)


# ============================================
# Lookups
# ============================================


async def get_by_id(db: AsyncSession, scholarship_id: str) -> Scholarship | None:
    return await db.get(Scholarship, scholarship_id)


async def get_by_title(db: AsyncSession, title: str) -> Scholarship | None:
    result = await db.execute(
        select(Scholarship).where(func.lower(Scholarship.title) == title.lower())
    )
    return result.scalar_one_or_none()


async def get_course_by_code(db: AsyncSession, course_code: str) -> Course | None:
    result = await db.execute(
        select(Course).where(func.upper(Course.course_code) == course_code.upper())
    )
    return result.scalar_one_or_none()


async def get_courses_by_codes(db: AsyncSession, course_codes: list[str]) -> list[Course]:
    upper_codes = [code.upper() for code in course_codes]
    result = await db.execute(
        select(Course).where(func.upper(Course.course_code).in_(upper_codes))
    )
    return list(result.scalars().all())


async def get_forms_by_ids(db: AsyncSession, form_ids: list[str]) -> list[ScholarshipForm]:
    result = await db.execute(select(ScholarshipForm).where(ScholarshipForm.id.in_(form_ids)))
    return list(result.scalars().all())


async def get_course_codes(db: AsyncSession, scholarship_id: str) -> list[str]:
    """Course codes linked to a scholarship (empty means open to all)."""
    result = await db.execute(
        select(Course.course_code)
        .join(scholarship_courses, scholarship_courses.c.course_id == Course.id)
        .where(scholarship_courses.c.scholarship_id == scholarship_id)
        .order_by(Course.course_code)
    )
    return list(result.scalars().all())


async def get_required_forms(db: AsyncSession, scholarship_id: str) -> list[ScholarshipForm]:
    """Forms an application to this scholarship must include, ordered by name."""
    result = await db.execute(
        select(ScholarshipForm)
        .join(
            scholarship_form_requirements,
            scholarship_form_requirements.c.form_id == ScholarshipForm.id,
        )
        .where(scholarship_form_requirements.c.scholarship_id == scholarship_id)
        .order_by(ScholarshipForm.name)
    )
    return list(result.scalars().all())


# ============================================
# Listings
# ============================================


def _visible_to_course(course_code: str):
    """
    Filter matching scholarships open to `course_code`.

    A scholarship with no course rows is open to every course.
    """
    has_no_courses = not_(
        exists().where(scholarship_courses.c.scholarship_id == Scholarship.id)
    )
    has_matching_course = exists().where(
        and_(
            scholarship_courses.c.scholarship_id == Scholarship.id,
            scholarship_courses.c.course_id == Course.id,
            func.upper(Course.course_code) == course_code.upper(),
        )
    )
    return or_(has_no_courses, has_matching_course)


async def _paginate(
    db: AsyncSession,
    query,
    skip: int,
    limit: int,
) -> tuple[list[Scholarship], int]:
    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    result = await db.execute(
        query.order_by(Scholarship.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


async def list_for_course(
    db: AsyncSession,
    course_code: str,
    *,
    search: str | None = None,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Scholarship], int]:
    """
    Scholarships a student of `course_code` may see, newest first.

    Returns:
        Tuple of (scholarships on this page, total visible scholarships)
    """
    query = select(Scholarship).where(_visible_to_course(course_code))
    if search:
        query = query.where(Scholarship.title.ilike(f"%{search}%"))
    return await _paginate(db, query, skip, limit)


async def list_all(
    db: AsyncSession,
    *,
    status: ScholarshipStatus | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Scholarship], int]:
    """All scholarships for staff, newest first."""
    query = select(Scholarship)
    if status:
        query = query.where(Scholarship.status == status)
    if search:
        query = query.where(Scholarship.title.ilike(f"%{search}%"))
    return await _paginate(db, query, skip, limit)


# ============================================
# Writes
# ============================================


async def create(
    db: AsyncSession,
    *,
    courses: list[Course],
    required_forms: list[ScholarshipForm],
    **fields,
) -> Scholarship:
    """Create a scholarship together with its course and form links."""
    scholarship = Scholarship(**fields)
    scholarship.courses = courses
    scholarship.required_forms = required_forms

    db.add(scholarship)
    await db.commit()
    await db.refresh(scholarship)

    logger.info(f"Created scholarship {scholarship.id} - {scholarship.title}")
    return scholarship


async def update(
    db: AsyncSession,
    scholarship: Scholarship,
    *,
    courses: list[Course] | None = None,
    required_forms: list[ScholarshipForm] | None = None,
    **fields,
) -> Scholarship:
    """
    Apply column changes and, where given, replace the course and form links.

    `None` for `courses` or `required_forms` leaves those links untouched;
    an empty list removes them all.
    """
    for name, value in fields.items():
        setattr(scholarship, name, value)
    if courses is not None:
        scholarship.courses = courses
    if required_forms is not None:
        scholarship.required_forms = required_forms

    await db.commit()
    await db.refresh(scholarship)

    logger.info(f"Updated scholarship {scholarship.id} - {scholarship.title}")
    return scholarship
