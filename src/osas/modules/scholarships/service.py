"""
Scholarships Service Layer

Listing scholarships for students (filtered by course eligibility) and
for staff, and the staff-side writes: create, edit and the archiving
soft delete.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.errors import ConflictError, NotFoundError, ValidationError
from osas.modules.accounts.models import StudentAccount
from osas.modules.scholarships import repository
from osas.modules.scholarships.eligibility import course_codes_of
from osas.modules.scholarships.models import (
    Course,
    Scholarship,
    ScholarshipForm,
    ScholarshipStatus,
)
from osas.modules.scholarships.schemas import (
    ScholarshipCreate,
    ScholarshipFormItem,
    ScholarshipItem,
    ScholarshipListResponse,
    ScholarshipUpdate,
)
from osas.modules.shared.ids import is_valid_uuid
from osas.modules.shared.schemas import Pagination, page_offset
from osas.modules.shared.text import title_case

logger = logging.getLogger(__name__)

# Course code meaning "every course" in create and update requests
ALL_COURSES_OPTION = "all"


class ScholarshipNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__(message="Scholarship not found", error_code="SCHOLARSHIP_NOT_FOUND")


class DuplicateScholarshipError(ConflictError):
    def __init__(self):
        super().__init__(
            message="Scholarship title already exists",
            error_code="DUPLICATE_SCHOLARSHIP",
        )


def to_item(scholarship: Scholarship) -> ScholarshipItem:
    """Convert a Scholarship model to its listing schema."""
    return ScholarshipItem(
        id=scholarship.id,
        title=scholarship.title,
        description=scholarship.description,
        amount=scholarship.amount,
        status=scholarship.status,
        start_date=scholarship.start_date,
        end_date=scholarship.end_date,
        course_codes=course_codes_of(scholarship),
        scholarship_forms=[
            ScholarshipFormItem.model_validate(form) for form in scholarship.required_forms
        ],
        created_at=scholarship.created_at,
    )


async def get_scholarship(db: AsyncSession, scholarship_id: str) -> Scholarship:
    """
    Raises:
        ScholarshipNotFoundError: Unknown or malformed id
    """
    if not is_valid_uuid(scholarship_id):
        raise ScholarshipNotFoundError()
    scholarship = await repository.get_by_id(db, scholarship_id)
    if scholarship is None:
        raise ScholarshipNotFoundError()
    return scholarship


async def list_for_student(
    db: AsyncSession,
    student: StudentAccount,
    *,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
) -> ScholarshipListResponse:
    """Scholarships the student's course is eligible for."""
    scholarships, total = await repository.list_for_course(
        db,
        student.course,
        search=search.strip() if search else None,
        skip=page_offset(page, limit),
        limit=limit,
    )
    return ScholarshipListResponse(
        data=[to_item(s) for s in scholarships],
        pagination=Pagination.build(page, limit, total),
    )


async def list_for_staff(
    db: AsyncSession,
    *,
    status: ScholarshipStatus | None = None,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
) -> ScholarshipListResponse:
    scholarships, total = await repository.list_all(
        db,
        status=status,
        search=search.strip() if search else None,
        skip=page_offset(page, limit),
        limit=limit,
    )
    return ScholarshipListResponse(
        data=[to_item(s) for s in scholarships],
        pagination=Pagination.build(page, limit, total),
    )


async def _resolve_courses(db: AsyncSession, course_codes: list[str]) -> list[Course]:
    """
    Courses for the requested codes.

    An empty list, or one containing "all", resolves to no courses
    (open to every course).

    Raises:
        NotFoundError: Unknown course code
    """
    requested_codes = [code.strip() for code in course_codes if code.strip()]
    if not requested_codes or ALL_COURSES_OPTION in {c.lower() for c in requested_codes}:
        return []

    courses = await repository.get_courses_by_codes(db, requested_codes)
    found = {course.course_code.upper() for course in courses}
    for code in requested_codes:
        if code.upper() not in found:
            raise NotFoundError(f"Course code '{code}' not found", error_code="COURSE_NOT_FOUND")
    return courses


async def _resolve_forms(db: AsyncSession, form_ids: list[str]) -> list[ScholarshipForm]:
    """
    Raises:
        NotFoundError: Unknown or malformed form id
    """
    if not form_ids:
        return []

    for form_id in form_ids:
        if not is_valid_uuid(form_id):
            raise NotFoundError(
                f"Scholarship form ID {form_id} not found",
                error_code="FORM_NOT_FOUND",
            )
    forms = await repository.get_forms_by_ids(db, form_ids)
    found_ids = {form.id for form in forms}
    for form_id in form_ids:
        if form_id not in found_ids:
            raise NotFoundError(
                f"Scholarship form ID {form_id} not found",
                error_code="FORM_NOT_FOUND",
            )
    return forms


async def create_scholarship(db: AsyncSession, data: ScholarshipCreate) -> Scholarship:
    """
    Create a scholarship.

    An empty course list, or one containing "all", leaves the scholarship
    unrestricted (no course rows).

    Raises:
        ValidationError: Missing fields or invalid dates
        DuplicateScholarshipError: Title already used
        NotFoundError: Unknown course code or form id
    """
    title = title_case(data.scholarship_title or "")
    description = (data.description or "").strip()

    if not title:
        raise ValidationError("Scholarship title is required")
    if not description:
        raise ValidationError("Description is required")
    if data.start_date is None:
        raise ValidationError("Start date is required")
    if data.end_date is None:
        raise ValidationError("End date is required")
    if data.status is None:
        raise ValidationError("Valid status is required (active or archive)")
    if data.end_date <= data.start_date:
        raise ValidationError("End date must be after start date")

    if await repository.get_by_title(db, title):
        raise DuplicateScholarshipError()

    courses = await _resolve_courses(db, data.course_codes)
    forms = await _resolve_forms(db, data.scholarship_form_ids)

    try:
        return await repository.create(
            db,
            title=title,
            description=description,
            amount=data.amount,
            status=data.status,
            start_date=data.start_date,
            end_date=data.end_date,
            courses=courses,
            required_forms=forms,
        )
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateScholarshipError() from e


async def update_scholarship(
    db: AsyncSession,
    scholarship_id: str | None,
    data: ScholarshipUpdate,
) -> Scholarship:
    """
    Edit a scholarship.

    Only fields present in the request change. A present `course_codes` or
    `scholarship_form_ids` list replaces the existing links; an omitted one
    keeps them. The date rule is checked against the resulting window.

    Raises:
        ValidationError: Missing id, nothing to update, blank field or invalid dates
        ScholarshipNotFoundError: Unknown scholarship
        DuplicateScholarshipError: New title already used by another scholarship
        NotFoundError: Unknown course code or form id
    """
    if not (scholarship_id or "").strip():
        raise ValidationError("Scholarship ID is required")

    scholarship = await get_scholarship(db, scholarship_id.strip())

    provided = data.model_fields_set
    if not provided:
        raise ValidationError("Nothing to update")

    changes = {}

    if "scholarship_title" in provided:
        title = title_case(data.scholarship_title or "")
        if not title:
            raise ValidationError("Scholarship title cannot be empty")
        if title.lower() != scholarship.title.lower():
            existing = await repository.get_by_title(db, title)
            if existing is not None and existing.id != scholarship.id:
                raise DuplicateScholarshipError()
        changes["title"] = title

    if "description" in provided:
        description = (data.description or "").strip()
        if not description:
            raise ValidationError("Description cannot be empty")
        changes["description"] = description

    if "amount" in provided:
        changes["amount"] = data.amount

    if "status" in provided:
        if data.status is None:
            raise ValidationError("Valid status is required (active or archive)")
        changes["status"] = data.status

    for field in ("start_date", "end_date"):
        if field in provided:
            if getattr(data, field) is None:
                raise ValidationError(f"{field} cannot be empty")
            changes[field] = getattr(data, field)

    start_date = changes.get("start_date", scholarship.start_date)
    end_date = changes.get("end_date", scholarship.end_date)
    if end_date <= start_date:
        raise ValidationError("End date must be after start date")

    courses = None
    if data.course_codes is not None:
        courses = await _resolve_courses(db, data.course_codes)

    forms = None
    if data.scholarship_form_ids is not None:
        forms = await _resolve_forms(db, data.scholarship_form_ids)

    try:
        scholarship = await repository.update(
            db,
            scholarship,
            courses=courses,
            required_forms=forms,
            **changes,
        )
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateScholarshipError() from e

    logger.info(f"Updated scholarship {scholarship.id}: {sorted(provided)}")
    return scholarship


async def archive_scholarship(db: AsyncSession, scholarship_id: str | None) -> Scholarship:
    """
    Soft-delete a scholarship by moving it to ARCHIVE.

    The row, its links and every application referencing it are kept.
    Archiving an archived scholarship is a no-op.

    Raises:
        ValidationError: Missing id
        ScholarshipNotFoundError: Unknown scholarship
    """
    if not (scholarship_id or "").strip():
        raise ValidationError("Scholarship ID is required")

    scholarship = await get_scholarship(db, scholarship_id.strip())
    if scholarship.status == ScholarshipStatus.ARCHIVE:
        return scholarship

    scholarship = await repository.update(db, scholarship, status=ScholarshipStatus.ARCHIVE)
    logger.info(f"Archived scholarship {scholarship.id}")
    return scholarship
