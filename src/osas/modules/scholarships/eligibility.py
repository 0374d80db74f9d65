"""
Scholarship Eligibility

Which students may see or apply to a scholarship, and which documents an
application must include.

The two rules are deliberately asymmetric:
- No course links means the scholarship is open to ALL courses
- No required forms means nobody can apply (intake rejects it)
"""

from sqlalchemy.ext.asyncio import AsyncSession

from osas.modules.scholarships import repository
from osas.modules.scholarships.models import Scholarship, ScholarshipForm

ALL_COURSES = "ALL"


async def courses_for(db: AsyncSession, scholarship_id: str) -> set[str]:
    """Eligible course codes, or {"ALL"} when no course is linked."""
    codes = await repository.get_course_codes(db, scholarship_id)
    return set(codes) or {ALL_COURSES}


async def forms_for(db: AsyncSession, scholarship_id: str) -> list[ScholarshipForm]:
    """Required forms, ordered by name (may be empty)."""
    return await repository.get_required_forms(db, scholarship_id)


def is_eligible(course_codes: set[str], student_course: str | None) -> bool:
    if ALL_COURSES in course_codes:
        return True
    if not student_course:
        return False
    return student_course.upper() in {code.upper() for code in course_codes}


def course_codes_of(scholarship: Scholarship) -> list[str]:
    """Sorted course codes of an already-loaded scholarship, ["ALL"] when unrestricted."""
    codes = sorted(course.course_code for course in scholarship.courses)
    return codes or [ALL_COURSES]
