"""
Scholarships Student Router

- GET /student/scholarship - Scholarships open to the student's course
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.auth import get_current_student
from osas.core.database import get_db
from osas.modules.accounts.models import StudentAccount
from osas.modules.scholarships import service
from osas.modules.scholarships.schemas import ScholarshipListResponse
from osas.modules.shared.schemas import MAX_PAGE_SIZE

router = APIRouter()


@router.get(
    "/scholarship",
    response_model=ScholarshipListResponse,
    summary="List Eligible Scholarships",
    description="""
Scholarships the authenticated student may apply to.

A scholarship with no course restrictions is listed for every student;
one restricted to specific courses is listed only for students of those
courses.
""",
    responses={
        401: {"description": "Missing API key or invalid session"},
        403: {"description": "Missing CSRF token"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def list_scholarships(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
    search: str | None = Query(None, max_length=100, description="Search in title"),
    student: StudentAccount = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
) -> ScholarshipListResponse:
    return await service.list_for_student(db, student, page=page, limit=limit, search=search)
