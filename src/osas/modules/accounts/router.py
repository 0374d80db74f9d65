"""
Accounts Student Router

- GET /student/profile - The authenticated student's profile
- PUT /student/profile - Update own name, phone number or address
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.auth import get_current_student
from osas.core.database import get_db
from osas.modules.accounts import service
from osas.modules.accounts.models import StudentAccount
from osas.modules.accounts.schemas import (
    StudentProfile,
    StudentProfileResponse,
    StudentProfileUpdate,
    StudentProfileUpdateResponse,
)

router = APIRouter()


@router.get(
    "/profile",
    response_model=StudentProfileResponse,
    summary="My Profile",
)
async def get_profile(
    student: StudentAccount = Depends(get_current_student),
) -> StudentProfileResponse:
    return StudentProfileResponse(data=StudentProfile.model_validate(student))


@router.put(
    "/profile",
    response_model=StudentProfileUpdateResponse,
    summary="Update My Profile",
    responses={400: {"description": "Nothing to update or invalid field"}},
)
async def update_profile(
    data: StudentProfileUpdate,
    student: StudentAccount = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
) -> StudentProfileUpdateResponse:
    student = await service.update_student_profile(db, student, data)
    return StudentProfileUpdateResponse(data=StudentProfile.model_validate(student))
