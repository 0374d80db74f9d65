"""
Applications Student Router

- POST /student/apply - Submit a scholarship application
- GET /student/applications - The student's own applications
"""

import logging
import re

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from osas.core.auth import get_current_student
from osas.core.config import settings
from osas.core.database import get_db
from osas.core.storage import FileStorage, get_storage
from osas.modules.accounts.models import StudentAccount
from osas.modules.applications import service
from osas.modules.applications.intake import submit_application
from osas.modules.applications.schemas import (
    ApplicationSubmission,
    StudentApplicationListResponse,
    SubmissionResponse,
)
from osas.modules.shared.uploads import UploadedDocument, read_upload

logger = logging.getLogger(__name__)

router = APIRouter()

# Multipart field carrying the file for one required form: files[<Form Name>]
_FILE_FIELD_PATTERN = re.compile(r"^files\[(.+)\]$")


async def _read_submission(request: Request) -> ApplicationSubmission:
    """Collect the scholarship id and files[<Form Name>] uploads from the form body."""
    form = await request.form()

    scholarship_id = form.get("scholarship_id")
    documents: dict[str, UploadedDocument] = {}

    for key, value in form.multi_items():
        match = _FILE_FIELD_PATTERN.match(key)
        if match is None or not isinstance(value, UploadFile):
            continue
        documents[match.group(1)] = await read_upload(value, settings.max_application_file_bytes)

    return ApplicationSubmission(
        scholarship_id=scholarship_id if isinstance(scholarship_id, str) else "",
        documents=documents,
    )


@router.post(
    "/apply",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply for a Scholarship",
    description="""
Submit an application as multipart/form-data.

**Fields:**
- `scholarship_id`: Scholarship to apply for
- `files[<Form Name>]`: One file per required form (PDF, JPEG or PNG, max 5MB)

A student may hold only one pending or approved application at a time.
""",
    responses={
        400: {"description": "A precondition failed"},
        401: {"description": "Missing API key or invalid session"},
        403: {"description": "Missing CSRF token"},
        404: {"description": "Scholarship not found"},
        429: {"description": "Rate limit exceeded"},
        500: {"description": "Files or application could not be saved"},
    },
)
async def apply(
    request: Request,
    student: StudentAccount = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> SubmissionResponse:
    submission = await _read_submission(request)
    result = await submit_application(db, storage, student, submission)
    return SubmissionResponse(data=result)


@router.get(
    "/applications",
    response_model=StudentApplicationListResponse,
    summary="My Applications",
)
async def my_applications(
    student: StudentAccount = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
) -> StudentApplicationListResponse:
    return StudentApplicationListResponse(data=await service.list_for_student(db, student.id))
