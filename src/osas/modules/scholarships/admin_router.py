"""
Scholarships Admin Router

- POST /admin/scholarship - Create a scholarship
- GET /admin/scholarship - List all scholarships
- PUT /admin/scholarship?scholarship_id= - Edit a scholarship and its links
- DELETE /admin/scholarship?scholarship_id= - Archive a scholarship (soft delete)

All endpoints require an approved staff session.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.auth import get_current_staff
from osas.core.database import get_db
from osas.modules.accounts.models import StaffAccount
from osas.modules.scholarships import service
from osas.modules.scholarships.models import ScholarshipStatus
from osas.modules.scholarships.schemas import (
    ScholarshipArchiveResponse,
    ScholarshipCreate,
    ScholarshipCreateResponse,
    ScholarshipListResponse,
    ScholarshipUpdate,
    ScholarshipUpdateResponse,
)
from osas.modules.shared.schemas import MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ScholarshipCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Scholarship",
    responses={
        400: {"description": "Missing field or invalid dates"},
        404: {"description": "Unknown course code or form id"},
        409: {"description": "Title already exists"},
    },
)
async def create_scholarship(
    data: ScholarshipCreate,
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> ScholarshipCreateResponse:
    scholarship = await service.create_scholarship(db, data)
    logger.info(f"Staff {staff.id} created scholarship {scholarship.id}")
    return ScholarshipCreateResponse(scholarship_id=scholarship.id)


@router.get(
    "",
    response_model=ScholarshipListResponse,
    summary="List Scholarships",
)
async def list_scholarships(
    scholarship_status: ScholarshipStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    search: str | None = Query(None, max_length=100),
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> ScholarshipListResponse:
    return await service.list_for_staff(
        db,
        status=scholarship_status,
        page=page,
        limit=limit,
        search=search,
    )


@router.put(
    "",
    response_model=ScholarshipUpdateResponse,
    summary="Edit Scholarship",
    responses={
        400: {"description": "Missing id, nothing to update or invalid dates"},
        404: {"description": "Unknown scholarship, course code or form id"},
        409: {"description": "Title already exists"},
    },
)
async def update_scholarship(
    data: ScholarshipUpdate,
    scholarship_id: str | None = Query(None),
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> ScholarshipUpdateResponse:
    scholarship = await service.update_scholarship(db, scholarship_id, data)
    logger.info(f"Staff {staff.id} updated scholarship {scholarship.id}")
    return ScholarshipUpdateResponse(data=service.to_item(scholarship))


@router.delete(
    "",
    response_model=ScholarshipArchiveResponse,
    summary="Archive Scholarship",
    responses={
        400: {"description": "Missing id"},
        404: {"description": "Scholarship not found"},
    },
)
async def archive_scholarship(
    scholarship_id: str | None = Query(None),
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> ScholarshipArchiveResponse:
    scholarship = await service.archive_scholarship(db, scholarship_id)
    logger.info(f"Staff {staff.id} archived scholarship {scholarship.id}")
    return ScholarshipArchiveResponse(scholarship_id=scholarship.id, status=scholarship.status)
