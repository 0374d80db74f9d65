"""
Accounts Admin Router

- GET /admin/accounts - List staff accounts
- PUT /admin/accounts - Approve or decline a staff account
- GET /admin/profile - The authenticated staff member's profile
- PUT /admin/profile - Update own name or department

Staff cannot change their own status. The affected staff member is told
about the decision by email after the response.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.auth import get_current_staff
from osas.core.database import get_db
from osas.core.email import send_staff_account_status
from osas.modules.accounts import service
from osas.modules.accounts.models import StaffAccount, StaffStatus
from osas.modules.accounts.schemas import (
    StaffListResponse,
    StaffProfile,
    StaffProfileResponse,
    StaffProfileUpdate,
    StaffStatusUpdateRequest,
    StaffStatusUpdateResponse,
)
from osas.modules.shared.schemas import MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

router = APIRouter()

# Mounted at /admin; `router` is mounted at /admin/accounts
profile_router = APIRouter()


@router.get(
    "",
    response_model=StaffListResponse,
    summary="List Staff Accounts",
)
async def list_accounts(
    account_status: StaffStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> StaffListResponse:
    return await service.list_staff(db, status=account_status, page=page, limit=limit)


@router.put(
    "",
    response_model=StaffStatusUpdateResponse,
    summary="Update Staff Account Status",
    responses={
        400: {"description": "Attempt to change one's own status"},
        404: {"description": "Staff account not found"},
    },
)
async def update_account_status(
    data: StaffStatusUpdateRequest,
    background_tasks: BackgroundTasks,
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> StaffStatusUpdateResponse:
    updated = await service.update_staff_status(db, staff, data.user_id, data.status)

    if updated.status != StaffStatus.PENDING:
        background_tasks.add_task(
            send_staff_account_status,
            to_email=updated.email,
            first_name=updated.first_name,
            status=updated.status.value,
        )

    return StaffStatusUpdateResponse(
        message=f"User status updated to {updated.status.value}",
        data=StaffProfile.model_validate(updated),
    )


@profile_router.get(
    "/profile",
    response_model=StaffProfileResponse,
    summary="My Staff Profile",
)
async def get_profile(
    staff: StaffAccount = Depends(get_current_staff),
) -> StaffProfileResponse:
    return StaffProfileResponse(data=StaffProfile.model_validate(staff))


@profile_router.put(
    "/profile",
    response_model=StaffProfileResponse,
    summary="Update My Staff Profile",
    responses={400: {"description": "Nothing to update or blank name"}},
)
async def update_profile(
    data: StaffProfileUpdate,
    staff: StaffAccount = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
) -> StaffProfileResponse:
    staff = await service.update_staff_profile(db, staff, data)
    return StaffProfileResponse(
        message="Profile updated successfully",
        data=StaffProfile.model_validate(staff),
    )
