"""
Accounts Service Layer

Profile reads and self-service profile edits for students and staff,
and staff account approval.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.errors import NotFoundError, ValidationError
from osas.modules.accounts.models import StaffAccount, StaffStatus, StudentAccount
from osas.modules.accounts.repository import StaffRepository, StudentRepository
from osas.modules.accounts.schemas import (
    StaffListResponse,
    StaffProfile,
    StaffProfileUpdate,
    StudentProfileUpdate,
)
from osas.modules.shared.ids import is_valid_uuid
from osas.modules.shared.schemas import Pagination, page_offset
from osas.modules.shared.text import PHONE_NUMBER_MESSAGE, PHONE_NUMBER_PATTERN, title_case

logger = logging.getLogger(__name__)


class StaffNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__(message="User not found", error_code="STAFF_NOT_FOUND")


class SelfStatusChangeError(ValidationError):
    def __init__(self):
        super().__init__(
            message="You cannot change your own account status",
            error_code="SELF_STATUS_CHANGE",
        )


async def list_staff(
    db: AsyncSession,
    *,
    status: StaffStatus | None = None,
    page: int = 1,
    limit: int = 20,
) -> StaffListResponse:
    accounts, total = await StaffRepository.list_accounts(
        db,
        status=status,
        skip=page_offset(page, limit),
        limit=limit,
    )
    return StaffListResponse(
        data=[StaffProfile.model_validate(a) for a in accounts],
        pagination=Pagination.build(page, limit, total),
    )


async def update_staff_status(
    db: AsyncSession,
    acting_staff: StaffAccount,
    user_id: str,
    status: StaffStatus,
) -> StaffAccount:
    """
    Approve or decline another staff account.

    Raises:
        SelfStatusChangeError: Staff tried to change their own status
        StaffNotFoundError: Unknown account
    """
    if user_id == acting_staff.id:
        raise SelfStatusChangeError()

    if not is_valid_uuid(user_id):
        raise StaffNotFoundError()

    staff = await StaffRepository.get_by_id(db, user_id)
    if staff is None:
        raise StaffNotFoundError()

    old_status = staff.status
    staff = await StaffRepository.update_status(db, staff, status)

    logger.info(
        f"Staff {acting_staff.id} changed staff account {staff.id} status: "
        f"{old_status.value} -> {status.value}"
    )
    return staff


def _required_name(field: str, value: str) -> str:
    name = title_case(value)
    if not name:
        raise ValidationError(f"{field} cannot be empty")
    return name


async def update_student_profile(
    db: AsyncSession,
    student: StudentAccount,
    data: StudentProfileUpdate,
) -> StudentAccount:
    """
    Update the editable parts of a student's own profile.

    Names are title-cased; a blank middle name clears it. Student number,
    email, course, year level and documents cannot be changed here.

    Raises:
        ValidationError: Nothing to update, a blank required field or a bad phone number
    """
    provided = data.model_dump(exclude_none=True)
    if not provided:
        raise ValidationError("Nothing to update")

    changes = {}
    for field in ("first_name", "last_name"):
        if field in provided:
            changes[field] = _required_name(field, provided[field])
    if "middle_name" in provided:
        changes["middle_name"] = title_case(provided["middle_name"]) or None
    if "phone_number" in provided:
        phone_number = provided["phone_number"].strip()
        if not PHONE_NUMBER_PATTERN.match(phone_number):
            raise ValidationError(PHONE_NUMBER_MESSAGE)
        changes["phone_number"] = phone_number
    if "complete_address" in provided:
        complete_address = provided["complete_address"].strip()
        if not complete_address:
            raise ValidationError("complete_address cannot be empty")
        changes["complete_address"] = complete_address

    return await StudentRepository.update_profile(db, student, **changes)


async def update_staff_profile(
    db: AsyncSession,
    staff: StaffAccount,
    data: StaffProfileUpdate,
) -> StaffAccount:
    """
    Update a staff member's own name or department.

    Raises:
        ValidationError: Nothing to update or a blank name
    """
    provided = data.model_dump(exclude_none=True)
    if not provided:
        raise ValidationError("Nothing to update")

    changes = {}
    for field in ("first_name", "last_name"):
        if field in provided:
            changes[field] = _required_name(field, provided[field])
    if "department" in provided:
        changes["department"] = provided["department"].strip() or None

    return await StaffRepository.update_profile(db, staff, **changes)
