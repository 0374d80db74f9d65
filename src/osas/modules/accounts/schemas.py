"""
Account Schemas

Response schemas whitelist the fields that may leave the API; password
hashes, reset tokens and lockout counters are never serialized.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from osas.modules.accounts.models import StaffStatus
from osas.modules.shared.schemas import Pagination


class StudentProfile(BaseModel):
    """Student account as seen by the student and by staff."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_number: str
    email: str
    first_name: str
    middle_name: str | None = None
    last_name: str
    phone_number: str
    course: str
    year_level: str
    complete_address: str
    picture: str | None = None
    school_id_image: str | None = None
    certificate_of_indigency: str | None = None
    certificate_of_registration: str | None = None
    created_at: datetime


class StudentSummary(BaseModel):
    """Compact student reference embedded in application listings."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_number: str
    first_name: str
    middle_name: str | None = None
    last_name: str
    email: str
    course: str
    year_level: str


class StaffProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str
    last_name: str
    department: str | None = None
    status: StaffStatus
    created_at: datetime


class StaffListResponse(BaseModel):
    success: bool = True
    data: list[StaffProfile]
    pagination: Pagination


class StaffStatusUpdateRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="Staff account id")
    status: StaffStatus


class StaffStatusUpdateResponse(BaseModel):
    success: bool = True
    message: str
    data: StaffProfile


class StudentProfileResponse(BaseModel):
    success: bool = True
    data: StudentProfile


class StudentProfileUpdate(BaseModel):
    """Fields a student may change on their own profile; omitted fields are kept."""

    first_name: str | None = Field(None, max_length=100)
    middle_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone_number: str | None = Field(None, max_length=20)
    complete_address: str | None = None


class StudentProfileUpdateResponse(BaseModel):
    success: bool = True
    message: str = "Profile updated successfully"
    data: StudentProfile


class StaffProfileUpdate(BaseModel):
    """Fields a staff member may change on their own profile; omitted fields are kept."""

    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    department: str | None = Field(None, max_length=150)


class StaffProfileResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: StaffProfile
