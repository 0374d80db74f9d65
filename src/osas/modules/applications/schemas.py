"""
Applications Schemas

Pydantic schemas for request validation and response serialization, plus
the immutable submission value handed from the router to intake.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from osas.modules.accounts.schemas import StudentSummary
from osas.modules.applications.models import ApplicationStatus
from osas.modules.scholarships.schemas import ScholarshipItem
from osas.modules.shared.schemas import Pagination
from osas.modules.shared.uploads import UploadedDocument


# ============================================
# Intake Input
# ============================================


@dataclass(frozen=True)
class ApplicationSubmission:
    """A scholarship id plus the uploaded file for each required form name."""

    scholarship_id: str
    documents: Mapping[str, UploadedDocument] = field(default_factory=dict)


# ============================================
# Response Schemas
# ============================================


class ApplicationFormItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    form_name: str
    file_path: str
    uploaded_at: datetime


class UploadedFileItem(BaseModel):
    form_name: str
    file_path: str


class SubmissionResult(BaseModel):
    """What a successful intake produced."""

    application_id: str
    status: ApplicationStatus
    applied_at: datetime
    scholarship: ScholarshipItem
    required_forms: list[str]
    uploaded_files: list[UploadedFileItem]


class SubmissionResponse(BaseModel):
    success: bool = True
    message: str = "Application submitted successfully"
    data: SubmissionResult


class StudentApplicationItem(BaseModel):
    """An application as listed for its own student."""

    id: str
    status: ApplicationStatus
    applied_at: datetime
    scholarship: ScholarshipItem
    forms: list[ApplicationFormItem]


class StudentApplicationListResponse(BaseModel):
    success: bool = True
    data: list[StudentApplicationItem]


class AdminApplicationItem(BaseModel):
    """An application as listed for staff, with the applicant embedded."""

    id: str
    status: ApplicationStatus
    applied_at: datetime
    student: StudentSummary
    scholarship: ScholarshipItem
    forms: list[ApplicationFormItem]


class AdminApplicationListResponse(BaseModel):
    success: bool = True
    data: list[AdminApplicationItem]
    pagination: Pagination


# ============================================
# Status Update
# ============================================


class StatusUpdateRequest(BaseModel):
    application_id: str = Field(..., min_length=1)
    status: ApplicationStatus


class StatusUpdateResponse(BaseModel):
    success: bool = True
    message: str
    data: AdminApplicationItem


# Filter values accepted by the staff listing
StatusFilter = Literal["all", "pending", "approved", "declined"]


# ============================================
# Dashboard
# ============================================


class MonthlyCount(BaseModel):
    month: int = Field(..., ge=1, le=12)
    total: int


class ScholarshipCount(BaseModel):
    title: str
    total: int


class DashboardStats(BaseModel):
    year: int
    total_students: int
    total_applications: int
    total_scholars: int
    total_pending: int
    monthly_applications: list[MonthlyCount]
    status_distribution: dict[str, int]
    top_scholarships: list[ScholarshipCount]


class DashboardResponse(BaseModel):
    success: bool = True
    data: DashboardStats
