"""
Scholarships Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from osas.modules.scholarships.models import ScholarshipStatus
from osas.modules.shared.schemas import Pagination


class ScholarshipFormItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    template_path: str | None = None


class ScholarshipItem(BaseModel):
    """Scholarship with its eligible course codes ("ALL" when unrestricted)."""

    id: str
    title: str
    description: str
    amount: Decimal | None = None
    status: ScholarshipStatus
    start_date: date
    end_date: date
    course_codes: list[str]
    scholarship_forms: list[ScholarshipFormItem]
    created_at: datetime


class ScholarshipListResponse(BaseModel):
    success: bool = True
    data: list[ScholarshipItem]
    pagination: Pagination


class ScholarshipCreate(BaseModel):
    """Staff request to create a scholarship."""

    scholarship_title: str = Field("", max_length=200)
    description: str = ""
    amount: Decimal | None = Field(None, ge=0)
    status: ScholarshipStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    course_codes: list[str] = Field(
        default_factory=list,
        description='Eligible course codes; empty or ["all"] opens it to every course',
    )
    scholarship_form_ids: list[str] = Field(default_factory=list)


class ScholarshipCreateResponse(BaseModel):
    success: bool = True
    message: str = "Scholarship created successfully"
    scholarship_id: str


class ScholarshipUpdate(BaseModel):
    """
    Staff request to edit a scholarship.

    Omitted fields keep their value. A course or form list, when sent,
    replaces the existing links.
    """

    scholarship_title: str | None = Field(None, max_length=200)
    description: str | None = None
    amount: Decimal | None = Field(None, ge=0)
    status: ScholarshipStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    course_codes: list[str] | None = None
    scholarship_form_ids: list[str] | None = None


class ScholarshipUpdateResponse(BaseModel):
    success: bool = True
    message: str = "Scholarship updated successfully"
    data: ScholarshipItem


class ScholarshipArchiveResponse(BaseModel):
    success: bool = True
    message: str = "Scholarship archived successfully"
    scholarship_id: str
    status: ScholarshipStatus
