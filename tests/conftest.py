"""
Shared fixtures for OSAS API tests.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from osas.modules.accounts.models import StaffAccount, StaffStatus, StudentAccount
from osas.modules.applications.models import Application, ApplicationForm, ApplicationStatus
from osas.modules.scholarships.models import (
    Course,
    Scholarship,
    ScholarshipForm,
    ScholarshipStatus,
)
from osas.modules.shared.uploads import UploadedDocument


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.rollback = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def mock_storage():
    """Create a mock file storage that returns predictable keys."""
    storage = MagicMock()

    async def store(namespace, filename, content):
        return f"{namespace}/{filename}"

    storage.store = AsyncMock(side_effect=store)
    storage.delete = AsyncMock()
    storage.delete_many = AsyncMock()
    return storage


@pytest.fixture
def sample_student():
    """A student with all baseline documents on file."""
    student = MagicMock(spec=StudentAccount)
    student.id = str(uuid4())
    student.student_number = "2021-0001"
    student.email = "juan@student.example.edu"
    student.first_name = "Juan"
    student.middle_name = None
    student.last_name = "Dela Cruz"
    student.phone_number = "09171234567"
    student.course = "BSIT"
    student.year_level = "3rd Year"
    student.complete_address = "Purok 1, Tagum City"
    student.password_hash = "hashed"
    student.picture = "students/x/picture.jpg"
    student.school_id_image = "students/x/school_id.jpg"
    student.certificate_of_indigency = "students/x/indigency.pdf"
    student.certificate_of_registration = "students/x/registration.pdf"
    student.api_key = "a" * 64
    student.csrf_token = "c" * 64
    student.login_attempts = 0
    student.last_login_attempt = None
    student.reset_token_hash = None
    student.reset_token_expires_at = None
    student.created_at = datetime(2026, 6, 1, tzinfo=UTC)
    return student


@pytest.fixture
def sample_staff():
    """An approved staff account."""
    staff = MagicMock(spec=StaffAccount)
    staff.id = str(uuid4())
    staff.email = "maria@osas.example.edu"
    staff.first_name = "Maria"
    staff.last_name = "Santos"
    staff.department = "OSAS"
    staff.google_id = "google-123"
    staff.api_key = "s" * 64
    staff.csrf_token = "t" * 64
    staff.status = StaffStatus.APPROVED
    staff.created_at = datetime(2026, 1, 1, tzinfo=UTC)
    return staff


def _make_form(name: str) -> ScholarshipForm:
    form = MagicMock(spec=ScholarshipForm)
    form.id = str(uuid4())
    form.name = name
    form.template_path = None
    return form


def _make_course(code: str) -> Course:
    course = MagicMock(spec=Course)
    course.id = str(uuid4())
    course.course_code = code
    course.course_name = f"Course {code}"
    return course


@pytest.fixture
def form_a():
    return _make_form("Form A")


@pytest.fixture
def form_b():
    return _make_form("Form B")


@pytest.fixture
def sample_scholarship(form_a, form_b):
    """An active scholarship open through 2026 with two required forms, open to all courses."""
    scholarship = MagicMock(spec=Scholarship)
    scholarship.id = str(uuid4())
    scholarship.title = "Academic Excellence Grant"
    scholarship.description = "For students with outstanding grades"
    scholarship.amount = None
    scholarship.status = ScholarshipStatus.ACTIVE
    scholarship.start_date = date(2026, 1, 1)
    scholarship.end_date = date(2026, 12, 31)
    scholarship.courses = []
    scholarship.required_forms = [form_a, form_b]
    scholarship.created_at = datetime(2026, 1, 1, tzinfo=UTC)
    scholarship.is_open_on.side_effect = lambda day: date(2026, 1, 1) <= day <= date(2026, 12, 31)
    return scholarship


@pytest.fixture
def sample_application(sample_student, sample_scholarship):
    """A pending application with one uploaded form."""
    application = MagicMock(spec=Application)
    application.id = str(uuid4())
    application.student_id = sample_student.id
    application.scholarship_id = sample_scholarship.id
    application.student = sample_student
    application.scholarship = sample_scholarship
    application.status = ApplicationStatus.PENDING
    application.applied_at = datetime(2026, 3, 1, 8, 0, tzinfo=UTC)

    form = MagicMock(spec=ApplicationForm)
    form.id = str(uuid4())
    form.form_name = "Form A"
    form.file_path = f"scholarships/{sample_student.id}/form_a.pdf"
    form.uploaded_at = application.applied_at
    application.forms = [form]
    return application


@pytest.fixture
def form_factory():
    """Build scholarship form doubles by name."""
    return _make_form


@pytest.fixture
def course_factory():
    """Build course doubles by code."""
    return _make_course


@pytest.fixture
def document_factory():
    """Build uploaded documents; PDF unless told otherwise."""

    def make(
        content: bytes = b"%PDF-1.4 test",
        content_type: str = "application/pdf",
        filename: str = "doc.pdf",
    ) -> UploadedDocument:
        return UploadedDocument(filename=filename, content_type=content_type, content=content)

    return make
