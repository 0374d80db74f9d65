"""
Application Intake

Turns a student's multipart submission into one pending application and
its document rows.

Flow:
1. Preconditions, checked in order, first failure wins:
   - the student has all four baseline documents on file
   - the scholarship exists, is active, is open today and admits the
     student's course
   - the scholarship defines at least one required form
   - every required form was uploaded, within size, with an allowed type
   - the student has no pending or approved application
2. Documents are stored under scholarships/<student id>/
3. The application and its form rows are inserted with a single commit

If anything after the first stored file fails, every file stored for this
submission is removed again and no row is left behind.
"""

import logging
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.config import settings
from osas.core.errors import StorageError, ValidationError
from osas.core.storage import FileStorage, unique_filename
from osas.modules.accounts.models import StudentAccount
from osas.modules.applications import repository
from osas.modules.applications.models import ACTIVE_APPLICATION_INDEX
from osas.modules.applications.schemas import (
    ApplicationSubmission,
    SubmissionResult,
    UploadedFileItem,
)
from osas.modules.scholarships import eligibility
from osas.modules.scholarships.models import ScholarshipForm, ScholarshipStatus
from osas.modules.scholarships.service import get_scholarship, to_item

logger = logging.getLogger(__name__)

# Account attributes a student must have filled before applying
BASELINE_DOCUMENTS = (
    "picture",
    "school_id_image",
    "certificate_of_indigency",
    "certificate_of_registration",
)

ALLOWED_CONTENT_TYPES = frozenset({"application/pdf", "image/jpeg", "image/png"})


class ActiveApplicationError(ValidationError):
    """Raised when the student already has a pending or approved application."""

    def __init__(self):
        super().__init__(
            message=(
                "You cannot apply for a new scholarship while you have "
                "active or pending applications"
            ),
            error_code="ACTIVE_APPLICATION_EXISTS",
        )


def local_today() -> date:
    """Today's date in the configured office timezone."""
    return datetime.now(ZoneInfo(settings.timezone)).date()


def _check_baseline_documents(student: StudentAccount) -> None:
    for attribute in BASELINE_DOCUMENTS:
        if not getattr(student, attribute):
            raise ValidationError(
                f"Student must have '{attribute}' before applying",
                error_code="INCOMPLETE_PROFILE",
            )


def _check_documents(submission: ApplicationSubmission, forms: list[ScholarshipForm]) -> None:
    max_bytes = settings.max_application_file_bytes
    max_mb = max_bytes // (1024 * 1024)

    for form in forms:
        document = submission.documents.get(form.name)
        if document is None or document.is_empty:
            raise ValidationError(f"Missing required form: {form.name}")
        if document.size > max_bytes:
            raise ValidationError(f"File too large: {form.name}. Maximum size is {max_mb}MB")
        if document.content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                f"Invalid file type for: {form.name}. Only PDF, JPEG, PNG allowed"
            )


async def submit_application(
    db: AsyncSession,
    storage: FileStorage,
    student: StudentAccount,
    submission: ApplicationSubmission,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> SubmissionResult:
    """
    Validate and record a scholarship application.

    Args:
        db: Database session
        storage: File storage for the uploaded documents
        student: Authenticated applicant
        submission: Scholarship id and uploaded documents keyed by form name
        today: Local date for the open-window check (injectable for tests)
        now: Submission time (injectable for tests)

    Returns:
        The created application, its scholarship and the stored files

    Raises:
        ValidationError: A precondition failed
        ScholarshipNotFoundError: Unknown scholarship
        ActiveApplicationError: Student already has an active application
        StorageError: A file or the application rows could not be saved
    """
    today = today or local_today()
    now = now or datetime.now(UTC)

    _check_baseline_documents(student)

    scholarship_id = (submission.scholarship_id or "").strip()
    if not scholarship_id:
        raise ValidationError("Scholarship ID is required")

    scholarship = await get_scholarship(db, scholarship_id)
    if scholarship.status != ScholarshipStatus.ACTIVE:
        raise ValidationError("Scholarship is not active", error_code="SCHOLARSHIP_INACTIVE")
    if not scholarship.is_open_on(today):
        raise ValidationError(
            "Scholarship is not open for application at this time",
            error_code="SCHOLARSHIP_CLOSED",
        )

    course_codes = await eligibility.courses_for(db, scholarship.id)
    if not eligibility.is_eligible(course_codes, student.course):
        raise ValidationError(
            "This scholarship is not available for your course",
            error_code="COURSE_NOT_ELIGIBLE",
        )

    forms = await eligibility.forms_for(db, scholarship.id)
    if not forms:
        raise ValidationError("This scholarship has no required forms defined")

    _check_documents(submission, forms)

    # Rollback expires the session's loaded objects; read ids only from locals below
    student_id = student.id

    if await repository.get_active_for_student(db, student_id):
        raise ActiveApplicationError()

    stored: list[tuple[str, str]] = []
    try:
        for form in forms:
            document = submission.documents[form.name]
            key = await storage.store(
                namespace=f"scholarships/{student_id}",
                filename=unique_filename(form.name, document.content_type, now),
                content=document.content,
            )
            stored.append((form.name, key))

        application = await repository.create_with_forms(
            db,
            student_id=student_id,
            scholarship_id=scholarship.id,
            documents=stored,
            applied_at=now,
        )
    except IntegrityError as e:
        await db.rollback()
        await storage.delete_many([key for _, key in stored])
        if ACTIVE_APPLICATION_INDEX in str(e.orig):
            logger.warning(f"Concurrent application rejected for student {student_id}")
            raise ActiveApplicationError() from e
        logger.error(f"Failed to insert application for student {student_id}: {e.orig}")
        raise StorageError("Failed to submit application") from e
    except SQLAlchemyError as e:
        await db.rollback()
        await storage.delete_many([key for _, key in stored])
        logger.error(f"Failed to insert application for student {student_id}: {e}")
        raise StorageError("Failed to submit application") from e
    except StorageError:
        await storage.delete_many([key for _, key in stored])
        raise

    logger.info(
        f"Student {student_id} applied for scholarship {scholarship.id} "
        f"(application {application.id})"
    )
    return SubmissionResult(
        application_id=application.id,
        status=application.status,
        applied_at=application.applied_at,
        scholarship=to_item(scholarship),
        required_forms=[form.name for form in forms],
        uploaded_files=[
            UploadedFileItem(form_name=form_name, file_path=key) for form_name, key in stored
        ],
    )
