"""
Unit tests for scholarship application intake.

These tests cover:
- Preconditions in order (first failure wins)
- Successful submission: one pending application plus one form row per file
- The one-active-application rule, including the concurrent-insert backstop
- Removal of stored files when a later step fails
"""

from contextlib import contextmanager
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from osas.core.errors import StorageError, ValidationError
from osas.modules.applications.intake import ActiveApplicationError, submit_application
from osas.modules.applications.models import (
    ACTIVE_APPLICATION_INDEX,
    Application,
    ApplicationStatus,
)
from osas.modules.applications.schemas import ApplicationSubmission
from osas.modules.scholarships.eligibility import ALL_COURSES
from osas.modules.scholarships.models import ScholarshipStatus
from osas.modules.scholarships.service import ScholarshipNotFoundError

TODAY = date(2026, 3, 1)
NOW = datetime(2026, 3, 1, 1, 30, tzinfo=UTC)


@pytest.fixture
def submission(sample_scholarship, document_factory):
    return ApplicationSubmission(
        scholarship_id=sample_scholarship.id,
        documents={
            "Form A": document_factory(b"%PDF-a", filename="a.pdf"),
            "Form B": document_factory(b"\x89PNG", content_type="image/png", filename="b.png"),
        },
    )


@pytest.fixture
def created_application(sample_student, sample_scholarship):
    application = MagicMock(spec=Application)
    application.id = "0b7a3c2e-1111-4d5e-9f00-000000000001"
    application.status = ApplicationStatus.PENDING
    application.applied_at = NOW
    return application


@contextmanager
def intake_env(scholarship, forms, *, courses=None, active=None, created=None):
    """Patch intake collaborators with a scholarship, its rules and the student's state."""
    with (
        patch(
            "osas.modules.applications.intake.get_scholarship",
            AsyncMock(return_value=scholarship),
        ),
        patch(
            "osas.modules.applications.intake.eligibility.courses_for",
            AsyncMock(return_value=courses or {ALL_COURSES}),
        ),
        patch(
            "osas.modules.applications.intake.eligibility.forms_for",
            AsyncMock(return_value=forms),
        ),
        patch("osas.modules.applications.intake.repository") as mock_repo,
    ):
        mock_repo.get_active_for_student = AsyncMock(return_value=active or [])
        mock_repo.create_with_forms = AsyncMock(return_value=created)
        yield mock_repo


async def submit(mock_db, storage, student, submission):
    return await submit_application(mock_db, storage, student, submission, today=TODAY, now=NOW)


class TestSuccessfulSubmission:
    """A complete student applies to an open scholarship with every required form."""

    @pytest.mark.asyncio
    async def test_creates_pending_application_with_one_row_per_form(
        self,
        mock_db,
        mock_storage,
        sample_student,
        sample_scholarship,
        form_a,
        form_b,
        submission,
        created_application,
    ):
        with intake_env(
            sample_scholarship, [form_a, form_b], created=created_application
        ) as mock_repo:
            result = await submit(mock_db, mock_storage, sample_student, submission)

        assert mock_storage.store.await_count == 2
        kwargs = mock_repo.create_with_forms.call_args.kwargs
        assert kwargs["student_id"] == sample_student.id
        assert kwargs["scholarship_id"] == sample_scholarship.id
        assert kwargs["applied_at"] == NOW
        assert [name for name, _ in kwargs["documents"]] == ["Form A", "Form B"]

        assert result.application_id == created_application.id
        assert result.status == ApplicationStatus.PENDING
        assert result.required_forms == ["Form A", "Form B"]
        assert len(result.uploaded_files) == 2
        assert result.uploaded_files[0].file_path.startswith(
            f"scholarships/{sample_student.id}/form_a_{int(NOW.timestamp())}_"
        )
        assert result.uploaded_files[0].file_path.endswith(".pdf")
        assert result.uploaded_files[1].file_path.endswith(".png")
        mock_storage.delete_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_extra_files_are_ignored(
        self,
        mock_db,
        mock_storage,
        sample_student,
        sample_scholarship,
        form_a,
        document_factory,
        created_application,
    ):
        submission = ApplicationSubmission(
            scholarship_id=sample_scholarship.id,
            documents={"Form A": document_factory(), "Unrelated": document_factory()},
        )
        with intake_env(sample_scholarship, [form_a], created=created_application):
            result = await submit(mock_db, mock_storage, sample_student, submission)

        assert [f.form_name for f in result.uploaded_files] == ["Form A"]

    @pytest.mark.asyncio
    async def test_window_bounds_are_inclusive(
        self,
        mock_db,
        mock_storage,
        sample_student,
        sample_scholarship,
        form_a,
        form_b,
        submission,
        created_application,
    ):
        with intake_env(sample_scholarship, [form_a, form_b], created=created_application):
            for day in (date(2026, 1, 1), date(2026, 12, 31)):
                result = await submit_application(
                    mock_db, mock_storage, sample_student, submission, today=day, now=NOW
                )
                assert result.status == ApplicationStatus.PENDING


class TestPreconditions:
    """Each failing precondition stops intake before any file is stored."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "attribute",
        ["picture", "school_id_image", "certificate_of_indigency", "certificate_of_registration"],
    )
    async def test_missing_baseline_document(
        self, mock_db, mock_storage, sample_student, submission, attribute
    ):
        setattr(sample_student, attribute, None)

        with pytest.raises(ValidationError) as exc_info:
            await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.message == f"Student must have '{attribute}' before applying"
        mock_storage.store.assert_not_called()

    @pytest.mark.asyncio
    async def test_baseline_checked_before_scholarship(
        self, mock_db, mock_storage, sample_student
    ):
        sample_student.picture = None
        with pytest.raises(ValidationError) as exc_info:
            await submit(mock_db, mock_storage, sample_student, ApplicationSubmission(""))

        assert "picture" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_scholarship_id(self, mock_db, mock_storage, sample_student):
        with pytest.raises(ValidationError) as exc_info:
            await submit(mock_db, mock_storage, sample_student, ApplicationSubmission("  "))

        assert exc_info.value.message == "Scholarship ID is required"

    @pytest.mark.asyncio
    async def test_unknown_scholarship(self, mock_db, mock_storage, sample_student, submission):
        with patch(
            "osas.modules.applications.intake.get_scholarship",
            AsyncMock(side_effect=ScholarshipNotFoundError()),
        ):
            with pytest.raises(ScholarshipNotFoundError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Scholarship not found"

    @pytest.mark.asyncio
    async def test_archived_scholarship(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, submission
    ):
        sample_scholarship.status = ScholarshipStatus.ARCHIVE
        with intake_env(sample_scholarship, [form_a]):
            with pytest.raises(ValidationError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.message == "Scholarship is not active"

    @pytest.mark.asyncio
    async def test_outside_application_window(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, submission
    ):
        with intake_env(sample_scholarship, [form_a]):
            with pytest.raises(ValidationError) as exc_info:
                await submit_application(
                    mock_db,
                    mock_storage,
                    sample_student,
                    submission,
                    today=date(2027, 1, 1),
                    now=NOW,
                )

        assert exc_info.value.message == "Scholarship is not open for application at this time"

    @pytest.mark.asyncio
    async def test_course_not_eligible(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, submission
    ):
        with intake_env(sample_scholarship, [form_a], courses={"BSN"}):
            with pytest.raises(ValidationError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.message == "This scholarship is not available for your course"

    @pytest.mark.asyncio
    async def test_no_required_forms(
        self, mock_db, mock_storage, sample_student, sample_scholarship, submission
    ):
        with intake_env(sample_scholarship, []):
            with pytest.raises(ValidationError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.message == "This scholarship has no required forms defined"

    @pytest.mark.asyncio
    async def test_missing_required_form(
        self,
        mock_db,
        mock_storage,
        sample_student,
        sample_scholarship,
        form_a,
        form_b,
        document_factory,
    ):
        submission = ApplicationSubmission(
            scholarship_id=sample_scholarship.id,
            documents={"Form A": document_factory()},
        )
        with intake_env(sample_scholarship, [form_a, form_b]):
            with pytest.raises(ValidationError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.message == "Missing required form: Form B"
        mock_storage.store.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_file_counts_as_missing(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, document_factory
    ):
        submission = ApplicationSubmission(
            scholarship_id=sample_scholarship.id,
            documents={"Form A": document_factory(b"")},
        )
        with intake_env(sample_scholarship, [form_a]):
            with pytest.raises(ValidationError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.message == "Missing required form: Form A"

    @pytest.mark.asyncio
    async def test_file_too_large(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, document_factory
    ):
        submission = ApplicationSubmission(
            scholarship_id=sample_scholarship.id,
            documents={"Form A": document_factory(b"x" * (5 * 1024 * 1024 + 1))},
        )
        with intake_env(sample_scholarship, [form_a]):
            with pytest.raises(ValidationError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.message == "File too large: Form A. Maximum size is 5MB"

    @pytest.mark.asyncio
    async def test_invalid_file_type(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, document_factory
    ):
        submission = ApplicationSubmission(
            scholarship_id=sample_scholarship.id,
            documents={"Form A": document_factory(content_type="application/zip")},
        )
        with intake_env(sample_scholarship, [form_a]):
            with pytest.raises(ValidationError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.message == "Invalid file type for: Form A. Only PDF, JPEG, PNG allowed"

    @pytest.mark.asyncio
    async def test_nonstandard_jpg_type_rejected(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, document_factory
    ):
        """Only image/jpeg is accepted for JPEG uploads."""
        submission = ApplicationSubmission(
            scholarship_id=sample_scholarship.id,
            documents={"Form A": document_factory(content_type="image/jpg", filename="a.jpg")},
        )
        with intake_env(sample_scholarship, [form_a]):
            with pytest.raises(ValidationError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.message == "Invalid file type for: Form A. Only PDF, JPEG, PNG allowed"
        mock_storage.store.assert_not_awaited()


class TestActiveApplicationRule:
    """A student may hold only one pending or approved application."""

    @pytest.mark.asyncio
    async def test_reapply_while_pending_is_rejected(
        self,
        mock_db,
        mock_storage,
        sample_student,
        sample_scholarship,
        form_a,
        form_b,
        submission,
        sample_application,
    ):
        with intake_env(
            sample_scholarship, [form_a, form_b], active=[sample_application]
        ) as mock_repo:
            with pytest.raises(ActiveApplicationError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == (
            "You cannot apply for a new scholarship while you have active or pending applications"
        )
        mock_storage.store.assert_not_called()
        mock_repo.create_with_forms.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_insert_reported_as_active_application(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, form_b, submission
    ):
        """The partial unique index catches a race the pre-check missed."""
        violation = IntegrityError(
            "INSERT INTO applications",
            {},
            Exception(f'duplicate key value violates unique constraint "{ACTIVE_APPLICATION_INDEX}"'),
        )
        with intake_env(sample_scholarship, [form_a, form_b]) as mock_repo:
            mock_repo.create_with_forms = AsyncMock(side_effect=violation)

            with pytest.raises(ActiveApplicationError):
                await submit(mock_db, mock_storage, sample_student, submission)

        mock_db.rollback.assert_awaited_once()
        assert len(mock_storage.delete_many.call_args.args[0]) == 2


class TestCompensation:
    """Stored files are removed when a later step fails."""

    @pytest.mark.asyncio
    async def test_storage_failure_on_second_file_removes_first(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, form_b, submission
    ):
        first_key = f"scholarships/{sample_student.id}/form_a.pdf"
        mock_storage.store = AsyncMock(
            side_effect=[first_key, StorageError("Failed to save uploaded file")]
        )

        with intake_env(sample_scholarship, [form_a, form_b]) as mock_repo:
            with pytest.raises(StorageError):
                await submit(mock_db, mock_storage, sample_student, submission)

        mock_storage.delete_many.assert_awaited_once_with([first_key])
        mock_repo.create_with_forms.assert_not_called()

    @pytest.mark.asyncio
    async def test_database_failure_removes_all_files(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, form_b, submission
    ):
        failure = OperationalError("INSERT INTO applications", {}, Exception("connection lost"))
        with intake_env(sample_scholarship, [form_a, form_b]) as mock_repo:
            mock_repo.create_with_forms = AsyncMock(side_effect=failure)

            with pytest.raises(StorageError) as exc_info:
                await submit(mock_db, mock_storage, sample_student, submission)

        assert exc_info.value.status_code == 500
        mock_db.rollback.assert_awaited_once()
        removed = mock_storage.delete_many.call_args.args[0]
        assert len(removed) == 2
        assert all(key.startswith(f"scholarships/{sample_student.id}/") for key in removed)

    @pytest.mark.asyncio
    async def test_other_integrity_error_is_storage_error(
        self, mock_db, mock_storage, sample_student, sample_scholarship, form_a, form_b, submission
    ):
        violation = IntegrityError("INSERT", {}, Exception("violates foreign key constraint"))
        with intake_env(sample_scholarship, [form_a, form_b]) as mock_repo:
            mock_repo.create_with_forms = AsyncMock(side_effect=violation)

            with pytest.raises(StorageError):
                await submit(mock_db, mock_storage, sample_student, submission)

        mock_storage.delete_many.assert_awaited_once()
