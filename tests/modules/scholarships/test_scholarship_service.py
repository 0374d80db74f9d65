"""
Unit tests for the scholarships service layer.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from osas.core.errors import NotFoundError, ValidationError
from osas.modules.scholarships.models import ScholarshipStatus
from osas.modules.scholarships.schemas import ScholarshipCreate, ScholarshipUpdate
from osas.modules.scholarships.service import (
    DuplicateScholarshipError,
    ScholarshipNotFoundError,
    archive_scholarship,
    create_scholarship,
    get_scholarship,
    list_for_student,
    to_item,
    update_scholarship,
)


@pytest.fixture
def create_request(form_a):
    return ScholarshipCreate(
        scholarship_title="academic  excellence grant",
        description="For students with outstanding grades",
        status=ScholarshipStatus.ACTIVE,
        start_date=date(2026, 1, 1),
        end_date=date(2026, 12, 31),
        course_codes=["BSIT"],
        scholarship_form_ids=[form_a.id],
    )


class TestGetScholarship:
    """Tests for get_scholarship."""

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, mock_db):
        with pytest.raises(ScholarshipNotFoundError) as exc_info:
            await get_scholarship(mock_db, "not-a-uuid")

        assert exc_info.value.status_code == 404
        mock_db.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_id(self, mock_db):
        mock_db.get = AsyncMock(return_value=None)
        with pytest.raises(ScholarshipNotFoundError):
            await get_scholarship(mock_db, "5f0c7b8e-1d2a-4c3b-9e8f-7a6b5c4d3e2f")


class TestListForStudent:
    """Tests for list_for_student."""

    @pytest.mark.asyncio
    async def test_filters_by_student_course(self, mock_db, sample_student, sample_scholarship):
        with patch("osas.modules.scholarships.service.repository") as mock_repo:
            mock_repo.list_for_course = AsyncMock(return_value=([sample_scholarship], 11))

            response = await list_for_student(mock_db, sample_student, page=2, limit=10)

        mock_repo.list_for_course.assert_awaited_once_with(
            mock_db, "BSIT", search=None, skip=10, limit=10
        )
        assert response.data[0].course_codes == ["ALL"]
        assert [f.name for f in response.data[0].scholarship_forms] == ["Form A", "Form B"]
        assert response.pagination.total_pages == 2
        assert response.pagination.has_prev is True
        assert response.pagination.has_next is False


class TestCreateScholarship:
    """Tests for create_scholarship."""

    @pytest.mark.asyncio
    async def test_success_title_cases_and_links(
        self, mock_db, create_request, sample_scholarship, course_factory, form_a
    ):
        course = course_factory("BSIT")
        with patch("osas.modules.scholarships.service.repository") as mock_repo:
            mock_repo.get_by_title = AsyncMock(return_value=None)
            mock_repo.get_courses_by_codes = AsyncMock(return_value=[course])
            mock_repo.get_forms_by_ids = AsyncMock(return_value=[form_a])
            mock_repo.create = AsyncMock(return_value=sample_scholarship)

            result = await create_scholarship(mock_db, create_request)

        assert result is sample_scholarship
        kwargs = mock_repo.create.call_args.kwargs
        assert kwargs["title"] == "Academic Excellence Grant"
        assert kwargs["courses"] == [course]
        assert kwargs["required_forms"] == [form_a]

    @pytest.mark.asyncio
    async def test_all_courses_stores_no_links(self, mock_db, create_request, sample_scholarship):
        create_request.course_codes = ["all"]
        create_request.scholarship_form_ids = []
        with patch("osas.modules.scholarships.service.repository") as mock_repo:
            mock_repo.get_by_title = AsyncMock(return_value=None)
            mock_repo.get_courses_by_codes = AsyncMock()
            mock_repo.create = AsyncMock(return_value=sample_scholarship)

            await create_scholarship(mock_db, create_request)

        mock_repo.get_courses_by_codes.assert_not_called()
        assert mock_repo.create.call_args.kwargs["courses"] == []

    @pytest.mark.asyncio
    async def test_end_before_start(self, mock_db, create_request):
        create_request.end_date = date(2025, 12, 31)
        with pytest.raises(ValidationError) as exc_info:
            await create_scholarship(mock_db, create_request)

        assert exc_info.value.message == "End date must be after start date"

    @pytest.mark.asyncio
    async def test_missing_title(self, mock_db, create_request):
        create_request.scholarship_title = "   "
        with pytest.raises(ValidationError):
            await create_scholarship(mock_db, create_request)

    @pytest.mark.asyncio
    async def test_duplicate_title(self, mock_db, create_request, sample_scholarship):
        with patch("osas.modules.scholarships.service.repository") as mock_repo:
            mock_repo.get_by_title = AsyncMock(return_value=sample_scholarship)

            with pytest.raises(DuplicateScholarshipError) as exc_info:
                await create_scholarship(mock_db, create_request)

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_course_code(self, mock_db, create_request):
        with patch("osas.modules.scholarships.service.repository") as mock_repo:
            mock_repo.get_by_title = AsyncMock(return_value=None)
            mock_repo.get_courses_by_codes = AsyncMock(return_value=[])

            with pytest.raises(NotFoundError) as exc_info:
                await create_scholarship(mock_db, create_request)

        assert exc_info.value.error_code == "COURSE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_unknown_form_id(self, mock_db, create_request, course_factory):
        with patch("osas.modules.scholarships.service.repository") as mock_repo:
            mock_repo.get_by_title = AsyncMock(return_value=None)
            mock_repo.get_courses_by_codes = AsyncMock(return_value=[course_factory("BSIT")])
            mock_repo.get_forms_by_ids = AsyncMock(return_value=[])

            with pytest.raises(NotFoundError) as exc_info:
                await create_scholarship(mock_db, create_request)

        assert exc_info.value.error_code == "FORM_NOT_FOUND"


@pytest.fixture
def scholarship_repo(mock_db, sample_scholarship):
    """Patch the repository with a stored scholarship; update echoes the applied changes."""

    async def apply(db, scholarship, *, courses=None, required_forms=None, **fields):
        for name, value in fields.items():
            setattr(scholarship, name, value)
        if courses is not None:
            scholarship.courses = courses
        if required_forms is not None:
            scholarship.required_forms = required_forms
        return scholarship

    with patch("osas.modules.scholarships.service.repository") as mock_repo:
        mock_repo.get_by_id = AsyncMock(return_value=sample_scholarship)
        mock_repo.get_by_title = AsyncMock(return_value=None)
        mock_repo.update = AsyncMock(side_effect=apply)
        yield mock_repo


class TestUpdateScholarship:
    """Tests for update_scholarship."""

    @pytest.mark.asyncio
    async def test_missing_id(self, mock_db):
        with pytest.raises(ValidationError) as exc_info:
            await update_scholarship(mock_db, "  ", ScholarshipUpdate(status="archive"))

        assert exc_info.value.message == "Scholarship ID is required"

    @pytest.mark.asyncio
    async def test_unknown_scholarship(self, mock_db, scholarship_repo):
        scholarship_repo.get_by_id = AsyncMock(return_value=None)
        with pytest.raises(ScholarshipNotFoundError):
            await update_scholarship(
                mock_db,
                "5f0c7b8e-1d2a-4c3b-9e8f-7a6b5c4d3e2f",
                ScholarshipUpdate(status="archive"),
            )

    @pytest.mark.asyncio
    async def test_empty_body_is_nothing_to_update(
        self, mock_db, scholarship_repo, sample_scholarship
    ):
        with pytest.raises(ValidationError) as exc_info:
            await update_scholarship(mock_db, sample_scholarship.id, ScholarshipUpdate())

        assert exc_info.value.message == "Nothing to update"
        scholarship_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_only_sent_fields_change(self, mock_db, scholarship_repo, sample_scholarship):
        """Omitted course and form lists keep their links."""
        data = ScholarshipUpdate(status=ScholarshipStatus.ARCHIVE, end_date=date(2026, 6, 30))

        result = await update_scholarship(mock_db, sample_scholarship.id, data)

        assert result.status == ScholarshipStatus.ARCHIVE
        assert result.end_date == date(2026, 6, 30)
        call = scholarship_repo.update.call_args
        assert call.kwargs["courses"] is None
        assert call.kwargs["required_forms"] is None
        assert set(call.kwargs) == {"courses", "required_forms", "status", "end_date"}

    @pytest.mark.asyncio
    async def test_dates_checked_against_stored_window(
        self, mock_db, scholarship_repo, sample_scholarship
    ):
        """A new end date before the stored start date is rejected."""
        data = ScholarshipUpdate(end_date=date(2025, 12, 1))

        with pytest.raises(ValidationError) as exc_info:
            await update_scholarship(mock_db, sample_scholarship.id, data)

        assert exc_info.value.message == "End date must be after start date"
        scholarship_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_renaming_to_existing_title_conflicts(
        self, mock_db, scholarship_repo, sample_scholarship
    ):
        other = MagicMock(id="9d1e2f3a-0000-4b5c-8d7e-6f5a4b3c2d1e")
        scholarship_repo.get_by_title = AsyncMock(return_value=other)

        with pytest.raises(DuplicateScholarshipError):
            await update_scholarship(
                mock_db,
                sample_scholarship.id,
                ScholarshipUpdate(scholarship_title="tulong  dunong"),
            )

        scholarship_repo.get_by_title.assert_awaited_once_with(mock_db, "Tulong Dunong")

    @pytest.mark.asyncio
    async def test_keeping_own_title_is_not_a_conflict(
        self, mock_db, scholarship_repo, sample_scholarship
    ):
        data = ScholarshipUpdate(scholarship_title="academic excellence grant")

        result = await update_scholarship(mock_db, sample_scholarship.id, data)

        assert result.title == "Academic Excellence Grant"
        scholarship_repo.get_by_title.assert_not_called()

    @pytest.mark.asyncio
    async def test_replaces_course_and_form_links(
        self, mock_db, scholarship_repo, sample_scholarship, course_factory, form_b
    ):
        bsit = course_factory("BSIT")
        scholarship_repo.get_courses_by_codes = AsyncMock(return_value=[bsit])
        scholarship_repo.get_forms_by_ids = AsyncMock(return_value=[form_b])
        data = ScholarshipUpdate(course_codes=["bsit"], scholarship_form_ids=[form_b.id])

        result = await update_scholarship(mock_db, sample_scholarship.id, data)

        assert result.courses == [bsit]
        assert result.required_forms == [form_b]
        assert to_item(result).course_codes == ["BSIT"]

    @pytest.mark.asyncio
    async def test_all_courses_clears_course_links(
        self, mock_db, scholarship_repo, sample_scholarship, course_factory
    ):
        sample_scholarship.courses = [course_factory("BSIT")]
        scholarship_repo.get_courses_by_codes = AsyncMock()

        result = await update_scholarship(
            mock_db, sample_scholarship.id, ScholarshipUpdate(course_codes=["all"])
        )

        assert result.courses == []
        assert to_item(result).course_codes == ["ALL"]
        scholarship_repo.get_courses_by_codes.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_form_id(self, mock_db, scholarship_repo, sample_scholarship):
        scholarship_repo.get_forms_by_ids = AsyncMock(return_value=[])
        data = ScholarshipUpdate(scholarship_form_ids=["5f0c7b8e-1d2a-4c3b-9e8f-7a6b5c4d3e2f"])

        with pytest.raises(NotFoundError) as exc_info:
            await update_scholarship(mock_db, sample_scholarship.id, data)

        assert exc_info.value.error_code == "FORM_NOT_FOUND"
        scholarship_repo.update.assert_not_called()


class TestArchiveScholarship:
    """Tests for archive_scholarship (the soft delete)."""

    @pytest.mark.asyncio
    async def test_active_scholarship_is_archived(
        self, mock_db, scholarship_repo, sample_scholarship
    ):
        result = await archive_scholarship(mock_db, sample_scholarship.id)

        assert result.status == ScholarshipStatus.ARCHIVE
        scholarship_repo.update.assert_awaited_once_with(
            mock_db, sample_scholarship, status=ScholarshipStatus.ARCHIVE
        )

    @pytest.mark.asyncio
    async def test_already_archived_is_unchanged(
        self, mock_db, scholarship_repo, sample_scholarship
    ):
        sample_scholarship.status = ScholarshipStatus.ARCHIVE

        result = await archive_scholarship(mock_db, sample_scholarship.id)

        assert result is sample_scholarship
        scholarship_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_id(self, mock_db):
        with pytest.raises(ValidationError):
            await archive_scholarship(mock_db, None)


class TestToItem:
    def test_restricted_scholarship_lists_course_codes(self, sample_scholarship, course_factory):
        sample_scholarship.courses = [course_factory("BSIT")]
        assert to_item(sample_scholarship).course_codes == ["BSIT"]
