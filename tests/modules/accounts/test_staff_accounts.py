"""
Unit tests for staff account approval.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from osas.modules.accounts.models import StaffAccount, StaffStatus
from osas.modules.accounts.service import (
    SelfStatusChangeError,
    StaffNotFoundError,
    list_staff,
    update_staff_status,
)


@pytest.fixture
def pending_staff(sample_staff):
    staff = MagicMock(spec=StaffAccount)
    staff.id = str(uuid4())
    staff.email = "pedro@osas.example.edu"
    staff.first_name = "Pedro"
    staff.last_name = "Reyes"
    staff.department = None
    staff.status = StaffStatus.PENDING
    staff.created_at = sample_staff.created_at
    return staff


class TestUpdateStaffStatus:
    """Tests for update_staff_status."""

    @pytest.mark.asyncio
    async def test_cannot_change_own_status(self, mock_db, sample_staff):
        with patch("osas.modules.accounts.service.StaffRepository") as mock_repo:
            with pytest.raises(SelfStatusChangeError) as exc_info:
                await update_staff_status(
                    mock_db, sample_staff, sample_staff.id, StaffStatus.DECLINED
                )

        assert exc_info.value.status_code == 400
        mock_repo.update_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_id(self, mock_db, sample_staff):
        with pytest.raises(StaffNotFoundError) as exc_info:
            await update_staff_status(mock_db, sample_staff, "nope", StaffStatus.APPROVED)

        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_unknown_account(self, mock_db, sample_staff):
        with patch("osas.modules.accounts.service.StaffRepository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(StaffNotFoundError) as exc_info:
                await update_staff_status(
                    mock_db, sample_staff, str(uuid4()), StaffStatus.APPROVED
                )

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_approve_pending_account(self, mock_db, sample_staff, pending_staff):
        with patch("osas.modules.accounts.service.StaffRepository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=pending_staff)
            mock_repo.update_status = AsyncMock(return_value=pending_staff)

            result = await update_staff_status(
                mock_db, sample_staff, pending_staff.id, StaffStatus.APPROVED
            )

        assert result is pending_staff
        mock_repo.update_status.assert_awaited_once_with(
            mock_db, pending_staff, StaffStatus.APPROVED
        )


class TestListStaff:
    @pytest.mark.asyncio
    async def test_filters_and_paginates(self, mock_db, pending_staff):
        with patch("osas.modules.accounts.service.StaffRepository") as mock_repo:
            mock_repo.list_accounts = AsyncMock(return_value=([pending_staff], 21))

            response = await list_staff(mock_db, status=StaffStatus.PENDING, page=2, limit=20)

        mock_repo.list_accounts.assert_awaited_once_with(
            mock_db, status=StaffStatus.PENDING, skip=20, limit=20
        )
        assert response.data[0].email == "pedro@osas.example.edu"
        assert response.pagination.total_pages == 2
