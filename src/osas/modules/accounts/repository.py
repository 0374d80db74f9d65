"""
Account Repository

Database operations for staff and student accounts (the credential store).
"""

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from osas.modules.accounts.models import StaffAccount, StaffStatus, StudentAccount

logger = logging.getLogger(__name__)


class StudentRepository:
    """Repository for student account database operations."""

    @staticmethod
    async def create(db: AsyncSession, **fields) -> StudentAccount:
        """
        Create a student account.

        Args:
            db: Database session
            **fields: Column values (password must already be hashed)

        Returns:
            Created StudentAccount instance
        """
        student = StudentAccount(**fields)
        db.add(student)
        await db.commit()
        await db.refresh(student)

        logger.info(f"Created student account: {student.id} ({student.student_number})")
        return student

    @staticmethod
    async def get_by_id(db: AsyncSession, student_id: str) -> StudentAccount | None:
        return await db.get(StudentAccount, student_id)

    @staticmethod
    async def get_by_student_number(
        db: AsyncSession,
        student_number: str,
    ) -> StudentAccount | None:
        result = await db.execute(
            select(StudentAccount).where(StudentAccount.student_number == student_number)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_api_key(db: AsyncSession, api_key: str) -> StudentAccount | None:
        result = await db.execute(select(StudentAccount).where(StudentAccount.api_key == api_key))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_reset_token_hash(
        db: AsyncSession,
        token_hash: str,
    ) -> StudentAccount | None:
        result = await db.execute(
            select(StudentAccount).where(StudentAccount.reset_token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def student_number_exists(db: AsyncSession, student_number: str) -> bool:
        result = await db.execute(
            select(StudentAccount.id).where(StudentAccount.student_number == student_number)
        )
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def email_exists(db: AsyncSession, email: str) -> bool:
        result = await db.execute(
            select(StudentAccount.id).where(func.lower(StudentAccount.email) == email.lower())
        )
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def record_failed_login(
        db: AsyncSession,
        student: StudentAccount,
        attempts: int,
        attempted_at: datetime,
    ) -> StudentAccount:
        student.login_attempts = attempts
        student.last_login_attempt = attempted_at
        await db.commit()
        return student

    @staticmethod
    async def record_successful_login(
        db: AsyncSession,
        student: StudentAccount,
        csrf_token: str,
    ) -> StudentAccount:
        """Reset the lockout counters and store the freshly minted CSRF token."""
        student.login_attempts = 0
        student.last_login_attempt = None
        student.csrf_token = csrf_token
        await db.commit()
        await db.refresh(student)
        return student

    @staticmethod
    async def set_reset_token(
        db: AsyncSession,
        student: StudentAccount,
        token_hash: str,
        expires_at: datetime,
    ) -> None:
        student.reset_token_hash = token_hash
        student.reset_token_expires_at = expires_at
        await db.commit()

    @staticmethod
    async def update_profile(db: AsyncSession, student: StudentAccount, **fields) -> StudentAccount:
        for name, value in fields.items():
            setattr(student, name, value)
        await db.commit()
        await db.refresh(student)

        logger.info(f"Updated profile of student account {student.id}: {sorted(fields)}")
        return student

    @staticmethod
    async def set_password(
        db: AsyncSession,
        student: StudentAccount,
        password_hash: str,
    ) -> None:
        """Store a new password hash, consume the reset token and unlock the account."""
        student.password_hash = password_hash
        student.reset_token_hash = None
        student.reset_token_expires_at = None
        student.login_attempts = 0
        student.last_login_attempt = None
        await db.commit()


class StaffRepository:
    """Repository for staff account database operations."""

    @staticmethod
    async def create(db: AsyncSession, **fields) -> StaffAccount:
        staff = StaffAccount(**fields)
        db.add(staff)
        await db.commit()
        await db.refresh(staff)

        logger.info(f"Created staff account: {staff.id} - {staff.email} ({staff.status.value})")
        return staff

    @staticmethod
    async def get_by_id(db: AsyncSession, staff_id: str) -> StaffAccount | None:
        return await db.get(StaffAccount, staff_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> StaffAccount | None:
        result = await db.execute(
            select(StaffAccount).where(func.lower(StaffAccount.email) == email.lower())
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_api_key(db: AsyncSession, api_key: str) -> StaffAccount | None:
        result = await db.execute(select(StaffAccount).where(StaffAccount.api_key == api_key))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_accounts(
        db: AsyncSession,
        *,
        status: StaffStatus | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[StaffAccount], int]:
        """
        List staff accounts, newest first.

        Returns:
            Tuple of (accounts on this page, total matching accounts)
        """
        query = select(StaffAccount)
        if status:
            query = query.where(StaffAccount.status == status)

        total_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = total_result.scalar() or 0

        result = await db.execute(
            query.order_by(StaffAccount.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total

    @staticmethod
    async def rotate_csrf_token(
        db: AsyncSession,
        staff: StaffAccount,
        csrf_token: str,
        google_id: str | None = None,
    ) -> StaffAccount:
        """Store a new CSRF token, linking the Google identity on first sign-in."""
        staff.csrf_token = csrf_token
        if google_id and not staff.google_id:
            staff.google_id = google_id
        await db.commit()
        await db.refresh(staff)
        return staff

    @staticmethod
    async def update_status(
        db: AsyncSession,
        staff: StaffAccount,
        status: StaffStatus,
    ) -> StaffAccount:
        staff.status = status
        await db.commit()
        await db.refresh(staff)
        return staff

    @staticmethod
    async def update_profile(db: AsyncSession, staff: StaffAccount, **fields) -> StaffAccount:
        for name, value in fields.items():
            setattr(staff, name, value)
        await db.commit()
        await db.refresh(staff)

        logger.info(f"Updated profile of staff account {staff.id}: {sorted(fields)}")
        return staff
