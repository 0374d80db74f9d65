"""
Account Models

Database models for the two principal types: institutional staff and
students. Both carry a long-lived API key and a single-slot CSRF token;
students additionally carry the brute-force lockout counters and the
baseline documents required before applying for a scholarship.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from osas.core.security import API_KEY_MAX_LENGTH
from osas.modules.shared import BaseModel


class StaffStatus(str, Enum):
    """Approval status of a staff account."""

    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class StaffAccount(BaseModel):
    """
    OSAS staff member.

    Created on first Google sign-in with status PENDING; another staff
    member must approve the account before it can use the API.
    """

    __tablename__ = "staff_accounts"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str | None] = mapped_column(String(150), nullable=True)
    google_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    # Session secrets
    api_key: Mapped[str] = mapped_column(
        String(API_KEY_MAX_LENGTH), unique=True, index=True, nullable=False
    )
    csrf_token: Mapped[str | None] = mapped_column(String(128), nullable=True)

    status: Mapped[StaffStatus] = mapped_column(
        ENUM(
            StaffStatus,
            name="staff_status",
            create_type=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=StaffStatus.PENDING,
    )

    def __repr__(self) -> str:
        return f"<StaffAccount(id={self.id}, email={self.email}, status={self.status.value})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class StudentAccount(BaseModel):
    """Student account with profile, baseline documents and lockout state."""

    __tablename__ = "students"

    student_number: Mapped[str] = mapped_column(
        String(9),
        unique=True,
        index=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)
    course: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    year_level: Mapped[str] = mapped_column(String(20), nullable=False)
    complete_address: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    # Baseline documents (storage keys)
    picture: Mapped[str | None] = mapped_column(String(500), nullable=True)
    school_id_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    certificate_of_indigency: Mapped[str | None] = mapped_column(String(500), nullable=True)
    certificate_of_registration: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Session secrets
    api_key: Mapped[str] = mapped_column(
        String(API_KEY_MAX_LENGTH), unique=True, index=True, nullable=False
    )
    csrf_token: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # Brute-force lockout
    login_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_login_attempt: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Password reset (token stored hashed)
    reset_token_hash: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<StudentAccount(id={self.id}, student_number={self.student_number})>"

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(part for part in parts if part)
