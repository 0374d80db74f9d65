"""
Application Models

A student's application for a scholarship and the documents uploaded with
it. A student may hold at most one application that is not declined; the
partial unique index enforces this even under concurrent submissions.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, String, func, text
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from osas.modules.accounts.models import StudentAccount
from osas.modules.scholarships.models import Scholarship
from osas.modules.shared import BaseModel


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


# Statuses that count as a student's "active" application
ACTIVE_STATUSES = (ApplicationStatus.PENDING, ApplicationStatus.APPROVED)

ACTIVE_APPLICATION_INDEX = "uq_applications_one_active_per_student"


class Application(BaseModel):
    """A scholarship application with its uploaded documents."""

    __tablename__ = "applications"

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scholarship_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("scholarships.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        ENUM(
            ApplicationStatus,
            name="application_status",
            create_type=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    student: Mapped[StudentAccount] = relationship(lazy="selectin")
    scholarship: Mapped[Scholarship] = relationship(lazy="selectin")
    forms: Mapped[list["ApplicationForm"]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ApplicationForm.form_name",
    )

    __table_args__ = (
        Index(
            ACTIVE_APPLICATION_INDEX,
            "student_id",
            unique=True,
            postgresql_where=text("status <> 'declined'"),
            sqlite_where=text("status <> 'declined'"),
        ),
        Index("ix_applications_status_applied_at", "status", "applied_at"),
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, student={self.student_id}, status={self.status.value})>"


class ApplicationForm(BaseModel):
    """One uploaded document belonging to an application."""

    __tablename__ = "application_forms"

    application_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    form_name: Mapped[str] = mapped_column(String(200), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    application: Mapped[Application] = relationship(back_populates="forms")

    def __repr__(self) -> str:
        return f"<ApplicationForm(application={self.application_id}, form={self.form_name})>"
