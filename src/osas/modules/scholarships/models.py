"""
Scholarship Models

Scholarships, the courses they are open to, and the document forms an
application must include. Course and form requirements are many-to-many
join tables; a scholarship with no course rows is open to every course.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Column, Date, ForeignKey, Numeric, String, Table, Text
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from osas.core.database import Base
from osas.modules.shared import BaseModel


class ScholarshipStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVE = "archive"


scholarship_courses = Table(
    "scholarship_courses",
    Base.metadata,
    Column(
        "scholarship_id",
        UUID(as_uuid=False),
        ForeignKey("scholarships.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "course_id",
        UUID(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

scholarship_form_requirements = Table(
    "scholarship_form_requirements",
    Base.metadata,
    Column(
        "scholarship_id",
        UUID(as_uuid=False),
        ForeignKey("scholarships.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "form_id",
        UUID(as_uuid=False),
        ForeignKey("scholarship_forms.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Course(BaseModel):
    """Degree program a student is enrolled in (e.g. BSIT)."""

    __tablename__ = "courses"

    course_code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    course_name: Mapped[str] = mapped_column(String(200), nullable=False)

    def __repr__(self) -> str:
        return f"<Course(code={self.course_code})>"


class ScholarshipForm(BaseModel):
    """
    A document students must upload when applying.

    `name` is the key the upload must use (files[<name>]).
    """

    __tablename__ = "scholarship_forms"

    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    template_path: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<ScholarshipForm(name={self.name})>"


class Scholarship(BaseModel):
    """A scholarship program with an application window."""

    __tablename__ = "scholarships"

    title: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    status: Mapped[ScholarshipStatus] = mapped_column(
        ENUM(
            ScholarshipStatus,
            name="scholarship_status",
            create_type=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ScholarshipStatus.ACTIVE,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    courses: Mapped[list[Course]] = relationship(
        secondary=scholarship_courses,
        lazy="selectin",
        order_by="Course.course_code",
    )
    required_forms: Mapped[list[ScholarshipForm]] = relationship(
        secondary=scholarship_form_requirements,
        lazy="selectin",
        order_by="ScholarshipForm.name",
    )

    def __repr__(self) -> str:
        return f"<Scholarship(id={self.id}, title={self.title}, status={self.status.value})>"

    def is_open_on(self, day: date) -> bool:
        """Whether `day` falls within the application window (inclusive)."""
        return self.start_date <= day <= self.end_date
