"""
Seed Reference Data

Creates the courses and scholarship form templates the API expects, and
optionally the first approved staff account (later staff sign in with
Google and are approved by an existing staff member).

Usage:
    python scripts/seed_reference_data.py
    python scripts/seed_reference_data.py --staff-email head@osas.example.edu \
        --staff-first-name Maria --staff-last-name Santos
"""

import argparse
import asyncio
import secrets
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import select

from osas.core.database import async_session_maker, close_db
from osas.core.security import generate_api_key, hash_password
from osas.modules.accounts.models import StaffAccount, StaffStatus
from osas.modules.scholarships.models import Course, ScholarshipForm

COURSES = [
    ("BSIT", "Bachelor of Science in Information Technology"),
    ("BSCS", "Bachelor of Science in Computer Science"),
    ("BSED", "Bachelor of Secondary Education"),
    ("BEED", "Bachelor of Elementary Education"),
    ("BSBA", "Bachelor of Science in Business Administration"),
    ("BSN", "Bachelor of Science in Nursing"),
    ("BSCRIM", "Bachelor of Science in Criminology"),
]

FORMS = [
    ("Application Form", "templates/application_form.pdf"),
    ("Certificate of Grades", None),
    ("Certificate of Good Moral Character", None),
    ("Income Tax Return", None),
    ("Barangay Certificate", None),
]


async def seed(staff_email: str | None, first_name: str, last_name: str) -> None:
    async with async_session_maker() as db:
        existing_codes = set((await db.execute(select(Course.course_code))).scalars().all())
        for code, name in COURSES:
            if code in existing_codes:
                print(f"Course already exists: {code}")
                continue
            db.add(Course(course_code=code, course_name=name))
            print(f"Course created: {code}")

        existing_forms = set((await db.execute(select(ScholarshipForm.name))).scalars().all())
        for name, template_path in FORMS:
            if name in existing_forms:
                print(f"Form already exists: {name}")
                continue
            db.add(ScholarshipForm(name=name, template_path=template_path))
            print(f"Form created: {name}")

        if staff_email:
            result = await db.execute(
                select(StaffAccount).where(StaffAccount.email == staff_email.lower())
            )
            staff = result.scalar_one_or_none()
            if staff:
                print(f"Staff account already exists: {staff.email} ({staff.status.value})")
            else:
                db.add(
                    StaffAccount(
                        email=staff_email.lower(),
                        first_name=first_name,
                        last_name=last_name,
                        # Staff authenticate with Google; the password is never used
                        password_hash=hash_password(secrets.token_hex(16)),
                        api_key=generate_api_key(),
                        status=StaffStatus.APPROVED,
                    )
                )
                print(f"Approved staff account created: {staff_email}")

        await db.commit()

    await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed OSAS reference data")
    parser.add_argument("--staff-email", help="Email of the first approved staff member")
    parser.add_argument("--staff-first-name", default="OSAS")
    parser.add_argument("--staff-last-name", default="Administrator")
    args = parser.parse_args()

    asyncio.run(seed(args.staff_email, args.staff_first_name, args.staff_last_name))


if __name__ == "__main__":
    main()
