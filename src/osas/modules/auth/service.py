"""
Authentication Service Layer

Business logic for signing principals in and managing student credentials.

This module implements:
1. Student Login:
   - Lockout check before the password is looked at
   - Failed attempts counted per account, locking it after the maximum
   - CSRF token rotated on success (only the newest token is honoured)

2. Staff Google Sign-In:
   - Unknown Google accounts are provisioned as pending staff
   - Only approved staff receive a session

3. Student Registration:
   - Format and uniqueness checks on identity fields
   - Four baseline documents stored before the account row is written

4. Password Reset:
   - One-hour token, emailed in plain text and stored as a SHA-256 hash
   - A successful reset also clears any lockout

Security considerations:
- Unknown student numbers get the generic invalid-credentials error
- Reset requests answer identically whether or not the account exists
- Passwords, API keys and tokens are never logged
"""

import logging
import re
import secrets
import uuid
from datetime import UTC, datetime, timedelta

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.config import settings
from osas.core.email import send_password_reset
from osas.core.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    LockoutError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from osas.core.security import (
    generate_api_key,
    generate_csrf_token,
    generate_reset_token,
    hash_password,
    hash_token,
    verify_password,
)
from osas.core.storage import FileStorage, unique_filename
from osas.modules.accounts.models import StaffAccount, StaffStatus, StudentAccount
from osas.modules.accounts.repository import StaffRepository, StudentRepository
from osas.modules.auth.google import GoogleIdentity
from osas.modules.auth.lockout import (
    LockoutPolicy,
    attempts_left,
    lock_expired,
    lockout_remaining,
    remaining_minutes,
)
from osas.modules.auth.schemas import StudentRegistration
from osas.modules.scholarships import repository as scholarship_repository
from osas.modules.shared.text import PHONE_NUMBER_MESSAGE, PHONE_NUMBER_PATTERN, title_case
from osas.modules.shared.uploads import UploadedDocument

logger = logging.getLogger(__name__)

STUDENT_NUMBER_PATTERN = re.compile(r"^\d{4}-\d{4}$")
MIN_PASSWORD_LENGTH = 6

IMAGE_CONTENT_TYPES = frozenset({"image/jpeg", "image/png"})
DOCUMENT_CONTENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)

# upload field -> (account attribute, allowed content types, is image)
BASELINE_DOCUMENT_FIELDS: dict[str, tuple[str, frozenset[str], bool]] = {
    "picture": ("picture", IMAGE_CONTENT_TYPES, True),
    "school_id": ("school_id_image", IMAGE_CONTENT_TYPES, True),
    "certificate_of_indigency": ("certificate_of_indigency", DOCUMENT_CONTENT_TYPES, False),
    "certificate_of_registration": ("certificate_of_registration", DOCUMENT_CONTENT_TYPES, False),
}


# ============================================
# Errors
# ============================================


class InvalidCredentialsError(AuthError):
    """Raised when a student number / password pair is rejected."""

    def __init__(self, attempts_remaining: int | None = None):
        message = "Invalid credentials"
        if attempts_remaining is not None:
            message = f"Invalid credentials. {attempts_remaining} attempts remaining"
        super().__init__(message=message, error_code="INVALID_CREDENTIALS")
        self.attempts_remaining = attempts_remaining


class AccountLockedError(LockoutError):
    """Raised while a student account is locked out."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="ACCOUNT_LOCKED")


class AccountNotApprovedError(ForbiddenError):
    """Raised when a staff account has not been approved."""

    def __init__(self, message: str = "Your account is pending approval. Please contact administrator."):
        super().__init__(message=message, error_code="ACCOUNT_NOT_APPROVED")


class InvalidGoogleTokenError(AuthError):
    def __init__(self):
        super().__init__(message="Invalid Google token", error_code="INVALID_GOOGLE_TOKEN")


class DuplicateAccountError(ConflictError):
    def __init__(self, message: str):
        super().__init__(message=message, error_code="DUPLICATE_ACCOUNT")


class CourseNotFoundError(NotFoundError):
    def __init__(self, course_code: str):
        super().__init__(
            message=f"Course code '{course_code}' not found",
            error_code="COURSE_NOT_FOUND",
        )


class InvalidResetTokenError(ValidationError):
    def __init__(self):
        super().__init__(
            message="Invalid or expired reset token",
            error_code="INVALID_RESET_TOKEN",
        )


# ============================================
# Helpers
# ============================================


def _validate_new_password(password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise ValidationError("Password and confirm password do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if not re.search(r"[a-zA-Z]", password) or not re.search(r"[0-9]", password):
        raise ValidationError("Password must contain both letters and numbers")


def _validate_baseline_document(field: str, document: UploadedDocument | None) -> None:
    _, allowed_types, is_image = BASELINE_DOCUMENT_FIELDS[field]

    if document is None or document.is_empty:
        raise ValidationError(f"{field} is required")

    max_bytes = settings.max_image_file_bytes if is_image else settings.max_document_file_bytes
    if document.size > max_bytes:
        raise ValidationError(
            f"File size too large. Maximum size: {max_bytes // (1024 * 1024)}MB"
        )

    if document.content_type not in allowed_types:
        allowed = "jpeg, png" if is_image else "pdf, docx"
        raise ValidationError(f"Invalid file type for {field}. Allowed: {allowed}")


# ============================================
# Student Login
# ============================================


async def login_student(
    db: AsyncSession,
    student_number: str,
    password: str,
    *,
    now: datetime | None = None,
    policy: LockoutPolicy | None = None,
) -> StudentAccount:
    """
    Authenticate a student and rotate their CSRF token.

    Args:
        db: Database session
        student_number: Student number (NNNN-NNNN)
        password: Plain text password
        now: Current time (injectable for tests)
        policy: Lockout policy (defaults to settings)

    Returns:
        The student account carrying the new csrf_token

    Raises:
        ValidationError: Missing student number or password
        InvalidCredentialsError: Unknown student or wrong password
        AccountLockedError: Account is locked, or this failure locked it
    """
    now = now or datetime.now(UTC)
    policy = policy or LockoutPolicy.from_settings()

    student_number = student_number.strip()
    if not student_number or not password:
        raise ValidationError("Student number and password are required")

    student = await StudentRepository.get_by_student_number(db, student_number)
    if student is None:
        logger.warning("Login attempt for unknown student number")
        raise InvalidCredentialsError()

    remaining = lockout_remaining(student, now, policy)
    if remaining is not None:
        logger.warning(f"Login attempt on locked student account {student.id}")
        raise AccountLockedError(
            f"Account locked. Please try again in {remaining_minutes(remaining)} minutes"
        )

    if lock_expired(student, now, policy):
        student.login_attempts = 0

    if not verify_password(password, student.password_hash):
        attempts = student.login_attempts + 1
        await StudentRepository.record_failed_login(db, student, attempts, now)

        if attempts >= policy.max_attempts:
            logger.warning(f"Student account {student.id} locked after {attempts} failed logins")
            raise AccountLockedError(
                f"Too many failed attempts. Account locked for {policy.lockout_minutes} minutes"
            )

        logger.info(f"Failed login for student account {student.id} ({attempts} attempts)")
        if settings.login_reveal_attempts_remaining:
            raise InvalidCredentialsError(attempts_remaining=attempts_left(attempts, policy))
        raise InvalidCredentialsError()

    student = await StudentRepository.record_successful_login(db, student, generate_csrf_token())
    logger.info(f"Student logged in: {student.id}")
    return student


# ============================================
# Staff Google Sign-In
# ============================================


async def sign_in_staff(db: AsyncSession, identity: GoogleIdentity | None) -> StaffAccount:
    """
    Sign a staff member in from a verified Google identity.

    Unknown emails are provisioned as pending accounts and rejected until
    another staff member approves them.

    Raises:
        InvalidGoogleTokenError: If the token could not be verified
        AccountNotApprovedError: If the account is new, pending or declined
    """
    if identity is None:
        raise InvalidGoogleTokenError()

    staff = await StaffRepository.get_by_email(db, identity.email)

    if staff is None:
        try:
            await StaffRepository.create(
                db,
                email=identity.email.lower(),
                first_name=identity.first_name,
                last_name=identity.last_name,
                google_id=identity.google_id,
                password_hash=hash_password(secrets.token_hex(16)),
                api_key=generate_api_key(),
                status=StaffStatus.PENDING,
            )
        except IntegrityError as e:
            # A simultaneous first sign-in created the account first
            await db.rollback()
            logger.warning(f"Concurrent first sign-in for Google account {identity.google_id}")
            raise AccountNotApprovedError() from e
        raise AccountNotApprovedError(
            "Your admin account has been created but is pending approval. "
            "Please contact another admin."
        )

    if staff.status != StaffStatus.APPROVED:
        logger.warning(f"Sign-in attempt by unapproved staff account {staff.id}")
        raise AccountNotApprovedError()

    staff = await StaffRepository.rotate_csrf_token(
        db,
        staff,
        generate_csrf_token(),
        google_id=identity.google_id,
    )
    logger.info(f"Staff signed in: {staff.email}")
    return staff


# ============================================
# Student Registration
# ============================================


async def register_student(
    db: AsyncSession,
    storage: FileStorage,
    data: StudentRegistration,
    documents: dict[str, UploadedDocument | None],
) -> StudentAccount:
    """
    Create a student account with its four baseline documents.

    Documents are stored first; if the account insert fails the stored
    files are removed again.

    Raises:
        ValidationError: Invalid field, password or document
        DuplicateAccountError: Student number or email already registered
        CourseNotFoundError: Unknown course code
        StorageError: A file or the account could not be saved
    """
    required = {
        "student_number": data.student_number,
        "email": data.email,
        "first_name": data.first_name,
        "last_name": data.last_name,
        "phone_number": data.phone_number,
        "course": data.course,
        "year_level": data.year_level,
        "complete_address": data.complete_address,
        "password": data.password,
        "confirm_password": data.confirm_password,
    }
    for field, value in required.items():
        if not value:
            raise ValidationError(f"{field} is required")

    if not STUDENT_NUMBER_PATTERN.match(data.student_number):
        raise ValidationError("Student number must be in the format: 0000-0000")
    if await StudentRepository.student_number_exists(db, data.student_number):
        raise DuplicateAccountError("Student number already registered")

    try:
        email = validate_email(data.email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError("Please enter a valid email address") from e
    if await StudentRepository.email_exists(db, email):
        raise DuplicateAccountError("Email already registered")

    if not PHONE_NUMBER_PATTERN.match(data.phone_number):
        raise ValidationError(PHONE_NUMBER_MESSAGE)

    course = await scholarship_repository.get_course_by_code(db, data.course)
    if course is None:
        raise CourseNotFoundError(data.course)

    _validate_new_password(data.password, data.confirm_password)

    for field in BASELINE_DOCUMENT_FIELDS:
        _validate_baseline_document(field, documents.get(field))

    student_id = str(uuid.uuid4())
    stored: dict[str, str] = {}
    try:
        for field, (attribute, _, _) in BASELINE_DOCUMENT_FIELDS.items():
            document = documents[field]
            stored[attribute] = await storage.store(
                namespace=f"students/{student_id}",
                filename=unique_filename(field, document.content_type),
                content=document.content,
            )

        student = await StudentRepository.create(
            db,
            id=student_id,
            student_number=data.student_number,
            email=email,
            first_name=title_case(data.first_name),
            middle_name=title_case(data.middle_name) if data.middle_name else None,
            last_name=title_case(data.last_name),
            phone_number=data.phone_number,
            course=course.course_code,
            year_level=data.year_level,
            complete_address=data.complete_address,
            password_hash=hash_password(data.password),
            api_key=generate_api_key(),
            **stored,
        )
    except IntegrityError as e:
        await db.rollback()
        await storage.delete_many(list(stored.values()))
        logger.warning(f"Registration lost a uniqueness race: {e.orig}")
        raise DuplicateAccountError("Student number or email already registered") from e
    except SQLAlchemyError as e:
        await db.rollback()
        await storage.delete_many(list(stored.values()))
        logger.error(f"Failed to create student account: {e}")
        raise StorageError("Failed to create user") from e
    except StorageError:
        await storage.delete_many(list(stored.values()))
        raise

    logger.info(f"Registered student {student.id}")
    return student


# ============================================
# Password Reset
# ============================================


async def request_password_reset(
    db: AsyncSession,
    student_number: str,
    *,
    now: datetime | None = None,
) -> None:
    """
    Email a reset link if the student exists.

    The caller gets the same answer either way.
    """
    now = now or datetime.now(UTC)

    if not student_number.strip():
        raise ValidationError("Student number is required")

    student = await StudentRepository.get_by_student_number(db, student_number.strip())
    if student is None:
        logger.info("Password reset requested for unknown student number")
        return

    token = generate_reset_token()
    expires_at = now + timedelta(minutes=settings.password_reset_expiry_minutes)
    await StudentRepository.set_reset_token(db, student, hash_token(token), expires_at)

    email_sent = await send_password_reset(
        to_email=student.email,
        first_name=student.first_name,
        token=token,
        expires_minutes=settings.password_reset_expiry_minutes,
    )
    if not email_sent:
        logger.error(f"Failed to send password reset email for student {student.id}")


async def reset_password(
    db: AsyncSession,
    token: str,
    password: str,
    confirm_password: str,
    *,
    now: datetime | None = None,
) -> None:
    """
    Set a new password using an emailed reset token.

    Raises:
        ValidationError: Missing fields or password rule violation
        InvalidResetTokenError: Unknown, used or expired token
    """
    now = now or datetime.now(UTC)

    if not token or not password or not confirm_password:
        raise ValidationError("Token, password, and confirm password are required")
    _validate_new_password(password, confirm_password)

    student = await StudentRepository.get_by_reset_token_hash(db, hash_token(token))
    if (
        student is None
        or student.reset_token_expires_at is None
        or student.reset_token_expires_at < now
    ):
        raise InvalidResetTokenError()

    await StudentRepository.set_password(db, student, hash_password(password))
    logger.info(f"Password reset completed for student {student.id}")
