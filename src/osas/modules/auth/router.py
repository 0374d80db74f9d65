"""
Authentication Router

Public endpoints (no session required):
- POST /login - Student login (lockout protected)
- POST /register - Student self-registration with baseline documents
- POST /forgot - Request a password reset email
- POST /reset - Set a new password with a reset token
- POST /callback - Staff sign-in with a Google ID token

Login responses carry the api_key and a freshly rotated csrf_token; both
must be sent on every privileged request.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from osas.core.config import settings
from osas.core.database import get_db
from osas.core.errors import ValidationError
from osas.core.storage import FileStorage, get_storage
from osas.modules.auth import service
from osas.modules.auth.google import verify_google_token
from osas.modules.auth.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    RegisterResponse,
    ResetPasswordRequest,
    StaffSession,
    StaffSignInRequest,
    StaffSignInResponse,
    StudentRegistration,
    StudentSession,
)
from osas.modules.shared.schemas import MessageResponse
from osas.modules.shared.uploads import read_upload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Student Login",
    description="""
Authenticate with student number and password.

After 5 consecutive failures the account is locked for 30 minutes; while
locked, the password is not checked.
""",
    responses={
        400: {"description": "Missing student number or password"},
        401: {"description": "Invalid credentials"},
        429: {"description": "Account locked"},
    },
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    student = await service.login_student(db, credentials.student_number, credentials.password)
    return LoginResponse(user=StudentSession.model_validate(student))


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Student Registration",
    responses={
        400: {"description": "Invalid field, password or document"},
        404: {"description": "Unknown course code"},
        409: {"description": "Student number or email already registered"},
    },
)
async def register(
    student_number: str = Form(""),
    email: str = Form(""),
    first_name: str = Form(""),
    middle_name: str | None = Form(None),
    last_name: str = Form(""),
    phone_number: str = Form(""),
    course: str = Form(""),
    year_level: str = Form(""),
    complete_address: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    picture: UploadFile | None = File(None),
    school_id: UploadFile | None = File(None),
    certificate_of_indigency: UploadFile | None = File(None),
    certificate_of_registration: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> RegisterResponse:
    data = StudentRegistration(
        student_number=student_number,
        email=email,
        first_name=first_name,
        middle_name=middle_name or None,
        last_name=last_name,
        phone_number=phone_number,
        course=course,
        year_level=year_level,
        complete_address=complete_address,
        password=password,
        confirm_password=confirm_password,
    )

    uploads = {
        "picture": (picture, settings.max_image_file_bytes),
        "school_id": (school_id, settings.max_image_file_bytes),
        "certificate_of_indigency": (certificate_of_indigency, settings.max_document_file_bytes),
        "certificate_of_registration": (
            certificate_of_registration,
            settings.max_document_file_bytes,
        ),
    }
    documents = {
        field: await read_upload(upload, max_bytes) if upload is not None else None
        for field, (upload, max_bytes) in uploads.items()
    }

    student = await service.register_student(db, storage, data, documents)
    return RegisterResponse(user_id=student.id)


@router.post(
    "/forgot",
    response_model=MessageResponse,
    summary="Forgot Password",
    description="Always answers the same way, whether or not the student number exists.",
)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await service.request_password_reset(db, data.student_number)
    return MessageResponse(
        message="If the student number exists, a password reset email has been sent"
    )


@router.post(
    "/reset",
    response_model=MessageResponse,
    summary="Reset Password",
    responses={400: {"description": "Invalid password or invalid/expired token"}},
)
async def reset_password(
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await service.reset_password(db, data.token, data.password, data.confirm_password)
    return MessageResponse(message="Password has been reset successfully")


@router.post(
    "/callback",
    response_model=StaffSignInResponse,
    summary="Staff Google Sign-In",
    description="""
Exchange a Google ID token for a staff session.

First-time sign-ins create a pending account that another staff member
must approve before the session is granted.
""",
    responses={
        400: {"description": "Missing token"},
        401: {"description": "Invalid Google token"},
        403: {"description": "Account pending approval or declined"},
    },
)
async def google_callback(
    data: StaffSignInRequest,
    db: AsyncSession = Depends(get_db),
) -> StaffSignInResponse:
    if not data.google_token:
        raise ValidationError("Google token is required")

    identity = await verify_google_token(data.google_token)
    staff = await service.sign_in_staff(db, identity)
    return StaffSignInResponse(user=StaffSession.model_validate(staff))
