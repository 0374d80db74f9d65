"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, Field

from osas.modules.accounts.schemas import StaffProfile, StudentProfile


class LoginRequest(BaseModel):
    """Student login request schema."""

    student_number: str = Field("", max_length=20)
    password: str = Field("", max_length=128)


class StudentSession(StudentProfile):
    """Student profile plus the secrets needed for subsequent requests."""

    api_key: str
    csrf_token: str
    role: str = "student"


class StaffSession(StaffProfile):
    api_key: str
    csrf_token: str
    role: str = "admin"


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    user: StudentSession


class StaffSignInRequest(BaseModel):
    google_token: str = Field("", description="Google ID token from the sign-in client")


class StaffSignInResponse(BaseModel):
    success: bool = True
    message: str = "Google authentication successful"
    user: StaffSession


class StudentRegistration(BaseModel):
    """Registration form fields (documents are uploaded alongside)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    student_number: str
    email: str
    first_name: str
    middle_name: str | None = None
    last_name: str
    phone_number: str
    course: str
    year_level: str
    complete_address: str
    password: str
    confirm_password: str


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "Registration successful"
    user_id: str


class ForgotPasswordRequest(BaseModel):
    student_number: str = Field("", max_length=20)


class ResetPasswordRequest(BaseModel):
    token: str = ""
    password: str = ""
    confirm_password: str = ""
