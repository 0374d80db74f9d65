"""Authentication module."""

from osas.modules.auth.router import router
from osas.modules.auth.schemas import LoginRequest, LoginResponse, StaffSignInResponse

__all__ = ["router", "LoginRequest", "LoginResponse", "StaffSignInResponse"]
