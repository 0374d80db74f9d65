"""
Service Error Taxonomy

Every business-rule failure is raised as a ServiceError subclass and turned
into a structured JSON response by the exception handler in main.py:

    {"detail": {"error": "<ERROR_CODE>", "message": "<caller-safe message>"}}

Feature modules subclass these with their own error codes.
"""


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 400,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.headers = headers
        super().__init__(message)


class ValidationError(ServiceError):
    """Malformed or missing input (400)."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message=message, error_code=error_code, status_code=400)


class AuthError(ServiceError):
    """Bad or missing credentials (401)."""

    def __init__(self, message: str, error_code: str = "UNAUTHORIZED"):
        super().__init__(message=message, error_code=error_code, status_code=401)


class ForbiddenError(ServiceError):
    """CSRF token missing or account not approved (403)."""

    def __init__(self, message: str, error_code: str = "FORBIDDEN"):
        super().__init__(message=message, error_code=error_code, status_code=403)


class NotFoundError(ServiceError):
    """Referenced resource does not exist (404)."""

    def __init__(self, message: str, error_code: str = "NOT_FOUND"):
        super().__init__(message=message, error_code=error_code, status_code=404)


class ConflictError(ServiceError):
    """Duplicate unique field (409)."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(message=message, error_code=error_code, status_code=409)


class RateLimitError(ServiceError):
    """Request budget for the current window is spent (429)."""

    def __init__(self, retry_after_seconds: int):
        super().__init__(
            message="Rate limit exceeded. Try again later.",
            error_code="RATE_LIMIT_EXCEEDED",
            status_code=429,
            headers={"Retry-After": str(retry_after_seconds)},
        )
        self.retry_after_seconds = retry_after_seconds


class LockoutError(ServiceError):
    """Account temporarily locked after repeated failed logins (429)."""

    def __init__(self, message: str, error_code: str = "ACCOUNT_LOCKED"):
        super().__init__(message=message, error_code=error_code, status_code=429)


class StorageError(ServiceError):
    """File or database I/O failure (500)."""

    def __init__(self, message: str, error_code: str = "STORAGE_ERROR"):
        super().__init__(message=message, error_code=error_code, status_code=500)
