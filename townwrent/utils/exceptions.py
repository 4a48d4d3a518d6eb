"""
Exceptions raised by services and routes.

Each class carries its HTTP status and machine-readable code, so the error
handler can turn any of them into the standard JSON error body without
knowing which layer raised it.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base class; subclasses set ``http_status`` and ``code``."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "API_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(status_code=status_code or self.http_status, detail=detail, headers=headers)
        self.error_code = error_code or self.code


# 400
class BadRequestError(APIException):
    """Request refused by a business rule."""

    http_status = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"


class ValidationError(BadRequestError):
    """
    Invalid input. ``field_errors`` holds one {"field", "message"} entry per
    offending form field when the failure is field specific.
    """

    code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail)
        self.field_errors = field_errors or []


class InvalidCredentialsError(BadRequestError):
    code = "INVALID_CREDENTIALS"

    def __init__(self, detail: str = "Invalid login credentials"):
        super().__init__(detail)


class InvalidResetLinkError(BadRequestError):
    """Password reset token missing, expired or tampered with."""

    code = "INVALID_RESET_LINK"

    def __init__(
        self,
        detail: str = "Your reset link has expired or is invalid. Please request a new password reset email."
    ):
        super().__init__(detail)


class DuplicateResourceError(BadRequestError):
    code = "DUPLICATE_RESOURCE"


class ResourceLimitExceededError(BadRequestError):
    code = "LIMIT_EXCEEDED"

    def __init__(self, resource: str, limit: int):
        super().__init__(f"{resource} limit exceeded (maximum: {limit})")
        self.limit = limit


class UnsupportedFileTypeError(BadRequestError):
    code = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, file_type: str):
        super().__init__(f"Unsupported file type '{file_type}'. Only image files are allowed")


class FileSizeExceededError(BadRequestError):
    code = "FILE_TOO_LARGE"

    def __init__(self, size: int, max_size: int):
        super().__init__(f"File size {size} bytes exceeds maximum allowed size {max_size} bytes")


# 401
class UnauthorizedError(APIException):
    """No usable session."""

    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class TokenExpiredError(UnauthorizedError):
    def __init__(self, detail: str = "Session has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    def __init__(self, detail: str = "Invalid session token"):
        super().__init__(detail)


# 403
class ForbiddenError(APIException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(detail)


class InactiveUserError(ForbiddenError):
    def __init__(self, detail: str = "User account is inactive"):
        super().__init__(detail)


class PropertyOwnershipError(ForbiddenError):
    def __init__(self, detail: str = "Only the landlord who posted this listing can change it"):
        super().__init__(detail)


# 404
class NotFoundError(APIException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"
        super().__init__(detail)


class PropertyNotFoundError(NotFoundError):
    def __init__(self, property_id: str):
        super().__init__("Property", property_id)


# 500
class InternalServerError(APIException):
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(detail)


class StorageError(InternalServerError):
    """A bucket write or removal failed."""

    code = "STORAGE_ERROR"

    def __init__(self, detail: str):
        super().__init__(f"Storage error: {detail}")
