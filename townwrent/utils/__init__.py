"""
Shared helpers: tokens, exceptions, validation and upload handling.
Dependencies are imported from ``townwrent.utils.dependencies`` directly to avoid circular imports.
"""

from .auth import (
    create_access_token,
    create_refresh_token,
    create_password_reset_token,
    verify_token,
    TokenPayload,
)
from .exceptions import (
    APIException,
    BadRequestError,
    ValidationError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    InternalServerError,
)

__all__ = [
    "create_access_token",
    "create_refresh_token",
    "create_password_reset_token",
    "verify_token",
    "TokenPayload",
    "APIException",
    "BadRequestError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "InternalServerError",
]
