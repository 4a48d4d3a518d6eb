"""
Pydantic schemas for request/response validation.
"""

from .auth import (
    LoginRequest,
    SignupRequest,
    RefreshTokenRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UserResponse,
    SessionResponse,
    AccessTokenResponse,
    CurrentUserResponse,
    StatusResponse,
)

from .property import (
    PropertyImageResponse,
    ListedBy,
    PropertyResponse,
    PropertyListResponse,
    PropertyUpdate,
    FeaturedUpdate,
    AnalyticsResponse,
)

from .message import (
    SendMessageRequest,
    ReplyRequest,
    MessageResponse,
    SendMessageResponse,
    InboxResponse,
    UnreadCountResponse,
)

from .profile import ProfileResponse

from .site_visit import (
    VisitPackageResponse,
    BookVisitRequest,
    SiteVisitResponse,
    BookVisitResponse,
)

from .draft import (
    DraftPayload,
    DraftResponse,
    StepValidationRequest,
    StepValidationResponse,
    RoleChoice,
    RoleChoicesResponse,
)

__all__ = [
    "LoginRequest",
    "SignupRequest",
    "RefreshTokenRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UserResponse",
    "SessionResponse",
    "AccessTokenResponse",
    "CurrentUserResponse",
    "StatusResponse",
    "PropertyImageResponse",
    "ListedBy",
    "PropertyResponse",
    "PropertyListResponse",
    "PropertyUpdate",
    "FeaturedUpdate",
    "AnalyticsResponse",
    "SendMessageRequest",
    "ReplyRequest",
    "MessageResponse",
    "SendMessageResponse",
    "InboxResponse",
    "UnreadCountResponse",
    "ProfileResponse",
    "VisitPackageResponse",
    "BookVisitRequest",
    "SiteVisitResponse",
    "BookVisitResponse",
    "DraftPayload",
    "DraftResponse",
    "StepValidationRequest",
    "StepValidationResponse",
    "RoleChoice",
    "RoleChoicesResponse",
]
