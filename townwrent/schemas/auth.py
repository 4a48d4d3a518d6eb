"""
Pydantic schemas for authentication requests and responses.
Field rules live in the auth service so every failure reports the same message.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from townwrent.models.user import User


class LoginRequest(BaseModel):
    """Login request schema."""

    email: str = Field(..., description="User's email address", examples=["ama@example.com"])
    password: str = Field(..., description="User's password", examples=["secret123"])

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class SignupRequest(LoginRequest):
    """Sign-up request schema."""

    full_name: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Name shown on the profile",
        examples=["Ama Mensah"]
    )


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="Valid refresh token")


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Account e-mail")
    redirect_to: Optional[str] = Field(
        default=None,
        description="Page the reset link should open; the token is appended as ?token="
    )


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = Field(default=None, description="Token from the reset link")
    password: str = Field(default="", description="New password")
    confirm_password: str = Field(default="", description="New password, repeated")


class UserResponse(BaseModel):
    """User response schema (excluding sensitive data)."""

    id: str
    email: str
    full_name: Optional[str] = None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            full_name=user.full_name,
            is_active=user.is_active,
            created_at=user.created_at,
        )


class SessionResponse(BaseModel):
    """Signed-in user plus session tokens."""

    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class CurrentUserResponse(BaseModel):
    user: UserResponse


class StatusResponse(BaseModel):
    """Plain acknowledgement."""

    success: bool = True
    message: str
