"""
Authentication API endpoints: sign-up, sign-in, session lookup, token refresh
and the forgot/reset password flow.
"""

from fastapi import APIRouter, Depends, status
from townwrent.models.user import User
from townwrent.services.auth import AuthService
from townwrent.schemas.auth import (
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
from townwrent.utils.dependencies import get_auth_service, get_current_user
from townwrent.config import settings
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _session(user: User, access_token: str, refresh_token: str) -> SessionResponse:
    return SessionResponse(
        user=UserResponse.from_user(user),
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.post(
    "/login",
    response_model=SessionResponse,
    status_code=status.HTTP_200_OK,
    summary="Sign in",
    description="Authenticate with email and password, returns JWT tokens"
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> SessionResponse:
    """
    Raises:
        InvalidCredentialsError: If the email or password is wrong
        InactiveUserError: If the account is disabled
    """
    user, access_token, refresh_token = await auth_service.sign_in(
        email=login_data.email,
        password=login_data.password
    )
    return _session(user, access_token, refresh_token)


@router.post(
    "/signup",
    response_model=SessionResponse,
    status_code=status.HTTP_200_OK,
    summary="Create an account",
    description="Register a new account and start a session"
)
async def signup(
    signup_data: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> SessionResponse:
    user, access_token, refresh_token = await auth_service.sign_up(
        email=signup_data.email,
        password=signup_data.password,
        full_name=signup_data.full_name
    )
    return _session(user, access_token, refresh_token)


@router.get(
    "/session",
    response_model=CurrentUserResponse,
    summary="Current session",
    description="Return the signed-in user for the bearer token"
)
async def get_session(current_user: User = Depends(get_current_user)) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserResponse.from_user(current_user))


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    summary="Refresh access token",
    description="Generate a new access token using a refresh token"
)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AccessTokenResponse:
    access_token = await auth_service.refresh_access_token(refresh_data.refresh_token)
    return AccessTokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.post(
    "/forgot",
    response_model=StatusResponse,
    summary="Request a password reset link",
    description="E-mail a reset link; the response is the same whether or not the account exists"
)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> StatusResponse:
    await auth_service.request_password_reset(request_data.email, request_data.redirect_to)
    return StatusResponse(message="Check your email for the password reset link")


@router.post(
    "/reset-password",
    response_model=StatusResponse,
    summary="Set a new password",
    description="Set a new password with the token from the reset link"
)
async def reset_password(
    reset_data: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> StatusResponse:
    await auth_service.reset_password(reset_data.token, reset_data.password, reset_data.confirm_password)
    return StatusResponse(message="Your password has been updated")


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign out",
    description="Sign out (tokens are dropped client-side)"
)
async def logout(current_user: User = Depends(get_current_user)) -> None:
    # Tokens are stateless; this only confirms the caller was signed in
    logger.info(f"User {current_user.email} signed out")
