"""
Authentication service for sign-in, sign-up, sessions and password recovery.
Handles JWT token generation and validation on top of the user repository.
"""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from townwrent.config import settings
from townwrent.repositories.user import UserRepository
from townwrent.models.user import User
from townwrent.services.mailer import Mailer
from townwrent.utils.auth import (
    create_access_token,
    create_refresh_token,
    create_password_reset_token,
    verify_token,
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    RESET_TOKEN,
)
from townwrent.utils.exceptions import (
    APIException,
    BadRequestError,
    DuplicateResourceError,
    InactiveUserError,
    InternalServerError,
    InvalidCredentialsError,
    InvalidResetLinkError,
    InvalidTokenError,
    NotFoundError,
    TokenExpiredError,
    ValidationError,
)
from jose import JWTError, ExpiredSignatureError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service.
    Sessions are stateless JWT pairs; password resets use a third, short-lived token type.
    """

    def __init__(self, db_session: AsyncSession, mailer: Optional[Mailer] = None):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.mailer = mailer or Mailer()

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            ValidationError: If either field is blank
            InvalidCredentialsError: If credentials are invalid
            InactiveUserError: If user account is inactive
        """
        if not email or not email.strip() or not password:
            raise ValidationError("Email and password are required")

        user = await self.user_repo.authenticate_user(email, password)
        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning(f"Inactive user attempted to sign in: {email}")
            raise InactiveUserError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    def create_tokens(self, user: User) -> Tuple[str, str]:
        """Create (access_token, refresh_token) for a user."""
        access_token = create_access_token(user_id=user.id, email=user.email)
        refresh_token = create_refresh_token(user_id=user.id, email=user.email)
        return access_token, refresh_token

    async def sign_in(self, email: str, password: str) -> Tuple[User, str, str]:
        """
        Authenticate user and create tokens.

        Returns:
            Tuple of (user, access_token, refresh_token)
        """
        user = await self.authenticate_user(email, password)
        access_token, refresh_token = self.create_tokens(user)
        return user, access_token, refresh_token

    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> Tuple[User, str, str]:
        """
        Register a new account and sign it in.

        Args:
            email: Email address
            password: Plain text password (at least the configured minimum length)
            full_name: Stored on the new profile

        Returns:
            Tuple of (user, access_token, refresh_token)

        Raises:
            ValidationError: If a required field is blank
            DuplicateResourceError: If the e-mail is already registered
            BadRequestError: If the e-mail or password is rejected
        """
        if not email or not email.strip() or not password:
            raise ValidationError("Email and password are required")

        try:
            user = await self.user_repo.create_user(email, password, full_name)
        except ValueError as e:
            logger.warning(f"Sign-up rejected for {email}: {e}")
            if "already registered" in str(e):
                raise DuplicateResourceError(str(e))
            raise BadRequestError(str(e))

        logger.info(f"New account registered: {user.email}")
        access_token, refresh_token = self.create_tokens(user)
        return user, access_token, refresh_token

    async def get_user_by_id(self, user_id: uuid.UUID) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    async def _user_from_token(self, token: str, token_type: str) -> User:
        try:
            payload = verify_token(token, token_type=token_type)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise InvalidTokenError(str(e))

        try:
            user = await self.get_user_by_id(uuid.UUID(payload.user_id))
        except (NotFoundError, ValueError):
            raise InvalidTokenError("User no longer exists")

        if not user.is_active:
            raise InactiveUserError()
        return user

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the session behind an access token.

        Raises:
            InvalidTokenError: If token is invalid or its user is gone
            TokenExpiredError: If token is expired
            InactiveUserError: If user account is inactive
        """
        return await self._user_from_token(token, ACCESS_TOKEN)

    async def refresh_access_token(self, refresh_token: str) -> str:
        """Create a new access token from a refresh token."""
        user = await self._user_from_token(refresh_token, REFRESH_TOKEN)
        return create_access_token(user_id=user.id, email=user.email)

    async def request_password_reset(self, email: str, redirect_to: Optional[str] = None) -> None:
        """
        E-mail a password reset link.
        Unknown addresses are accepted silently so the endpoint does not reveal accounts.

        Raises:
            ValidationError: If no e-mail was given
            InternalServerError: If the e-mail could not be sent
        """
        if not email or not email.strip():
            raise ValidationError("Please enter your email address")

        user = await self.user_repo.get_by_email(email)
        if not user:
            logger.info(f"Password reset requested for unknown email: {email}")
            return

        token = create_password_reset_token(user_id=user.id, email=user.email)
        link = f"{redirect_to or settings.password_reset_redirect_url}?token={token}"
        body = (
            "We received a request to reset your TownWrent password.\n\n"
            f"Open this link to choose a new one:\n{link}\n\n"
            f"The link expires in {settings.password_reset_expire_minutes} minutes."
        )

        try:
            await self.mailer.send(user.email, "Reset your TownWrent password", body)
        except OSError as e:
            logger.error(f"Failed to send password reset email to {user.email}: {e}")
            raise InternalServerError("Failed to send password reset email")

        logger.info(f"Password reset email issued for {user.email}")

    async def reset_password(self, token: Optional[str], password: str, confirm_password: str) -> User:
        """
        Set a new password using a reset token.

        The password rules are checked before the token is looked at, so a
        too-short password never reaches the token decoder or the database.

        Raises:
            ValidationError: If the password is too short or does not match its confirmation
            InvalidResetLinkError: If the token is missing, expired or invalid
        """
        if not password or len(password) < settings.min_password_length:
            raise ValidationError(f"Password must be at least {settings.min_password_length} characters long.")

        if password != confirm_password:
            raise ValidationError("Passwords do not match.")

        if not token:
            raise InvalidResetLinkError()

        try:
            payload = verify_token(token, token_type=RESET_TOKEN)
            user = await self.get_user_by_id(uuid.UUID(payload.user_id))
        except (JWTError, NotFoundError, ValueError) as e:
            logger.warning(f"Rejected password reset token: {e}")
            raise InvalidResetLinkError()

        try:
            updated = await self.user_repo.update_password(user.id, password)
        except APIException:
            raise
        except ValueError as e:
            raise ValidationError(str(e))

        logger.info(f"Password reset completed for {updated.email}")
        return updated
