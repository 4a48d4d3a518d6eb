"""
JWT helpers. Sessions are a stateless access/refresh pair; password reset
links carry a third, short-lived token type so a leaked reset link can never
be used as a session.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional
from jose import JWTError, jwt
from townwrent.config import settings
import uuid


ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"
RESET_TOKEN = "reset"

# Default lifetime per token type, read from settings at issue time
TOKEN_LIFETIMES: Dict[str, Callable[[], timedelta]] = {
    ACCESS_TOKEN: lambda: timedelta(minutes=settings.access_token_expire_minutes),
    REFRESH_TOKEN: lambda: timedelta(days=settings.jwt_refresh_token_expire_days),
    RESET_TOKEN: lambda: timedelta(minutes=settings.password_reset_expire_minutes),
}


@dataclass
class TokenPayload:
    user_id: str
    email: str
    token_type: str
    exp: datetime


def issue_token(
    user_id: uuid.UUID,
    email: str,
    token_type: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": email,
        "type": token_type,
        "iat": now,
        "exp": now + (expires_delta or TOKEN_LIFETIMES[token_type]()),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: uuid.UUID, email: str, expires_delta: Optional[timedelta] = None) -> str:
    return issue_token(user_id, email, ACCESS_TOKEN, expires_delta)


def create_refresh_token(user_id: uuid.UUID, email: str, expires_delta: Optional[timedelta] = None) -> str:
    return issue_token(user_id, email, REFRESH_TOKEN, expires_delta)


def create_password_reset_token(user_id: uuid.UUID, email: str, expires_delta: Optional[timedelta] = None) -> str:
    return issue_token(user_id, email, RESET_TOKEN, expires_delta)


def verify_token(token: str, token_type: str = ACCESS_TOKEN) -> TokenPayload:
    """
    Decode a token and check that it is of the expected type.

    Raises:
        ExpiredSignatureError: If the token has expired (a JWTError subclass)
        JWTError: If the token is malformed, forged or of another type
    """
    # jose validates the signature and "exp"
    claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])

    if claims.get("type") != token_type:
        raise JWTError(f"Invalid token type. Expected {token_type}")
    if not claims.get("sub") or not claims.get("email"):
        raise JWTError("Invalid token payload")

    return TokenPayload(
        user_id=claims["sub"],
        email=claims["email"],
        token_type=token_type,
        exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )
