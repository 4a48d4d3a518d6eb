"""
FastAPI dependency injection utilities for authentication, services and database sessions.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from townwrent.database import get_db
from townwrent.models.user import User
from townwrent.services.auth import AuthService
from townwrent.services.drafts import DraftStore
from townwrent.services.mailer import Mailer
from townwrent.services.message import MessageService
from townwrent.services.notifications import NotificationHub, notification_hub
from townwrent.services.profile import ProfileService
from townwrent.services.property import PropertyService
from townwrent.services.site_visit import SiteVisitService
from townwrent.services.storage import StorageService
from townwrent.utils.exceptions import (
    APIException,
    UnauthorizedError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_storage_service() -> StorageService:
    return StorageService()


def get_mailer() -> Mailer:
    return Mailer()


def get_notification_hub() -> NotificationHub:
    return notification_hub


def get_draft_store() -> DraftStore:
    return DraftStore()


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
) -> AuthService:
    return AuthService(db, mailer=mailer)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
) -> PropertyService:
    return PropertyService(db, storage=storage)


async def get_profile_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
) -> ProfileService:
    return ProfileService(db, storage=storage)


async def get_message_service(
    db: AsyncSession = Depends(get_db),
    hub: NotificationHub = Depends(get_notification_hub)
) -> MessageService:
    return MessageService(db, hub=hub)


async def get_site_visit_service(db: AsyncSession = Depends(get_db)) -> SiteVisitService:
    return SiteVisitService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except (InvalidTokenError, TokenExpiredError, InactiveUserError):
        raise
    except APIException as e:
        raise UnauthorizedError(f"Authentication failed: {e.detail}")


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Get current user if a valid token is provided, otherwise None.
    Used by public endpoints that behave differently for signed-in users.
    """
    if not credentials:
        return None

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except APIException:
        return None
