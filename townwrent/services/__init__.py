"""
Service layer for business logic implementation.
"""

from .auth import AuthService
from .property import PropertyService
from .profile import ProfileService
from .message import MessageService
from .site_visit import SiteVisitService
from .storage import StorageService
from .drafts import DraftStore
from .notifications import NotificationHub, InboxState, notification_hub
from .error_handler import register_exception_handlers

__all__ = [
    "AuthService",
    "PropertyService",
    "ProfileService",
    "MessageService",
    "SiteVisitService",
    "StorageService",
    "DraftStore",
    "NotificationHub",
    "InboxState",
    "notification_hub",
    "register_exception_handlers",
]
