"""
API routers.
"""

from .auth import router as auth_router
from .properties import router as properties_router
from .messages import router as messages_router
from .site_visits import router as site_visits_router
from .profile import router as profile_router
from .drafts import router as drafts_router
from .roles import router as roles_router
from .realtime import router as realtime_router

__all__ = [
    "auth_router",
    "properties_router",
    "messages_router",
    "site_visits_router",
    "profile_router",
    "drafts_router",
    "roles_router",
    "realtime_router",
]
