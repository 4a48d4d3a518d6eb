"""
Repository layer for data access operations.
"""

from townwrent.repositories.base import BaseRepository
from townwrent.repositories.user import UserRepository
from townwrent.repositories.profile import ProfileRepository
from townwrent.repositories.property import PropertyRepository, PropertySearchFilters
from townwrent.repositories.image import PropertyImageRepository
from townwrent.repositories.message import MessageRepository
from townwrent.repositories.site_visit import SiteVisitRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ProfileRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "PropertyImageRepository",
    "MessageRepository",
    "SiteVisitRepository",
]
