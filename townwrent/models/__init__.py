"""
Database models for the TownWrent API.
"""

from townwrent.models.user import User
from townwrent.models.profile import Profile
from townwrent.models.property import Property, PropertyType, PaymentFrequency, AMENITIES
from townwrent.models.image import PropertyImage
from townwrent.models.message import Message
from townwrent.models.site_visit import SiteVisit, VisitStatus

__all__ = [
    "User",
    "Profile",
    "Property",
    "PropertyType",
    "PaymentFrequency",
    "AMENITIES",
    "PropertyImage",
    "Message",
    "SiteVisit",
    "VisitStatus",
]
