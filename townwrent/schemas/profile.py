"""
Pydantic schemas for the account settings page.
"""

from pydantic import BaseModel
from typing import Optional
from townwrent.models.profile import Profile
from townwrent.models.user import User


class ProfileResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_model(cls, profile: Profile, user: User) -> "ProfileResponse":
        return cls(
            id=str(profile.id),
            email=user.email,
            full_name=profile.full_name,
            avatar_url=profile.avatar_url,
            phone=profile.phone,
        )
