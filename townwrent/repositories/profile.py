"""
Profile repository: lazy creation and updates of profile rows.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from townwrent.repositories.base import BaseRepository
from townwrent.models.profile import Profile
import uuid
import logging

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository[Profile]):

    def __init__(self, db: AsyncSession):
        super().__init__(Profile, db)

    async def get_or_create(self, user_id: uuid.UUID) -> Profile:
        """Return the user's profile, inserting an empty one when none exists yet."""
        profile = await self.get_by_id(user_id)
        if profile is not None:
            return profile

        profile = await self.create({"id": user_id})
        logger.info(f"Created missing profile for user {user_id}")
        return profile
