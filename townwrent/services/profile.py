"""
Profile service backing the account settings page.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from townwrent.config import settings
from townwrent.repositories.profile import ProfileRepository
from townwrent.models.profile import Profile
from townwrent.models.user import User
from townwrent.services.storage import StorageService
from townwrent.utils.file_utils import FileValidator, ImageFile
from townwrent.utils.validators import validate_phone_number
from townwrent.utils.exceptions import ValidationError
import time
import logging

logger = logging.getLogger(__name__)


class ProfileService:

    def __init__(self, db_session: AsyncSession, storage: Optional[StorageService] = None):
        self.db = db_session
        self.profile_repo = ProfileRepository(db_session)
        self.storage = storage or StorageService()
        self.bucket = settings.avatars_bucket

    async def get_or_create_profile(self, current_user: User) -> Profile:
        """Return the user's profile, creating an empty one on first visit."""
        return await self.profile_repo.get_or_create(current_user.id)

    async def update_profile(
        self,
        current_user: User,
        full_name: Optional[str],
        phone: Optional[str] = None,
        avatar: Optional[ImageFile] = None
    ) -> Profile:
        """
        Save the settings form.

        The full name is required. A new avatar replaces the old one: the
        previous file is removed from the avatars bucket before the upload.

        Raises:
            ValidationError: If the name is blank, the phone is malformed or the avatar is not a valid image
        """
        name = (full_name or "").strip()
        if not name:
            raise ValidationError("Please enter your full name")

        cleaned_phone = validate_phone_number(phone) if phone and phone.strip() else None

        if avatar is not None:
            FileValidator.validate_image(avatar)

        profile = await self.profile_repo.get_or_create(current_user.id)
        changes = {"full_name": name, "phone": cleaned_phone}

        if avatar is not None:
            if profile.avatar_url:
                old_path = self.storage.path_from_url(self.bucket, profile.avatar_url)
                if not old_path.startswith("http"):
                    await self.storage.remove(self.bucket, [old_path])

            path = f"{current_user.id}/{int(time.time() * 1000)}.{avatar.extension}"
            await self.storage.upload(self.bucket, path, avatar.content)
            changes["avatar_url"] = self.storage.get_public_url(self.bucket, path)

        updated = await self.profile_repo.update(current_user.id, changes, exclude_none=False)
        logger.info(f"Profile updated for user {current_user.email}")
        return updated
