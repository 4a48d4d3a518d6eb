"""
User accounts: registration with the optional profile row, credential checks
and password changes.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from townwrent.repositories.base import BaseRepository
from townwrent.models.user import User, hash_password, normalize_email
from townwrent.models.profile import Profile
from typing import Optional
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, email: str, password: str, full_name: Optional[str] = None) -> User:
        """
        Register an account. When a full name is given the profile row is
        written in the same transaction.

        Raises:
            ValueError: If the e-mail is malformed or taken, or the password is too short
        """
        email = normalize_email(email)
        if await self.get_by_email(email):
            raise ValueError("User already registered")

        user = User(id=uuid.uuid4(), email=email, hashed_password=hash_password(password), is_active=True)
        name = (full_name or "").strip()

        async with self._transaction("register"):
            self.db.add(user)
            if name:
                self.db.add(Profile(id=user.id, full_name=name))

        logger.info(f"Registered user {email} ({user.id})")
        return await self.get_by_id(user.id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """The user when the password matches, otherwise None."""
        user = await self.get_by_email(email)
        if user is None or not user.verify_password(password):
            logger.debug(f"Credentials rejected for {email}")
            return None
        return user

    async def update_password(self, user_id: uuid.UUID, new_password: str) -> Optional[User]:
        """
        Raises:
            ValueError: If the password is too short
        """
        updated = await self.update(user_id, {"hashed_password": hash_password(new_password)})
        if updated:
            logger.info(f"Password changed for {updated.email}")
        return updated
