"""
Message repository: inbox queries and read flags.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc, update
from townwrent.repositories.base import BaseRepository
from townwrent.models.message import Message
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)


class MessageRepository(BaseRepository[Message]):

    def __init__(self, db: AsyncSession):
        super().__init__(Message, db)

    async def get_received(self, receiver_id: uuid.UUID, limit: int = 100) -> List[Message]:
        """Messages addressed to a user, newest first."""
        try:
            query = (
                select(Message)
                .where(Message.receiver_id == receiver_id)
                .order_by(desc(Message.created_at))
                .limit(limit)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get inbox for user {receiver_id}: {e}")
            raise

    async def count_unread(self, receiver_id: uuid.UUID) -> int:
        try:
            query = select(func.count(Message.id)).where(
                Message.receiver_id == receiver_id,
                Message.is_read.is_(False)
            )
            result = await self.db.execute(query)
            return result.scalar() or 0
        except Exception as e:
            logger.error(f"Failed to count unread messages for user {receiver_id}: {e}")
            raise

    async def mark_read(self, message_id: uuid.UUID) -> bool:
        """
        Set the read flag.

        Returns:
            True if the message changed from unread to read
        """
        try:
            stmt = (
                update(Message)
                .where(Message.id == message_id, Message.is_read.is_(False))
                .values(is_read=True)
            )
            result = await self.db.execute(stmt)
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to mark message {message_id} as read: {e}")
            raise
