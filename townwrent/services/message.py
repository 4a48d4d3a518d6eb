"""
Message service for tenant/landlord conversations.
Every insert is pushed to the receiver's realtime subscribers.
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from townwrent.repositories.message import MessageRepository
from townwrent.repositories.property import PropertyRepository
from townwrent.repositories.user import UserRepository
from townwrent.models.message import Message
from townwrent.models.user import User
from townwrent.services.notifications import NotificationHub, notification_hub
from townwrent.utils.exceptions import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    PropertyNotFoundError,
    ValidationError,
)
import uuid
import logging

logger = logging.getLogger(__name__)


class MessageService:

    def __init__(self, db_session: AsyncSession, hub: Optional[NotificationHub] = None):
        self.db = db_session
        self.message_repo = MessageRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.hub = hub or notification_hub

    async def send_message(
        self,
        property_id: uuid.UUID,
        receiver_id: uuid.UUID,
        body: str,
        sender: User
    ) -> Message:
        """
        Send a message about a listing.

        Raises:
            ValidationError: If the body is blank
            BadRequestError: If the sender addresses themselves
            PropertyNotFoundError: If the listing does not exist
            NotFoundError: If the receiver does not exist
        """
        text = (body or "").strip()
        if not text:
            raise ValidationError("Missing fields")

        if receiver_id == sender.id:
            raise BadRequestError("You cannot send a message to yourself")

        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(str(property_id))
        if not await self.user_repo.exists(receiver_id):
            raise NotFoundError("User", str(receiver_id))

        message = await self.message_repo.create({
            "property_id": property_id,
            "sender_id": sender.id,
            "receiver_id": receiver_id,
            "body": text,
            "is_read": False,
        })

        delivered = self.hub.publish(receiver_id, message.to_dict())
        logger.info(
            f"Message {message.id} sent from {sender.id} to {receiver_id} "
            f"about property {property_id} ({delivered} live subscribers)"
        )
        return message

    async def get_inbox(self, current_user: User, limit: int = 100) -> List[Message]:
        """Messages received by the user, newest first."""
        return await self.message_repo.get_received(current_user.id, limit=limit)

    async def get_message(self, message_id: uuid.UUID, current_user: User) -> Message:
        """
        Raises:
            NotFoundError: If the message does not exist
            ForbiddenError: If the user is neither sender nor receiver
        """
        message = await self.message_repo.get_by_id(message_id)
        if message is None:
            raise NotFoundError("Message", str(message_id))
        if current_user.id not in (message.sender_id, message.receiver_id):
            raise ForbiddenError("You cannot view this message")
        return message

    async def reply(self, message_id: uuid.UUID, body: str, current_user: User) -> Message:
        """
        Answer a received message. The reply goes to the original sender,
        on the same listing.
        """
        original = await self.get_message(message_id, current_user)
        if original.receiver_id != current_user.id:
            raise ForbiddenError("You can only reply to messages you received")

        return await self.send_message(original.property_id, original.sender_id, body, current_user)

    async def mark_read(self, message_id: uuid.UUID, current_user: User) -> Message:
        """Mark a received message as read; repeating the call changes nothing."""
        message = await self.get_message(message_id, current_user)
        if message.receiver_id != current_user.id:
            raise ForbiddenError("Only the receiver can mark a message as read")

        if await self.message_repo.mark_read(message_id):
            logger.debug(f"Message {message_id} marked read")
        return await self.message_repo.get_by_id(message_id)

    async def get_unread_count(self, current_user: User) -> int:
        return await self.message_repo.count_unread(current_user.id)
