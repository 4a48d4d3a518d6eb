"""
Pydantic schemas for tenant/landlord messages.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from townwrent.models.message import Message


class SendMessageRequest(BaseModel):
    """
    Message sent from a listing page. Fields are optional here so the route
    can answer "Missing fields" itself.
    """

    property_id: Optional[str] = Field(default=None, description="Listing the message is about")
    receiver_id: Optional[str] = Field(default=None, description="Landlord receiving the message")
    message: Optional[str] = Field(default=None, description="Message text")


class ReplyRequest(BaseModel):
    message: Optional[str] = Field(default=None, description="Reply text")


class MessageResponse(BaseModel):
    id: str
    property_id: str
    property_title: Optional[str] = None
    sender_id: str
    sender_name: str
    receiver_id: str
    message: str
    is_read: bool
    created_at: datetime

    @classmethod
    def from_model(cls, message: Message) -> "MessageResponse":
        return cls(
            id=str(message.id),
            property_id=str(message.property_id),
            property_title=message.property_rel.title if message.property_rel is not None else None,
            sender_id=str(message.sender_id),
            sender_name=message.sender_name,
            receiver_id=str(message.receiver_id),
            message=message.body,
            is_read=message.is_read,
            created_at=message.created_at,
        )


class SendMessageResponse(BaseModel):
    success: bool = True
    message: MessageResponse


class InboxResponse(BaseModel):
    messages: List[MessageResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int
