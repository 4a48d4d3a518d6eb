"""
Message model for tenant/landlord conversations about a listing.
"""

from sqlalchemy import Text, Boolean, ForeignKey, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from townwrent.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from townwrent.models.user import User
    from townwrent.models.property import Property


class Message(Base):
    """A single message; replies are new rows addressed back to the sender."""

    __tablename__ = "messages"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    receiver_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    body: Mapped[str] = mapped_column(
        Text,
        nullable=False
    )

    is_read: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False
    )

    sender: Mapped["User"] = relationship(
        "User",
        foreign_keys=[sender_id],
        lazy="selectin"
    )

    property_rel: Mapped["Property"] = relationship(
        "Property",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, sender={self.sender_id}, receiver={self.receiver_id})>"

    @property
    def sender_name(self) -> str:
        if self.sender is not None and self.sender.full_name:
            return self.sender.full_name
        return "Unknown Sender"

    def to_dict(self) -> dict:
        """Serialize the message the way it is pushed over the realtime feed."""
        return {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "sender_id": str(self.sender_id),
            "receiver_id": str(self.receiver_id),
            "message": self.body,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


inbox_index = Index(
    "idx_messages_receiver_created",
    Message.receiver_id,
    Message.created_at.desc()
)
