"""
Profile model: public display data for an account.
"""

from sqlalchemy import String, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from townwrent.database import Base
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from townwrent.models.user import User


class Profile(Base):
    """Profile row whose primary key mirrors the owning user's id."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        comment="Same value as users.id"
    )

    full_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Display name"
    )

    avatar_url: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True,
        comment="Public URL of the avatar in the avatars bucket"
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="profile"
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, full_name={self.full_name})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "full_name": self.full_name,
            "avatar_url": self.avatar_url,
            "phone": self.phone,
        }
