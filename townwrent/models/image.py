"""
PropertyImage model: one stored photo of a listing.
"""

from sqlalchemy import String, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from townwrent.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from townwrent.models.property import Property


class PropertyImage(Base):
    """
    Image row pointing at an object in the property-images bucket.
    Older rows may hold an absolute URL instead of a bucket path.
    """

    __tablename__ = "property_images"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    storage_path: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
        comment="Path inside the property-images bucket"
    )

    display_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0
    )

    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="images"
    )

    def __repr__(self) -> str:
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, path={self.storage_path})>"

    @property
    def is_external(self) -> bool:
        return self.storage_path.startswith("http")
