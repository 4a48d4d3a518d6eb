"""
Property model for rental listings.
Handles listing data with location, pricing, amenities and engagement counters.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, JSON, Enum as SQLEnum, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from townwrent.database import Base
from decimal import Decimal
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from townwrent.models.user import User
    from townwrent.models.image import PropertyImage


class PropertyType(str, enum.Enum):
    """Kinds of space a landlord can list."""
    APARTMENT = "Apartment"
    SINGLE_ROOM = "Single Room"
    SELF_CONTAINED = "Self Contained"
    STORE = "Store"
    OFFICE = "Office"
    OTHER = "Other"


class PaymentFrequency(str, enum.Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEGOTIABLE = "negotiable"


AMENITIES = [
    "Water",
    "Electricity",
    "Parking",
    "Toilet Inside",
    "Balcony",
    "Security",
    "Furnished",
]


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Property(Base):
    """
    Property model for managing rental listings.
    Owned by the user who posted it; images and messages are removed with it.
    """

    __tablename__ = "properties"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the landlord who posted this listing"
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True
    )

    property_type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType, values_callable=_enum_values, native_enum=False, length=32),
        nullable=False,
        index=True
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Rent in cedis"
    )

    payment_frequency: Mapped[PaymentFrequency] = mapped_column(
        SQLEnum(PaymentFrequency, values_callable=_enum_values, native_enum=False, length=16),
        nullable=False,
        default=PaymentFrequency.MONTHLY
    )

    # Location information
    region: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    town: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    landmark: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    amenities: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False
    )

    available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True
    )

    # Engagement counters
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    favorites: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_featured: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True
    )

    owner: Mapped["User"] = relationship(
        "User",
        lazy="selectin"
    )

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="PropertyImage.display_order"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title[:30]}, price={self.price})>"

    @property
    def image_count(self) -> int:
        return len(self.images)

    @property
    def location(self) -> str:
        """Town and region as shown on listing cards."""
        return f"{self.town}, {self.region}"

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        return self.owner_id == user_id


# Explore page: available listings of a region, newest first
region_available_index = Index(
    "idx_properties_region_available",
    Property.region,
    Property.available,
    Property.created_at.desc()
)

# Landlord dashboard
owner_created_index = Index(
    "idx_properties_owner_created",
    Property.owner_id,
    Property.created_at.desc()
)
