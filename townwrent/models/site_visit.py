"""
SiteVisit model: a booked viewing of a listing with a chosen visit package.
"""

from sqlalchemy import String, Numeric, Date, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from townwrent.database import Base
from datetime import date
from decimal import Decimal
import enum
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from townwrent.models.property import Property


class VisitStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class SiteVisit(Base):
    __tablename__ = "site_visits"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    visitor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Signed-in user who booked, if any"
    )

    visitor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    visit_date: Mapped[date] = mapped_column(Date, nullable=False)

    package: Mapped[str] = mapped_column(String(32), nullable=False)
    package_price: Mapped[Decimal] = mapped_column(Numeric(precision=8, scale=2), nullable=False)

    status: Mapped[VisitStatus] = mapped_column(
        SQLEnum(VisitStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=16),
        nullable=False,
        default=VisitStatus.PENDING
    )

    property_rel: Mapped["Property"] = relationship(
        "Property",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<SiteVisit(id={self.id}, property_id={self.property_id}, date={self.visit_date})>"
