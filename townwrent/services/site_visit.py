"""
Site visit booking with fixed visit packages.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from townwrent.repositories.site_visit import SiteVisitRepository
from townwrent.repositories.property import PropertyRepository
from townwrent.models.site_visit import SiteVisit, VisitStatus
from townwrent.models.user import User
from townwrent.utils.validators import validate_phone_number
from townwrent.utils.exceptions import PropertyNotFoundError, ValidationError
import uuid
import logging

logger = logging.getLogger(__name__)


VISIT_PACKAGES: List[Dict[str, Any]] = [
    {
        "name": "Breeze",
        "price": Decimal("15"),
        "features": ["Visit scheduled", "1 bottle of water"],
        "popular": False,
    },
    {
        "name": "Glide",
        "price": Decimal("25"),
        "features": ["Visit scheduled", "Pick-up & drop-off", "Bottled water"],
        "popular": True,
    },
    {
        "name": "Summit",
        "price": Decimal("35"),
        "features": ["Visit scheduled", "Transport included", "Refreshments", "Property brochure"],
        "popular": False,
    },
]


def get_package(name: Optional[str]) -> Optional[Dict[str, Any]]:
    wanted = (name or "").strip().lower()
    for package in VISIT_PACKAGES:
        if package["name"].lower() == wanted:
            return package
    return None


def format_price(price: Decimal) -> str:
    return str(int(price)) if price == price.to_integral_value() else f"{price:.2f}"


class SiteVisitService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.visit_repo = SiteVisitRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def book_visit(
        self,
        property_id: uuid.UUID,
        name: str,
        phone: str,
        visit_date: Optional[date],
        package_name: Optional[str],
        visitor: Optional[User] = None
    ) -> Dict[str, Any]:
        """
        Book a site visit.

        Returns:
            {"visit": SiteVisit, "message": confirmation text}

        Raises:
            ValidationError: If no package is chosen, a field is missing or the date is in the past
            PropertyNotFoundError: If the listing does not exist
        """
        package = get_package(package_name)
        if package is None:
            raise ValidationError("Please select a package before booking!")

        if not (name or "").strip():
            raise ValidationError("Name is required")
        cleaned_phone = validate_phone_number(phone)
        if visit_date is None:
            raise ValidationError("Visit date is required")
        if visit_date < date.today():
            raise ValidationError("Visit date cannot be in the past")

        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))

        visit = await self.visit_repo.create({
            "property_id": property_id,
            "visitor_id": visitor.id if visitor else None,
            "visitor_name": name.strip(),
            "phone": cleaned_phone,
            "visit_date": visit_date,
            "package": package["name"],
            "package_price": package["price"],
            "status": VisitStatus.PENDING,
        })

        message = (
            f"Booking request submitted for {property_obj.title} with the "
            f"{package['name']} package for ₵{format_price(package['price'])}!"
        )
        logger.info(f"Site visit {visit.id} booked for property {property_id} on {visit_date} ({package['name']})")
        return {"visit": visit, "message": message}

    async def get_owner_visits(self, current_user: User) -> List[SiteVisit]:
        return await self.visit_repo.get_for_owner(current_user.id)
