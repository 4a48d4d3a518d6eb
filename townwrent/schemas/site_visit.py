"""
Pydantic schemas for site visit bookings.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt
from decimal import Decimal
from townwrent.models.site_visit import SiteVisit, VisitStatus


class VisitPackageResponse(BaseModel):
    name: str
    price: Decimal
    features: List[str]
    popular: bool


class BookVisitRequest(BaseModel):
    name: Optional[str] = Field(default=None, description="Visitor's name")
    phone: Optional[str] = Field(default=None, description="Contact phone number")
    date: Optional[dt.date] = Field(default=None, description="Requested visit date")
    package: Optional[str] = Field(default=None, description="Breeze, Glide or Summit")


class SiteVisitResponse(BaseModel):
    id: str
    property_id: str
    property_title: Optional[str] = None
    visitor_name: str
    phone: str
    visit_date: dt.date
    package: str
    package_price: Decimal
    status: VisitStatus
    created_at: dt.datetime

    @classmethod
    def from_model(cls, visit: SiteVisit) -> "SiteVisitResponse":
        return cls(
            id=str(visit.id),
            property_id=str(visit.property_id),
            property_title=visit.property_rel.title if visit.property_rel is not None else None,
            visitor_name=visit.visitor_name,
            phone=visit.phone,
            visit_date=visit.visit_date,
            package=visit.package,
            package_price=visit.package_price,
            status=visit.status,
            created_at=visit.created_at,
        )


class BookVisitResponse(BaseModel):
    message: str
    visit: SiteVisitResponse
