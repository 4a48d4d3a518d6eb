"""
Pydantic schemas for property requests and responses.
Image paths are resolved to browser-loadable URLs when a response is built.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
from townwrent.models.property import Property, PropertyType, PaymentFrequency
from townwrent.services.storage import StorageService


class PropertyImageResponse(BaseModel):
    id: str
    url: str = Field(..., description="Public URL of the image")
    storage_path: str
    display_order: int


class ListedBy(BaseModel):
    """Owner details shown on the listing page."""

    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None


class PropertyResponse(BaseModel):
    """Property response schema."""

    id: str
    owner_id: str
    title: str
    property_type: PropertyType
    price: Decimal
    payment_frequency: PaymentFrequency
    region: str
    town: str
    landmark: Optional[str] = None
    location: str
    amenities: List[str] = []
    description: str
    available: bool
    views: int
    favorites: int
    is_featured: bool
    image_url: str = Field(..., description="Cover image, or a placeholder when the listing has none")
    images: List[PropertyImageResponse] = []
    listed_by: Optional[ListedBy] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, prop: Property, storage: StorageService) -> "PropertyResponse":
        images = [
            PropertyImageResponse(
                id=str(image.id),
                url=storage.resolve_image_url(image.storage_path),
                storage_path=image.storage_path,
                display_order=image.display_order,
            )
            for image in prop.images
        ]

        listed_by = None
        if prop.owner is not None:
            profile = prop.owner.profile
            listed_by = ListedBy(
                id=str(prop.owner_id),
                full_name=profile.full_name if profile else None,
                avatar_url=profile.avatar_url if profile else None,
                phone=profile.phone if profile else None,
            )

        return cls(
            id=str(prop.id),
            owner_id=str(prop.owner_id),
            title=prop.title,
            property_type=prop.property_type,
            price=prop.price,
            payment_frequency=prop.payment_frequency,
            region=prop.region,
            town=prop.town,
            landmark=prop.landmark,
            location=prop.location,
            amenities=list(prop.amenities or []),
            description=prop.description,
            available=prop.available,
            views=prop.views or 0,
            favorites=prop.favorites or 0,
            is_featured=prop.is_featured,
            image_url=images[0].url if images else storage.resolve_image_url(None),
            images=images,
            listed_by=listed_by,
            created_at=prop.created_at,
            updated_at=prop.updated_at,
        )


class PropertyListResponse(BaseModel):
    items: List[PropertyResponse]
    total: int
    page: int
    page_size: int
    pages: int

    @classmethod
    def build(
        cls,
        properties: List[Property],
        total: int,
        page: int,
        page_size: int,
        storage: StorageService
    ) -> "PropertyListResponse":
        return cls(
            items=[PropertyResponse.from_model(p, storage) for p in properties],
            total=total,
            page=page,
            page_size=page_size,
            pages=(total + page_size - 1) // page_size if page_size else 0,
        )


class PropertyUpdate(BaseModel):
    """
    Partial edit. Only fields that are sent are changed; sending a field as
    null clears it where the column allows that (landmark).
    """

    title: Optional[str] = None
    property_type: Optional[str] = None
    price: Optional[Decimal] = None
    payment_frequency: Optional[str] = None
    region: Optional[str] = None
    town: Optional[str] = None
    landmark: Optional[str] = None
    amenities: Optional[List[str]] = None
    description: Optional[str] = None
    available: Optional[bool] = None


class FeaturedUpdate(BaseModel):
    is_featured: bool


class TopProperty(BaseModel):
    id: str
    title: str
    views: int
    favorites: int


class PriceRangePerformance(BaseModel):
    range: str
    count: int
    avg_views: int


class AnalyticsResponse(BaseModel):
    total_properties: int
    available_properties: int
    total_views: int
    total_favorites: int
    engagement_rate: int = Field(..., description="Favourites per 100 views, rounded")
    avg_views_per_property: int
    type_distribution: Dict[str, int]
    top_properties: List[TopProperty]
    price_ranges: List[PriceRangePerformance]


def property_form(**fields: Any) -> Dict[str, Any]:
    """Collect multipart form fields into the mapping the property service validates."""
    return {k: v for k, v in fields.items() if v is not None}
