"""
Property API endpoints: listing submission with photos, explore/search,
landing page sections, the landlord dashboard and site visit booking.
"""

from fastapi import APIRouter, Depends, status, Query, Path, Form, File, UploadFile
from typing import Optional, List
from uuid import UUID
from decimal import Decimal

from townwrent.models.user import User
from townwrent.repositories.property import PropertySearchFilters, FEATURED_BY_FLAG
from townwrent.services.property import PropertyService
from townwrent.services.site_visit import SiteVisitService
from townwrent.services.storage import StorageService
from townwrent.schemas.property import (
    PropertyResponse,
    PropertyListResponse,
    PropertyUpdate,
    FeaturedUpdate,
    AnalyticsResponse,
    property_form,
)
from townwrent.schemas.site_visit import BookVisitRequest, BookVisitResponse, SiteVisitResponse
from townwrent.utils.dependencies import (
    get_current_user,
    get_optional_current_user,
    get_property_service,
    get_site_visit_service,
    get_storage_service,
)
from townwrent.utils.file_utils import read_uploads
from townwrent.utils.validators import parse_property_type
from townwrent.utils.exceptions import ValidationError
from townwrent.config import settings


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List a property",
    description="Create a listing from the multipart listing form, with 1 to 5 photos"
)
async def create_property(
    title: Optional[str] = Form(None),
    property_type: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    payment_frequency: Optional[str] = Form(None),
    region: Optional[str] = Form(None),
    town: Optional[str] = Form(None),
    landmark: Optional[str] = Form(None),
    amenities: Optional[List[str]] = Form(None),
    description: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None, description="Listing photos, in display order"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
    storage: StorageService = Depends(get_storage_service)
) -> PropertyResponse:
    """
    Raises:
        ValidationError: With per-field details; nothing is stored in that case
    """
    form = property_form(
        title=title,
        property_type=property_type,
        price=price,
        payment_frequency=payment_frequency,
        region=region,
        town=town,
        landmark=landmark,
        amenities=amenities,
        description=description,
    )
    files = await read_uploads(images)
    property_obj = await property_service.create_listing(form, files, current_user)
    return PropertyResponse.from_model(property_obj, storage)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="Explore listings",
    description="Paginated available listings with optional filters, newest first"
)
async def list_properties(
    q: Optional[str] = Query(None, description="Search title, description and location"),
    region: Optional[str] = Query(None),
    town: Optional[str] = Query(None),
    property_type: Optional[str] = Query(None, description="Apartment, Single Room, Self Contained, Store, Office or Other"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    property_service: PropertyService = Depends(get_property_service),
    storage: StorageService = Depends(get_storage_service)
) -> PropertyListResponse:
    parsed_type = None
    if property_type:
        parsed_type = parse_property_type(property_type)
        if parsed_type is None:
            raise ValidationError(f"Invalid property type: {property_type}")

    filters = PropertySearchFilters(
        region=region,
        town=town,
        property_type=parsed_type,
        min_price=min_price,
        max_price=max_price,
        search_text=q,
    )
    properties, total = await property_service.list_properties(filters, page=page, page_size=page_size)
    return PropertyListResponse.build(properties, total, page, page_size, storage)


@router.get("/recent", response_model=List[PropertyResponse], summary="Latest listings")
async def recent_properties(
    limit: int = Query(4, ge=1, le=20),
    property_service: PropertyService = Depends(get_property_service),
    storage: StorageService = Depends(get_storage_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_recent_properties(limit)
    return [PropertyResponse.from_model(p, storage) for p in properties]


@router.get(
    "/featured",
    response_model=List[PropertyResponse],
    summary="Featured listings",
    description="Featured listings picked by flag, by price or at random"
)
async def featured_properties(
    limit: int = Query(3, ge=1, le=20),
    strategy: str = Query(FEATURED_BY_FLAG, description="flagged, price or random"),
    property_service: PropertyService = Depends(get_property_service),
    storage: StorageService = Depends(get_storage_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_featured_properties(limit=limit, strategy=strategy)
    return [PropertyResponse.from_model(p, storage) for p in properties]


@router.get("/mine", response_model=List[PropertyResponse], summary="My listings")
async def my_properties(
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
    storage: StorageService = Depends(get_storage_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_user_properties(current_user)
    return [PropertyResponse.from_model(p, storage) for p in properties]


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Listing analytics",
    description="Views, favourites and price band performance across the landlord's listings"
)
async def property_analytics(
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> AnalyticsResponse:
    return AnalyticsResponse(**await property_service.get_analytics(current_user))


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Listing details",
    description="A single listing; views by anyone other than the owner are counted"
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Optional[User] = Depends(get_optional_current_user),
    property_service: PropertyService = Depends(get_property_service),
    storage: StorageService = Depends(get_storage_service)
) -> PropertyResponse:
    property_obj = await property_service.get_property(property_id, viewer=current_user)
    return PropertyResponse.from_model(property_obj, storage)


@router.put("/{property_id}", response_model=PropertyResponse, summary="Edit a listing")
async def update_property(
    update_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
    storage: StorageService = Depends(get_storage_service)
) -> PropertyResponse:
    changes = update_data.model_dump(exclude_unset=True)
    property_obj = await property_service.update_property(property_id, changes, current_user)
    return PropertyResponse.from_model(property_obj, storage)


@router.patch("/{property_id}/featured", response_model=PropertyResponse, summary="Feature or unfeature a listing")
async def set_featured(
    featured: FeaturedUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
    storage: StorageService = Depends(get_storage_service)
) -> PropertyResponse:
    property_obj = await property_service.set_featured(property_id, featured.is_featured, current_user)
    return PropertyResponse.from_model(property_obj, storage)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a listing",
    description="Delete a listing together with its photos, messages and site visits"
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.delete_property(property_id, current_user)


@router.post(
    "/{property_id}/images",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add photos to a listing"
)
async def add_property_images(
    property_id: UUID = Path(..., description="Property ID"),
    images: Optional[List[UploadFile]] = File(None, description="Photos to add"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
    storage: StorageService = Depends(get_storage_service)
) -> PropertyResponse:
    files = await read_uploads(images)
    property_obj = await property_service.add_images(property_id, files, current_user)
    return PropertyResponse.from_model(property_obj, storage)


@router.delete(
    "/{property_id}/images/{image_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a photo from a listing"
)
async def delete_property_image(
    property_id: UUID = Path(..., description="Property ID"),
    image_id: UUID = Path(..., description="Image ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.delete_image(property_id, image_id, current_user)


@router.post(
    "/{property_id}/site-visits",
    response_model=BookVisitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a site visit",
    description="Request a viewing with one of the visit packages; signing in is optional"
)
async def book_site_visit(
    booking: BookVisitRequest,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Optional[User] = Depends(get_optional_current_user),
    visit_service: SiteVisitService = Depends(get_site_visit_service)
) -> BookVisitResponse:
    result = await visit_service.book_visit(
        property_id,
        name=booking.name,
        phone=booking.phone,
        visit_date=booking.date,
        package_name=booking.package,
        visitor=current_user,
    )
    return BookVisitResponse(message=result["message"], visit=SiteVisitResponse.from_model(result["visit"]))
