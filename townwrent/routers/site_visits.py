"""
Site visit endpoints for landlords and the visit package catalogue.
Booking lives under /properties/{id}/site-visits.
"""

from fastapi import APIRouter, Depends
from typing import List

from townwrent.models.user import User
from townwrent.services.site_visit import SiteVisitService, VISIT_PACKAGES
from townwrent.schemas.site_visit import SiteVisitResponse, VisitPackageResponse
from townwrent.utils.dependencies import get_current_user, get_site_visit_service


router = APIRouter(prefix="/site-visits", tags=["Site Visits"])


@router.get("/packages", response_model=List[VisitPackageResponse], summary="Visit packages")
async def list_packages() -> List[VisitPackageResponse]:
    return [VisitPackageResponse(**package) for package in VISIT_PACKAGES]


@router.get(
    "",
    response_model=List[SiteVisitResponse],
    summary="Visits to my listings",
    description="Site visits booked on the signed-in landlord's listings"
)
async def list_owner_visits(
    current_user: User = Depends(get_current_user),
    visit_service: SiteVisitService = Depends(get_site_visit_service)
) -> List[SiteVisitResponse]:
    visits = await visit_service.get_owner_visits(current_user)
    return [SiteVisitResponse.from_model(v) for v in visits]
