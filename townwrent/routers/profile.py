"""
Account settings endpoints.
"""

from fastapi import APIRouter, Depends, Form, File, UploadFile
from typing import Optional

from townwrent.models.user import User
from townwrent.services.profile import ProfileService
from townwrent.schemas.profile import ProfileResponse
from townwrent.utils.dependencies import get_current_user, get_profile_service
from townwrent.utils.file_utils import read_uploads


router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse, summary="My profile")
async def get_profile(
    current_user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
) -> ProfileResponse:
    profile = await profile_service.get_or_create_profile(current_user)
    return ProfileResponse.from_model(profile, current_user)


@router.put(
    "",
    response_model=ProfileResponse,
    summary="Save settings",
    description="Update name and phone, optionally replacing the avatar"
)
async def update_profile(
    full_name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None, description="New avatar image"),
    current_user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
) -> ProfileResponse:
    uploads = await read_uploads([avatar] if avatar is not None else None)
    profile = await profile_service.update_profile(
        current_user,
        full_name=full_name,
        phone=phone,
        avatar=uploads[0] if uploads else None
    )
    return ProfileResponse.from_model(profile, current_user)
