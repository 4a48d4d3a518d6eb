"""
Listing form draft endpoints.

The draft is keyed by a per-browser id kept in a cookie, so it survives the
sign-in redirect that interrupts an anonymous landlord mid-wizard.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from typing import Optional
import secrets

from townwrent.services.drafts import DraftStore, is_valid_draft_id
from townwrent.schemas.draft import (
    DraftPayload,
    DraftResponse,
    StepValidationRequest,
    StepValidationResponse,
)
from townwrent.utils.dependencies import get_draft_store
from townwrent.utils.validators import validate_step
from townwrent.config import settings


router = APIRouter(prefix="/drafts", tags=["Drafts"])


def _draft_id(request: Request) -> Optional[str]:
    draft_id = request.cookies.get(settings.draft_cookie_name)
    return draft_id if is_valid_draft_id(draft_id) else None


@router.get("/listing", response_model=DraftResponse, summary="Load the listing draft")
async def load_draft(
    request: Request,
    draft_store: DraftStore = Depends(get_draft_store)
) -> DraftResponse:
    draft_id = _draft_id(request)
    data = await draft_store.load(draft_id) if draft_id else None
    return DraftResponse(data=data, saved=data is not None)


@router.put("/listing", response_model=DraftResponse, summary="Save the listing draft")
async def save_draft(
    payload: DraftPayload,
    request: Request,
    response: Response,
    draft_store: DraftStore = Depends(get_draft_store)
) -> DraftResponse:
    draft_id = _draft_id(request)
    if draft_id is None:
        draft_id = secrets.token_urlsafe(16)
        response.set_cookie(settings.draft_cookie_name, draft_id, httponly=True, samesite="lax")

    saved = await draft_store.save(draft_id, payload.data)
    return DraftResponse(data=payload.data, saved=saved)


@router.delete("/listing", status_code=status.HTTP_204_NO_CONTENT, summary="Discard the listing draft")
async def clear_draft(
    request: Request,
    draft_store: DraftStore = Depends(get_draft_store)
) -> None:
    draft_id = _draft_id(request)
    if draft_id:
        await draft_store.clear(draft_id)


@router.post(
    "/listing/validate",
    response_model=StepValidationResponse,
    summary="Check a wizard step",
    description="Step 1: title, type and price. Step 2: region and town. Step 3: description."
)
async def validate_draft_step(
    validation: StepValidationRequest,
    request: Request,
    draft_store: DraftStore = Depends(get_draft_store)
) -> StepValidationResponse:
    data = validation.data
    if data is None:
        draft_id = _draft_id(request)
        data = (await draft_store.load(draft_id) if draft_id else None) or {}

    errors = validate_step(validation.step, data)
    return StepValidationResponse(valid=not errors, errors=errors)
