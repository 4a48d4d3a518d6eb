"""
Tenant/landlord selection. The choice is remembered in a cookie and the
browser is sent on to the page for that role.
"""

from fastapi import APIRouter, Form, Request, status
from fastapi.responses import RedirectResponse
from typing import Optional, Union

from townwrent.services.roles import ROLE_REDIRECTS, parse_role, redirect_path_for_role
from townwrent.schemas.draft import RoleChoice, RoleChoicesResponse
from townwrent.utils.exceptions import ValidationError
from townwrent.config import settings


router = APIRouter(tags=["Roles"])

ROLE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


@router.get(
    "/select-user",
    response_model=None,
    summary="Role selection",
    description="Redirects when a role was already chosen, otherwise lists the choices"
)
async def get_role(request: Request) -> Union[RedirectResponse, RoleChoicesResponse]:
    path = redirect_path_for_role(request.cookies.get(settings.role_cookie_name))
    if path:
        return RedirectResponse(path, status_code=status.HTTP_303_SEE_OTHER)

    return RoleChoicesResponse(choices=[
        RoleChoice(role=role.value, redirect_to=target) for role, target in ROLE_REDIRECTS.items()
    ])


@router.post("/select-user", summary="Choose a role", status_code=status.HTTP_303_SEE_OTHER)
async def select_role(role: Optional[str] = Form(None)) -> RedirectResponse:
    """
    Raises:
        ValidationError: If the role is neither tenant nor landlord
    """
    parsed = parse_role(role)
    if parsed is None:
        raise ValidationError("Please choose tenant or landlord")

    response = RedirectResponse(ROLE_REDIRECTS[parsed], status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(settings.role_cookie_name, parsed.value, max_age=ROLE_COOKIE_MAX_AGE, samesite="lax")
    return response
