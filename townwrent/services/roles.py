"""
Tenant/landlord role selection and the page each role lands on.
"""

import enum
from typing import Optional


class UserType(str, enum.Enum):
    TENANT = "tenant"
    LANDLORD = "landlord"


ROLE_REDIRECTS = {
    UserType.TENANT: "/explore",
    UserType.LANDLORD: "/list-property",
}


def parse_role(value: Optional[str]) -> Optional[UserType]:
    try:
        return UserType((value or "").strip().lower())
    except ValueError:
        return None


def redirect_path_for_role(role: Optional[str]) -> Optional[str]:
    """Landing page for a stored role, or None if the role is unknown."""
    parsed = parse_role(role)
    return ROLE_REDIRECTS[parsed] if parsed else None
