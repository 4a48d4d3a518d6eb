"""
Schemas for the saved listing-form draft and wizard step checks.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class DraftPayload(BaseModel):
    data: Dict[str, Any] = Field(..., description="Form values as entered")


class DraftResponse(BaseModel):
    data: Optional[Dict[str, Any]] = None
    saved: bool = False


class StepValidationRequest(BaseModel):
    step: int = Field(..., ge=1, description="Wizard step being left")
    data: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Values to check; the saved draft is used when omitted"
    )


class StepValidationResponse(BaseModel):
    valid: bool
    errors: Dict[str, str] = {}


class RoleChoice(BaseModel):
    role: str
    redirect_to: str


class RoleChoicesResponse(BaseModel):
    choices: List[RoleChoice]
