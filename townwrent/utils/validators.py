"""
Validation helpers for listing submissions and the listing wizard.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from townwrent.models.property import PropertyType, PaymentFrequency, AMENITIES
from townwrent.utils.exceptions import ValidationError


TITLE_MIN_LENGTH = 6
DESCRIPTION_MIN_LENGTH = 15

# Fields checked by each step of the listing wizard
WIZARD_STEPS: Dict[int, tuple] = {
    1: ("title", "property_type", "price"),
    2: ("region", "town"),
    3: ("description",),
}

PHONE_PATTERN = re.compile(r'^\+?[0-9][0-9 \-]{6,19}$')


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def parse_price(value: Any) -> Optional[Decimal]:
    """Parse a price; returns None when the value is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite():
        return None
    return price


def parse_property_type(value: Any) -> Optional[PropertyType]:
    if isinstance(value, PropertyType):
        return value
    try:
        return PropertyType(_text(value))
    except ValueError:
        return None


def field_errors(data: Mapping[str, Any], fields: Iterable[str]) -> Dict[str, str]:
    """
    Check the given listing fields and return a field -> message map.
    An empty map means the fields are valid.
    """
    errors: Dict[str, str] = {}

    for field in fields:
        if field == "title":
            if len(_text(data.get("title"))) < TITLE_MIN_LENGTH:
                errors["title"] = "Please enter a descriptive title."
        elif field == "property_type":
            if parse_property_type(data.get("property_type")) is None:
                errors["property_type"] = "Select a property type."
        elif field == "price":
            price = parse_price(data.get("price"))
            if price is None or price <= 0:
                errors["price"] = "Enter a valid price."
        elif field == "region":
            if not _text(data.get("region")):
                errors["region"] = "Region is required."
        elif field == "town":
            if not _text(data.get("town")):
                errors["town"] = "Town / Community is required."
        elif field == "description":
            if len(_text(data.get("description"))) < DESCRIPTION_MIN_LENGTH:
                errors["description"] = "Provide a helpful description."

    return errors


def validate_step(step: int, data: Mapping[str, Any]) -> Dict[str, str]:
    """
    Validate one step of the listing wizard.

    Raises:
        ValidationError: If the step number is unknown
    """
    if step not in WIZARD_STEPS:
        raise ValidationError(f"Unknown step {step}; expected one of {sorted(WIZARD_STEPS)}")
    return field_errors(data, WIZARD_STEPS[step])


def _raise_if_errors(errors: Dict[str, str]) -> None:
    if errors:
        field_list: List[Dict[str, str]] = [
            {"field": field, "message": message} for field, message in errors.items()
        ]
        raise ValidationError(next(iter(errors.values())), field_errors=field_list)


def clean_amenities(values: Optional[Iterable[str]]) -> List[str]:
    """Keep known amenities, in catalogue order, without duplicates."""
    chosen = {_text(v).lower() for v in (values or []) if _text(v)}
    return [amenity for amenity in AMENITIES if amenity.lower() in chosen]


def validate_listing(data: Mapping[str, Any], image_count: int, max_images: int) -> Dict[str, Any]:
    """
    Validate a complete listing submission.

    Args:
        data: Raw form fields
        image_count: Number of images attached
        max_images: Upper bound on images per listing

    Returns:
        Cleaned values ready for the property table

    Raises:
        ValidationError: With per-field details when anything is wrong
    """
    errors = field_errors(data, [f for step in sorted(WIZARD_STEPS) for f in WIZARD_STEPS[step]])

    if image_count < 1:
        errors["images"] = "Please upload at least one image"
    elif image_count > max_images:
        errors["images"] = f"You can upload a maximum of {max_images} images"

    frequency = _text(data.get("payment_frequency")) or PaymentFrequency.MONTHLY.value
    try:
        payment_frequency = PaymentFrequency(frequency.lower())
    except ValueError:
        errors["payment_frequency"] = "Select how often rent is paid."
        payment_frequency = None

    _raise_if_errors(errors)

    return {
        "title": _text(data.get("title")),
        "property_type": parse_property_type(data.get("property_type")),
        "price": parse_price(data.get("price")),
        "payment_frequency": payment_frequency,
        "region": _text(data.get("region")),
        "town": _text(data.get("town")),
        "landmark": _text(data.get("landmark")) or None,
        "amenities": clean_amenities(data.get("amenities")),
        "description": _text(data.get("description")),
    }


def validate_listing_changes(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate a partial edit. Fields that are present must still satisfy the
    creation rules, so required fields cannot be blanked and price stays above 0.
    """
    present = [f for f in ("title", "property_type", "price", "region", "town", "description") if f in changes]
    _raise_if_errors(field_errors(changes, present))

    cleaned: Dict[str, Any] = {}
    for field in ("title", "region", "town", "description"):
        if field in changes:
            cleaned[field] = _text(changes[field])
    if "property_type" in changes:
        cleaned["property_type"] = parse_property_type(changes["property_type"])
    if "price" in changes:
        cleaned["price"] = parse_price(changes["price"])
    if "payment_frequency" in changes and changes["payment_frequency"] is not None:
        try:
            cleaned["payment_frequency"] = PaymentFrequency(_text(changes["payment_frequency"]).lower())
        except ValueError:
            raise ValidationError("Select how often rent is paid.")
    if "landmark" in changes:
        cleaned["landmark"] = _text(changes["landmark"]) or None
    if "amenities" in changes and changes["amenities"] is not None:
        cleaned["amenities"] = clean_amenities(changes["amenities"])
    if "available" in changes and changes["available"] is not None:
        cleaned["available"] = bool(changes["available"])
    return cleaned


def validate_phone_number(phone: Any, field_name: str = "phone") -> str:
    """
    Raises:
        ValidationError: If the phone number is missing or malformed
    """
    value = _text(phone)
    if not value:
        raise ValidationError(f"{field_name} is required")
    if not PHONE_PATTERN.match(value):
        raise ValidationError(f"Invalid phone number for {field_name}")
    return value
