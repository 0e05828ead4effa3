"""Validation utilities for provider fields, coordinates and uploaded documents.

Small, self-contained helpers used across the services, the bulk importer and
tests. Each returns ``(is_valid, message)``.
"""

import re
from typing import Optional, Tuple

from src.data.models import ACCESSIBILITY_FEATURES, PROVIDER_TYPES

PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-()]{8,}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
WEBSITE_PATTERN = re.compile(r"^https?://.+")
TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")

ALLOWED_DOCUMENT_TYPES = {
    "application/pdf": "pdf",
    "image/jpeg": "jpeg",
    "image/jpg": "jpg",
    "image/png": "png",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}
ALLOWED_DOCUMENT_EXTENSIONS = (".pdf", ".jpeg", ".jpg", ".png", ".doc", ".docx")
MAX_DOCUMENT_BYTES = 10 * 1024 * 1024


def validate_required(value: Optional[str], label: str) -> Tuple[bool, str]:
    if value is None or not str(value).strip():
        return False, f"{label} is required"
    return True, f"{label} provided"


def validate_coordinates(lat: float, lon: float) -> Tuple[bool, str]:
    """
    Validate latitude and longitude coordinates.

    Args:
        lat: Latitude value
        lon: Longitude value

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return False, "Coordinates must be numeric"

    if not (-90 <= lat <= 90):
        return False, "Latitude must be between -90 and 90"

    if not (-180 <= lon <= 180):
        return False, "Longitude must be between -180 and 180"

    return True, "Valid coordinates"


def validate_phone_number(phone: str) -> Tuple[bool, str]:
    """
    Validate phone number format.

    Accepts an optional leading ``+`` followed by at least eight digits,
    spaces, dashes or parentheses (e.g. ``+213 48 50 10 20``).

    Args:
        phone: Phone number string

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not phone or not phone.strip():
        return False, "Phone number is required"

    if PHONE_PATTERN.match(phone.strip()):
        return True, "Valid phone number"
    return False, "Invalid phone number format"


def validate_email(email: Optional[str]) -> Tuple[bool, str]:
    if not email or not email.strip():
        return True, "Email is optional"
    if EMAIL_PATTERN.match(email.strip()):
        return True, "Valid email"
    return False, "Invalid email format"


def validate_website(website: Optional[str]) -> Tuple[bool, str]:
    if not website or not website.strip():
        return True, "Website is optional"
    if WEBSITE_PATTERN.match(website.strip()):
        return True, "Valid website"
    return False, "Website must start with http:// or https://"


def validate_provider_type(provider_type: Optional[str]) -> Tuple[bool, str]:
    if not provider_type or not provider_type.strip():
        return False, "Provider type is required"
    if provider_type.strip().lower() not in PROVIDER_TYPES:
        return False, f"Invalid provider type. Must be one of: {', '.join(PROVIDER_TYPES)}"
    return True, "Valid provider type"


def validate_accessibility_features(features) -> Tuple[bool, str]:
    unknown = [f for f in features if f not in ACCESSIBILITY_FEATURES]
    if unknown:
        return False, f"Unknown accessibility features: {', '.join(unknown)}"
    return True, "Valid accessibility features"


def validate_document(filename: str, size: int, content_type: Optional[str] = None) -> Tuple[bool, str]:
    """
    Validate an uploaded supporting document (claim or verification proof).

    Args:
        filename: Original file name, used when no content type is given
        size: Size in bytes
        content_type: MIME type reported by the uploader

    Returns:
        Tuple of (is_valid, error_message)
    """
    if content_type:
        type_ok = content_type.lower() in ALLOWED_DOCUMENT_TYPES
    else:
        type_ok = (filename or "").lower().endswith(ALLOWED_DOCUMENT_EXTENSIONS)
    if not type_ok:
        return False, f"{filename}: unsupported file type (PDF, JPEG, PNG, DOC or DOCX only)"
    if size > MAX_DOCUMENT_BYTES:
        return False, f"{filename}: file exceeds the 10 MB limit"
    return True, "Valid document"


def validate_price(price) -> Tuple[bool, str]:
    if price is None:
        return True, "Price is optional"
    if isinstance(price, bool) or not isinstance(price, (int, float)) or price != price:
        return False, "Consultation price must be a number"
    if price < 0:
        return False, "Consultation price cannot be negative"
    return True, "Valid price"


def validate_schedule(day_of_week, start_time: str, end_time: str) -> Tuple[bool, str]:
    """
    Validate one weekly opening window.

    Args:
        day_of_week: 0 (Sunday) to 6 (Saturday)
        start_time: Opening time as ``HH:MM``
        end_time: Closing time as ``HH:MM``, later than ``start_time``

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
        return False, "Day of week must be between 0 (Sunday) and 6 (Saturday)"
    for value in (start_time, end_time):
        if not TIME_PATTERN.match(value or ""):
            return False, f"Invalid time {value!r}; use HH:MM"
    if start_time >= end_time:
        return False, f"Opening time {start_time} must be before closing time {end_time}"
    return True, "Valid schedule"
