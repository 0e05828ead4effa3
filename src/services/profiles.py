"""Editing an existing listing by its owner or an administrator."""
import logging
from typing import Any, Dict, List, Mapping

from src.data.models import Provider, Schedule, schedules_to_dicts
from src.services.admin_log import log_admin_action
from src.services.errors import AuthorizationError, NotFoundError
from src.utils.validation import (
    validate_accessibility_features,
    validate_coordinates,
    validate_email,
    validate_phone_number,
    validate_price,
    validate_provider_type,
    validate_required,
    validate_schedule,
    validate_website,
)

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = {"business_name": "Business name", "address": "Address"}
OPTIONAL_TEXT_FIELDS = ("specialty", "email", "website", "city", "description", "avatar_url")
FLAG_FIELDS = ("is_emergency", "home_visit_available", "accepts_insurance")
EDITABLE_FIELDS = frozenset(
    set(REQUIRED_TEXT_FIELDS)
    | set(OPTIONAL_TEXT_FIELDS)
    | set(FLAG_FIELDS)
    | {
        "provider_type",
        "phone",
        "latitude",
        "longitude",
        "accessibility_features",
        "consultation_price",
        "schedules",
    }
)
# Managed by claims, verification and ratings; never edited directly
PROTECTED_FIELDS = frozenset(
    {
        "id",
        "user_id",
        "is_preloaded",
        "is_claimed",
        "verification_status",
        "avg_rating",
        "rating_count",
        "created_at",
        "updated_at",
    }
)


def _clean_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _clean_number(value: Any):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def _clean_schedules(value: Any, errors: List[str]) -> List[Schedule]:
    schedules = []
    for item in schedules_to_dicts(value):
        ok, message = validate_schedule(item["day_of_week"], item["start_time"], item["end_time"])
        if not ok:
            errors.append(message)
            continue
        schedules.append(Schedule(**item))
    return schedules


def clean_profile_changes(provider: Provider, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate and normalise edits to ``provider``.

    Raises:
        AuthorizationError: if a protected field is included
        ValueError: for unknown fields or invalid values
    """
    protected = sorted(set(changes) & PROTECTED_FIELDS)
    if protected:
        raise AuthorizationError(f"These fields cannot be edited: {', '.join(protected)}")
    unknown = sorted(set(changes) - EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(unknown)}")

    cleaned: Dict[str, Any] = {}
    errors: List[str] = []

    def check(result):
        ok, message = result
        if not ok:
            errors.append(message)

    for name, label in REQUIRED_TEXT_FIELDS.items():
        if name in changes:
            cleaned[name] = _clean_text(changes[name])
            check(validate_required(cleaned[name], label))
    for name in OPTIONAL_TEXT_FIELDS:
        if name in changes:
            cleaned[name] = _clean_text(changes[name]) or None
    if "email" in cleaned:
        check(validate_email(cleaned["email"]))
    if "website" in cleaned:
        check(validate_website(cleaned["website"]))
    if "provider_type" in changes:
        cleaned["provider_type"] = _clean_text(changes["provider_type"]).lower()
        check(validate_provider_type(cleaned["provider_type"]))
    if "phone" in changes:
        cleaned["phone"] = _clean_text(changes["phone"])
        check(validate_phone_number(cleaned["phone"]))
    for name in FLAG_FIELDS:
        if name in changes:
            cleaned[name] = bool(changes[name])

    if "accessibility_features" in changes:
        features = [_clean_text(f) for f in changes["accessibility_features"] or []]
        cleaned["accessibility_features"] = list(dict.fromkeys(f for f in features if f))
        check(validate_accessibility_features(cleaned["accessibility_features"]))

    if "consultation_price" in changes:
        price = _clean_number(changes["consultation_price"])
        check(validate_price(price))
        cleaned["consultation_price"] = float(price) if isinstance(price, (int, float)) else price

    if "latitude" in changes or "longitude" in changes:
        lat = _clean_number(changes.get("latitude", provider.latitude))
        lon = _clean_number(changes.get("longitude", provider.longitude))
        # Both cleared removes the map pin
        if lat is not None or lon is not None:
            check(validate_coordinates(lat, lon))
        cleaned["latitude"], cleaned["longitude"] = lat, lon

    if "schedules" in changes:
        cleaned["schedules"] = _clean_schedules(changes["schedules"], errors)

    if errors:
        raise ValueError("; ".join(errors))
    return cleaned


def update_provider_profile(ctx, provider_id: str, changes: Mapping[str, Any]) -> Provider:
    """Apply validated edits to a listing and return the updated record.

    Only the listing's owner or an administrator may edit it. Admin edits to
    someone else's listing are written to the audit log.

    Raises:
        AuthorizationError: if the user may not edit this listing or a protected field is included
        NotFoundError: if the provider does not exist
        ValueError: for unknown fields or invalid values
    """
    user = ctx.require_user()
    provider = ctx.backend.get_provider(provider_id)
    if provider is None:
        raise NotFoundError(f"Provider {provider_id} not found")
    is_owner = bool(provider.user_id) and provider.user_id == user.id
    if not is_owner and not ctx.is_admin:
        raise AuthorizationError("Only the owner of this listing or an administrator can edit it")

    cleaned = clean_profile_changes(provider, changes)
    if not cleaned:
        return provider

    ctx.backend.update_provider(provider_id, **cleaned)
    logger.info(f"User {user.id} updated provider {provider_id}: {', '.join(sorted(cleaned))}")
    if not is_owner:
        log_admin_action(ctx, "update", "provider", provider_id, {"fields": sorted(cleaned)})
    return ctx.backend.get_provider(provider_id)
