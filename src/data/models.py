"""Domain records for the provider directory.

Every record is a plain dataclass with snake_case fields. Storage adapters in
``src.backends`` translate these to and from their own schema (camelCase
documents or relational rows), so nothing outside the adapters needs to know
which backend is active.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar


class ProviderType(str, Enum):
    DOCTOR = "doctor"
    CLINIC = "clinic"
    HOSPITAL = "hospital"
    PHARMACY = "pharmacy"
    LABORATORY = "laboratory"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class ReviewStatus(str, Enum):
    """Status of admin-reviewed submissions (profile claims, medical ads)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class UserRole(str, Enum):
    CITIZEN = "citizen"
    PROVIDER = "provider"
    ADMIN = "admin"


PROVIDER_TYPES = tuple(t.value for t in ProviderType)

ACCESSIBILITY_FEATURES = (
    "wheelchair",
    "parking",
    "elevator",
    "ramp",
    "accessible_restroom",
    "braille",
    "sign_language",
)

# Stand-in for records stored without a creation timestamp
MISSING_CREATED_AT = datetime(1970, 1, 1, tzinfo=timezone.utc)

DATETIME_FIELDS = frozenset({"created_at", "updated_at", "reviewed_at", "scheduled_at"})
DATE_FIELDS = frozenset({"start_date", "end_date"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Schedule:
    """Weekly opening window. ``day_of_week`` counts from Sunday (0) to Saturday (6)."""

    day_of_week: int
    start_time: str
    end_time: str
    is_active: bool = True


@dataclass(slots=True)
class Provider:
    id: str
    business_name: str
    provider_type: str
    phone: str
    address: str
    user_id: str = ""
    specialty: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    accessibility_features: List[str] = field(default_factory=list)
    is_emergency: bool = False
    home_visit_available: bool = False
    verification_status: str = VerificationStatus.PENDING.value
    is_preloaded: bool = False
    is_claimed: bool = False
    consultation_price: Optional[float] = None
    accepts_insurance: bool = False
    schedules: List[Schedule] = field(default_factory=list)
    avg_rating: float = 0.0
    rating_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class Rating:
    id: str
    provider_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class Appointment:
    id: str
    provider_id: str
    user_id: str
    scheduled_at: datetime
    contact_name: str
    contact_phone: str
    contact_email: Optional[str] = None
    notes: Optional[str] = None
    status: str = AppointmentStatus.PENDING.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class VerificationRequest:
    id: str
    provider_id: str
    user_id: str
    document_type: str = "license"
    document_urls: List[str] = field(default_factory=list)
    status: str = VerificationStatus.PENDING.value
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class ProfileClaim:
    id: str
    provider_id: str
    user_id: str
    reason: str = ""
    documentation: List[str] = field(default_factory=list)
    status: str = ReviewStatus.PENDING.value
    notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class MedicalAd:
    id: str
    provider_id: str
    title: str
    content: str
    start_date: date
    end_date: Optional[date] = None
    image_url: Optional[str] = None
    status: str = ReviewStatus.PENDING.value
    display_priority: int = 0
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class Favorite:
    id: str
    user_id: str
    provider_id: str
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class UserRoleRecord:
    id: str
    user_id: str
    role: str = UserRole.CITIZEN.value
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class AdminLog:
    id: str
    admin_id: str
    action: str
    entity_type: str
    entity_id: str
    changes: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None


# Collection / table name for each record type
RECORD_TYPES: Dict[str, type] = {
    "providers": Provider,
    "ratings": Rating,
    "appointments": Appointment,
    "verification_requests": VerificationRequest,
    "profile_claims": ProfileClaim,
    "medical_ads": MedicalAd,
    "favorites": Favorite,
    "user_roles": UserRoleRecord,
    "admin_logs": AdminLog,
}

R = TypeVar("R")


def is_claimable(provider: Provider) -> bool:
    """A provider can be claimed only while it is a preloaded, unowned listing."""
    return bool(provider.is_preloaded) and not provider.is_claimed


def average_rating(ratings: List[Rating]) -> float:
    if not ratings:
        return 0.0
    return round(sum(r.rating for r in ratings) / len(ratings), 1)


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _to_schedules(value: Any) -> List[Schedule]:
    schedules = []
    for item in value or []:
        if isinstance(item, Schedule):
            schedules.append(item)
            continue
        schedules.append(
            Schedule(
                day_of_week=int(item.get("day_of_week", item.get("dayOfWeek", 0))),
                start_time=str(item.get("start_time", item.get("startTime", ""))),
                end_time=str(item.get("end_time", item.get("endTime", ""))),
                is_active=bool(item.get("is_active", item.get("isActive", True))),
            )
        )
    return schedules


def schedules_to_dicts(value: Any) -> List[Dict[str, Any]]:
    """Schedules (records or dicts in either key spelling) as plain snake_case dicts."""
    return [dataclasses.asdict(s) for s in _to_schedules(value)]


def record_to_dict(record: Any) -> Dict[str, Any]:
    """Flatten a record into a snake_case dict of plain Python values."""
    data = {}
    for f in dataclasses.fields(record):
        value = getattr(record, f.name)
        if isinstance(value, Enum):
            value = value.value
        elif f.name == "schedules":
            value = schedules_to_dicts(value)
        elif isinstance(value, (list, dict)):
            value = value.copy()
        data[f.name] = value
    return data


def record_from_dict(record_type: Type[R], data: Dict[str, Any]) -> R:
    """Build a record from a snake_case dict, coercing timestamps and dates.

    Unknown keys are ignored and missing keys fall back to the dataclass
    defaults; required fields that are missing become empty strings.
    """
    kwargs = {}
    for f in dataclasses.fields(record_type):
        if f.name not in data or data[f.name] is None:
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                kwargs[f.name] = None if f.name in DATETIME_FIELDS | DATE_FIELDS else ""
            continue
        value = data[f.name]
        if f.name in DATETIME_FIELDS:
            value = _to_datetime(value)
        elif f.name in DATE_FIELDS:
            value = _to_date(value)
        elif f.name == "schedules":
            value = _to_schedules(value)
        elif isinstance(value, Enum):
            value = value.value
        elif isinstance(value, (list, dict)):
            value = value.copy()
        kwargs[f.name] = value
    return record_type(**kwargs)
