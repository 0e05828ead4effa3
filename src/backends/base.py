"""Storage-neutral interface to the directory's persistent records.

Concrete backends implement five primitives (insert, fetch, query, patch,
remove) over their own schema; everything else is written once here in
terms of the domain records from ``src.data.models``.
"""
from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from src.data.models import (
    MISSING_CREATED_AT,
    AdminLog,
    Appointment,
    Favorite,
    MedicalAd,
    ProfileClaim,
    Provider,
    Rating,
    UserRoleRecord,
    VerificationRequest,
    average_rating,
    schedules_to_dicts,
    utcnow,
)
from src.services.errors import DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def _newest_first(records: list, attr: str = "created_at") -> list:
    return sorted(records, key=lambda r: getattr(r, attr) or MISSING_CREATED_AT, reverse=True)


class DirectoryBackend(ABC):
    """Abstract store for providers and everything attached to them."""

    name = "backend"

    # -- primitives -----------------------------------------------------

    @abstractmethod
    def _insert(self, kind: str, record: Any) -> None:
        """Persist a new record of collection/table ``kind``."""

    @abstractmethod
    def _fetch(self, kind: str, record_id: str) -> Optional[Any]:
        """Return the record with ``record_id`` or None."""

    @abstractmethod
    def _query(self, kind: str, **equals: Any) -> List[Any]:
        """Return all records whose fields equal the given values."""

    @abstractmethod
    def _patch(self, kind: str, record_id: str, changes: Dict[str, Any]) -> None:
        """Apply ``changes`` (snake_case field names) to one record in a single write."""

    @abstractmethod
    def _remove(self, kind: str, record_id: str) -> None:
        """Delete a record; deleting a missing record is not an error."""

    def _create(self, kind: str, record: Any) -> Any:
        if not record.id:
            record.id = new_id()
        if hasattr(record, "created_at") and record.created_at is None:
            record.created_at = utcnow()
        self._insert(kind, record)
        logger.debug(f"{self.name}: created {kind}/{record.id}")
        return record

    def _require(self, kind: str, record_id: str) -> Any:
        record = self._fetch(kind, record_id)
        if record is None:
            raise NotFoundError(f"No {kind} record with id {record_id}")
        return record

    def _update(self, kind: str, record_id: str, **changes: Any) -> None:
        self._require(kind, record_id)
        changes = {k: (v.value if isinstance(v, Enum) else v) for k, v in changes.items()}
        self._patch(kind, record_id, changes)

    # -- providers ------------------------------------------------------

    def list_providers(self) -> List[Provider]:
        return self._query("providers")

    def list_verified_providers(self) -> List[Provider]:
        return self._query("providers", verification_status="verified")

    def list_emergency_providers(self) -> List[Provider]:
        return self._query("providers", is_emergency=True)

    def get_provider(self, provider_id: str) -> Optional[Provider]:
        return self._fetch("providers", provider_id)

    def find_provider_by_user(self, user_id: str) -> Optional[Provider]:
        matches = self._query("providers", user_id=user_id) if user_id else []
        return matches[0] if matches else None

    def create_provider(self, provider: Provider) -> Provider:
        if provider.updated_at is None:
            provider.updated_at = utcnow()
        return self._create("providers", provider)

    def update_provider(self, provider_id: str, **changes: Any) -> None:
        changes.setdefault("updated_at", utcnow())
        if "schedules" in changes:
            changes["schedules"] = schedules_to_dicts(changes["schedules"])
        self._update("providers", provider_id, **changes)

    def delete_provider(self, provider_id: str) -> None:
        self._remove("providers", provider_id)

    # -- ratings --------------------------------------------------------

    def list_ratings(self, provider_id: str) -> List[Rating]:
        return _newest_first(self._query("ratings", provider_id=provider_id))

    def add_rating(self, rating: Rating) -> Rating:
        """Store a rating and refresh the provider's average.

        Raises:
            ValueError: if the score is not a whole number from 1 to 5
            NotFoundError: if the provider does not exist
        """
        if isinstance(rating.rating, bool) or not isinstance(rating.rating, int) or not 1 <= rating.rating <= 5:
            raise ValueError(f"Rating must be a whole number from 1 to 5, got {rating.rating!r}")
        self._require("providers", rating.provider_id)
        created = self._create("ratings", rating)
        ratings = self._query("ratings", provider_id=rating.provider_id)
        self.update_provider(
            rating.provider_id, avg_rating=average_rating(ratings), rating_count=len(ratings)
        )
        return created

    # -- appointments ---------------------------------------------------

    def create_appointment(self, appointment: Appointment) -> Appointment:
        return self._create("appointments", appointment)

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self._fetch("appointments", appointment_id)

    def list_appointments(self, user_id: Optional[str] = None, provider_id: Optional[str] = None) -> List[Appointment]:
        equals = {}
        if user_id is not None:
            equals["user_id"] = user_id
        if provider_id is not None:
            equals["provider_id"] = provider_id
        return _newest_first(self._query("appointments", **equals), attr="scheduled_at")

    def update_appointment(self, appointment_id: str, **changes: Any) -> None:
        changes.setdefault("updated_at", utcnow())
        self._update("appointments", appointment_id, **changes)

    # -- verification requests ------------------------------------------

    def create_verification_request(self, request: VerificationRequest) -> VerificationRequest:
        return self._create("verification_requests", request)

    def get_verification_request(self, request_id: str) -> Optional[VerificationRequest]:
        return self._fetch("verification_requests", request_id)

    def list_verification_requests(
        self, provider_id: Optional[str] = None, status: Optional[str] = None
    ) -> List[VerificationRequest]:
        equals = {k: v for k, v in (("provider_id", provider_id), ("status", status)) if v is not None}
        return _newest_first(self._query("verification_requests", **equals))

    def update_verification_request(self, request_id: str, **changes: Any) -> None:
        self._update("verification_requests", request_id, **changes)

    # -- profile claims -------------------------------------------------

    def create_claim(self, claim: ProfileClaim) -> ProfileClaim:
        return self._create("profile_claims", claim)

    def get_claim(self, claim_id: str) -> Optional[ProfileClaim]:
        return self._fetch("profile_claims", claim_id)

    def list_claims(self, provider_id: Optional[str] = None, status: Optional[str] = None) -> List[ProfileClaim]:
        equals = {k: v for k, v in (("provider_id", provider_id), ("status", status)) if v is not None}
        return _newest_first(self._query("profile_claims", **equals))

    def update_claim(self, claim_id: str, **changes: Any) -> None:
        self._update("profile_claims", claim_id, **changes)

    # -- medical ads ----------------------------------------------------

    def create_medical_ad(self, ad: MedicalAd) -> MedicalAd:
        return self._create("medical_ads", ad)

    def get_medical_ad(self, ad_id: str) -> Optional[MedicalAd]:
        return self._fetch("medical_ads", ad_id)

    def list_medical_ads(self, provider_id: Optional[str] = None, status: Optional[str] = None) -> List[MedicalAd]:
        equals = {k: v for k, v in (("provider_id", provider_id), ("status", status)) if v is not None}
        return _newest_first(self._query("medical_ads", **equals))

    def update_medical_ad(self, ad_id: str, **changes: Any) -> None:
        self._update("medical_ads", ad_id, **changes)

    def delete_medical_ad(self, ad_id: str) -> None:
        self._remove("medical_ads", ad_id)

    # -- favorites ------------------------------------------------------

    def get_favorite(self, user_id: str, provider_id: str) -> Optional[Favorite]:
        matches = self._query("favorites", user_id=user_id, provider_id=provider_id)
        return matches[0] if matches else None

    def add_favorite(self, favorite: Favorite) -> Favorite:
        if self.get_favorite(favorite.user_id, favorite.provider_id) is not None:
            raise DuplicateError("Provider is already in your favorites")
        return self._create("favorites", favorite)

    def remove_favorite(self, user_id: str, provider_id: str) -> None:
        for favorite in self._query("favorites", user_id=user_id, provider_id=provider_id):
            self._remove("favorites", favorite.id)

    def list_favorites(self, user_id: str) -> List[Favorite]:
        return _newest_first(self._query("favorites", user_id=user_id))

    # -- user roles -----------------------------------------------------

    def get_user_role(self, user_id: str) -> Optional[str]:
        matches = self._query("user_roles", user_id=user_id)
        return matches[0].role if matches else None

    def set_user_role(self, user_id: str, role: str) -> None:
        matches = self._query("user_roles", user_id=user_id)
        if matches:
            self._patch("user_roles", matches[0].id, {"role": role})
        else:
            self._create("user_roles", UserRoleRecord(id="", user_id=user_id, role=role))

    # -- admin logs -----------------------------------------------------

    def add_admin_log(self, entry: AdminLog) -> AdminLog:
        return self._create("admin_logs", entry)

    def list_admin_logs(self, entity_type: Optional[str] = None) -> List[AdminLog]:
        equals = {"entity_type": entity_type} if entity_type else {}
        return _newest_first(self._query("admin_logs", **equals))
