"""Bulk import of preloaded provider listings from CSV or JSON.

Every row is validated and created on its own: a bad row (or a backend
error on one row) is recorded as a failure and the batch carries on.
Imported listings are preloaded, unclaimed and verified so they appear in
search immediately and can later be claimed by their owners.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd

from src.data.models import Provider, VerificationStatus
from src.utils.validation import (
    validate_accessibility_features,
    validate_coordinates,
    validate_email,
    validate_phone_number,
    validate_provider_type,
    validate_required,
    validate_website,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["business_name", "provider_type", "phone", "address"]
OPTIONAL_COLUMNS = [
    "email",
    "city",
    "specialty",
    "description",
    "website",
    "accessibility_features",
    "home_visit_available",
    "latitude",
    "longitude",
]
IMPORT_COLUMNS = REQUIRED_COLUMNS + OPTIONAL_COLUMNS

_TRUTHY = {"true", "oui", "1"}

_TEMPLATE_ROW = {
    "business_name": "Cabinet Dr. Exemple",
    "provider_type": "doctor",
    "phone": "+213 48 50 10 20",
    "address": "123 Rue de la Santé, Sidi Bel Abbès",
    "email": "contact@exemple.com",
    "city": "Sidi Bel Abbès",
    "specialty": "Cardiologie",
    "description": "Cabinet de cardiologie moderne",
    "website": "https://exemple.com",
    "accessibility_features": "wheelchair,parking,elevator",
    "home_visit_available": "true",
    "latitude": "35.1899",
    "longitude": "-0.6308",
}

_LABELS = {
    "business_name": "Business name",
    "address": "Address",
}


@dataclass(slots=True)
class ValidationIssue:
    row: int
    field: str
    message: str


@dataclass(slots=True)
class ImportFailure:
    row: int
    business_name: str
    message: str


@dataclass(slots=True)
class ImportSummary:
    """Outcome of an import batch."""

    total: int = 0
    created_ids: List[str] = field(default_factory=list)
    failures: List[ImportFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.created_ids)

    @property
    def error_count(self) -> int:
        return len(self.failures)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def parse_accessibility_features(value: Any) -> List[str]:
    """Split a comma-separated tag list (or pass a JSON list through), trimming blanks."""
    if isinstance(value, (list, tuple)):
        tokens = [_text(v) for v in value]
    else:
        tokens = [t.strip() for t in _text(value).split(",")]
    return [t for t in tokens if t]


def parse_coordinate(value: Any):
    """Float for numeric input, None when blank, the raw text otherwise (rejected by validation)."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return None if pd.isna(value) else float(value)
    text = _text(value)
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return text


def parse_home_visit(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return _text(value).lower() in _TRUTHY


def validate_row(row: Mapping[str, Any], row_number: int) -> List[ValidationIssue]:
    issues = []

    def check(field_name: str, result):
        ok, message = result
        if not ok:
            issues.append(ValidationIssue(row_number, field_name, message))

    for column, label in _LABELS.items():
        check(column, validate_required(_text(row.get(column)), label))
    check("provider_type", validate_provider_type(_text(row.get("provider_type"))))
    check("phone", validate_phone_number(_text(row.get("phone"))))
    check("email", validate_email(_text(row.get("email"))))
    check("website", validate_website(_text(row.get("website"))))
    check(
        "accessibility_features",
        validate_accessibility_features(parse_accessibility_features(row.get("accessibility_features"))),
    )
    lat, lon = parse_coordinate(row.get("latitude")), parse_coordinate(row.get("longitude"))
    if lat is not None or lon is not None:
        check("latitude", validate_coordinates(lat, lon))
    return issues


def validate_import_rows(rows: Sequence[Mapping[str, Any]]) -> List[ValidationIssue]:
    """All validation issues in the batch; rows are numbered from 1."""
    issues = []
    for index, row in enumerate(rows):
        issues.extend(validate_row(row, index + 1))
    return issues


def row_to_provider(row: Mapping[str, Any]) -> Provider:
    return Provider(
        id="",
        user_id="",
        business_name=_text(row.get("business_name")),
        provider_type=_text(row.get("provider_type")).lower(),
        phone=_text(row.get("phone")),
        address=_text(row.get("address")),
        email=_text(row.get("email")) or None,
        city=_text(row.get("city")) or None,
        specialty=_text(row.get("specialty")) or None,
        description=_text(row.get("description")) or None,
        website=_text(row.get("website")) or None,
        accessibility_features=parse_accessibility_features(row.get("accessibility_features")),
        home_visit_available=parse_home_visit(row.get("home_visit_available")),
        latitude=parse_coordinate(row.get("latitude")),
        longitude=parse_coordinate(row.get("longitude")),
        is_emergency=False,
        verification_status=VerificationStatus.VERIFIED.value,
        is_preloaded=True,
        is_claimed=False,
    )


def import_providers(ctx, rows: Sequence[Mapping[str, Any]]) -> ImportSummary:
    """Create one preloaded listing per valid row (admin only).

    Returns:
        ImportSummary with the created ids and one failure per rejected row
    """
    ctx.require_admin()
    summary = ImportSummary(total=len(rows))
    for index, row in enumerate(rows):
        row_number = index + 1
        name = _text(row.get("business_name"))
        issues = validate_row(row, row_number)
        if issues:
            summary.failures.append(ImportFailure(row_number, name, "; ".join(i.message for i in issues)))
            continue
        try:
            provider = ctx.backend.create_provider(row_to_provider(row))
        except Exception as e:
            logger.error(f"Import row {row_number} ({name}) failed: {e}")
            summary.failures.append(ImportFailure(row_number, name, str(e) or type(e).__name__))
            continue
        summary.created_ids.append(provider.id)

    logger.info(
        f"Bulk import finished: {summary.success_count} created, {summary.error_count} failed of {summary.total}"
    )
    return summary


def import_template_csv() -> str:
    """One-row example file with every supported column."""
    return pd.DataFrame([_TEMPLATE_ROW], columns=IMPORT_COLUMNS).to_csv(index=False)


def rows_preview(rows: Sequence[Dict[str, Any]]) -> pd.DataFrame:
    """Rows as a DataFrame in import column order (extra columns kept at the end)."""
    df = pd.DataFrame(list(rows))
    ordered = [c for c in IMPORT_COLUMNS if c in df.columns] + [c for c in df.columns if c not in IMPORT_COLUMNS]
    return df[ordered] if len(df.columns) else df
