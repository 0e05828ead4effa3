"""Document-store backend: camelCase JSON documents grouped by collection.

Documents written by older clients may use snake_case keys, so decoding
accepts either spelling for every field. Appointments keep their contact
details in a nested ``contactInfo`` object and their time under ``datetime``.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from src.backends.base import DirectoryBackend
from src.backends.document_store import DocumentStore, InMemoryDocumentStore
from src.data.models import (
    MISSING_CREATED_AT,
    RECORD_TYPES,
    Provider,
    record_from_dict,
    record_to_dict,
)

logger = logging.getLogger(__name__)

# snake_case field -> document key, where the plain camelCase form is not used
FIELD_ALIASES = {
    "appointments": {"scheduled_at": "datetime"},
}
CONTACT_FIELDS = {"contact_name": "name", "contact_phone": "phone", "contact_email": "email"}


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, list):
        return [_encode(v) for v in value]
    if isinstance(value, dict):
        return {(to_camel(k) if isinstance(k, str) and "_" in k else k): _encode(v) for k, v in value.items()}
    return value


def _encode_plain(value: Any) -> Any:
    """JSON-ready copy of free-form data; dict keys are stored as given."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_encode_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _encode_plain(v) for k, v in value.items()}
    return value


def record_to_document(kind: str, record: Any) -> Dict[str, Any]:
    """Encode a record as a camelCase document (the id is the document key, not a field)."""
    aliases = FIELD_ALIASES.get(kind, {})
    doc: Dict[str, Any] = {}
    for name, value in record_to_dict(record).items():
        if name == "id":
            continue
        if kind == "appointments" and name in CONTACT_FIELDS:
            if value is not None:
                doc.setdefault("contactInfo", {})[CONTACT_FIELDS[name]] = value
            continue
        if name == "changes":
            doc[name] = _encode_plain(value)
            continue
        doc[aliases.get(name, to_camel(name))] = _encode(value)
    return doc


def document_to_record(kind: str, doc_id: str, doc: Dict[str, Any]) -> Any:
    """Decode a document, tolerating camelCase or snake_case keys."""
    record_type = RECORD_TYPES[kind]
    aliases = FIELD_ALIASES.get(kind, {})
    data: Dict[str, Any] = {"id": doc_id}
    for name in record_type.__dataclass_fields__:
        if name == "id":
            continue
        for key in (aliases.get(name), to_camel(name), name):
            if key and doc.get(key) is not None:
                data[name] = doc[key]
                break
    if kind == "appointments":
        contact = doc.get("contactInfo") or {}
        for name, key in CONTACT_FIELDS.items():
            if name not in data and contact.get(key) is not None:
                data[name] = contact[key]
    if kind == "providers" and "provider_type" not in data:
        data["provider_type"] = "doctor"
    if "created_at" in record_type.__dataclass_fields__ and "created_at" not in data:
        data["created_at"] = MISSING_CREATED_AT
    return record_from_dict(record_type, data)


class DocumentBackend(DirectoryBackend):
    """DirectoryBackend over a DocumentStore (in-memory or S3)."""

    name = "document"

    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or InMemoryDocumentStore()

    def _insert(self, kind: str, record: Any) -> None:
        self.store.put(kind, record.id, record_to_document(kind, record))

    def _fetch(self, kind: str, record_id: str) -> Optional[Any]:
        doc = self.store.get(kind, record_id)
        if doc is None:
            return None
        return document_to_record(kind, record_id, doc)

    def _query(self, kind: str, **equals: Any) -> List[Any]:
        records = [document_to_record(kind, doc_id, doc) for doc_id, doc in self.store.list(kind)]
        return [r for r in records if all(getattr(r, k) == v for k, v in equals.items())]

    def _patch(self, kind: str, record_id: str, changes: Dict[str, Any]) -> None:
        record = self._fetch(kind, record_id)
        if record is None:
            return
        for name, value in changes.items():
            setattr(record, name, value)
        self.store.put(kind, record_id, record_to_document(kind, record))

    def _remove(self, kind: str, record_id: str) -> None:
        self.store.delete(kind, record_id)

    def seed_providers(self, providers: List[Provider]) -> None:
        """Load providers as-is, keeping their ids (demo data)."""
        for provider in providers:
            self._insert("providers", provider)
        logger.info(f"Seeded document store with {len(providers)} providers")
