"""Relational backend: one snake_case table per record type (SQLAlchemy ORM)."""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from src.backends.base import DirectoryBackend
from src.data.models import RECORD_TYPES, record_from_dict, record_to_dict
from src.services.errors import DuplicateError

logger = logging.getLogger(__name__)

Base = declarative_base()


class ProviderRow(Base):
    __tablename__ = "providers"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(128), index=True, nullable=False, default="")
    business_name = Column(String(255), nullable=False)
    provider_type = Column(String(32), nullable=False, index=True)
    specialty = Column(String(255))
    phone = Column(String(64), nullable=False)
    email = Column(String(255))
    website = Column(String(512))
    address = Column(Text, nullable=False)
    city = Column(String(128), index=True)
    latitude = Column(Float)
    longitude = Column(Float)
    description = Column(Text)
    avatar_url = Column(String(512))
    accessibility_features = Column(JSON, default=list)
    is_emergency = Column(Boolean, default=False, index=True)
    home_visit_available = Column(Boolean, default=False)
    verification_status = Column(String(16), default="pending", index=True)
    is_preloaded = Column(Boolean, default=False)
    is_claimed = Column(Boolean, default=False)
    consultation_price = Column(Float)
    accepts_insurance = Column(Boolean, default=False)
    schedules = Column(JSON, default=list)
    avg_rating = Column(Float, default=0.0)
    rating_count = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))

    def __repr__(self):
        return f"<ProviderRow(id={self.id}, name={self.business_name})>"


class RatingRow(Base):
    __tablename__ = "ratings"

    id = Column(String(36), primary_key=True)
    provider_id = Column(String(36), index=True, nullable=False)
    user_id = Column(String(128), index=True, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(DateTime(timezone=True))


class AppointmentRow(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True)
    provider_id = Column(String(36), index=True, nullable=False)
    user_id = Column(String(128), index=True, nullable=False)
    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    contact_name = Column(String(255), nullable=False)
    contact_phone = Column(String(64), nullable=False)
    contact_email = Column(String(255))
    notes = Column(Text)
    status = Column(String(16), default="pending", index=True)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))


class VerificationRequestRow(Base):
    __tablename__ = "verification_requests"

    id = Column(String(36), primary_key=True)
    provider_id = Column(String(36), index=True, nullable=False)
    user_id = Column(String(128), nullable=False)
    document_type = Column(String(64), default="license")
    document_urls = Column(JSON, default=list)
    status = Column(String(16), default="pending", index=True)
    rejection_reason = Column(Text)
    reviewed_by = Column(String(128))
    reviewed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True))


class ProfileClaimRow(Base):
    __tablename__ = "profile_claims"

    id = Column(String(36), primary_key=True)
    provider_id = Column(String(36), index=True, nullable=False)
    user_id = Column(String(128), nullable=False)
    reason = Column(Text, default="")
    documentation = Column(JSON, default=list)
    status = Column(String(16), default="pending", index=True)
    notes = Column(Text)
    reviewed_by = Column(String(128))
    reviewed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True))


class MedicalAdRow(Base):
    __tablename__ = "medical_ads"

    id = Column(String(36), primary_key=True)
    provider_id = Column(String(36), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String(512))
    status = Column(String(16), default="pending", index=True)
    display_priority = Column(Integer, default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    created_at = Column(DateTime(timezone=True))


class FavoriteRow(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "provider_id", name="uq_favorites_user_provider"),)

    id = Column(String(36), primary_key=True)
    user_id = Column(String(128), index=True, nullable=False)
    provider_id = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True))


class UserRoleRow(Base):
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(128), unique=True, nullable=False)
    role = Column(String(16), default="citizen")
    created_at = Column(DateTime(timezone=True))


class AdminLogRow(Base):
    __tablename__ = "admin_logs"

    id = Column(String(36), primary_key=True)
    admin_id = Column(String(128), index=True, nullable=False)
    action = Column(String(64), nullable=False)
    entity_type = Column(String(32), index=True, nullable=False)
    entity_id = Column(String(36), nullable=False)
    changes = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True))


TABLES = {
    "providers": ProviderRow,
    "ratings": RatingRow,
    "appointments": AppointmentRow,
    "verification_requests": VerificationRequestRow,
    "profile_claims": ProfileClaimRow,
    "medical_ads": MedicalAdRow,
    "favorites": FavoriteRow,
    "user_roles": UserRoleRow,
    "admin_logs": AdminLogRow,
}


def _jsonable(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def create_db_engine(database_url: str):
    if (database_url.startswith("sqlite") and ":memory:" in database_url) or database_url == "sqlite://":
        # A single shared connection, otherwise every session sees an empty database
        return create_engine(database_url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(database_url, pool_pre_ping=True)


class SqlBackend(DirectoryBackend):
    """DirectoryBackend over a relational database."""

    name = "sql"

    def __init__(self, database_url: str = "sqlite:///:memory:", engine=None):
        self.engine = engine or create_db_engine(database_url)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        logger.info(f"SQL backend ready ({self.engine.url.get_backend_name()})")

    @staticmethod
    def _to_record(kind: str, row) -> Any:
        data = {column.name: getattr(row, column.name) for column in row.__table__.columns}
        return record_from_dict(RECORD_TYPES[kind], data)

    def _insert(self, kind: str, record: Any) -> None:
        values = record_to_dict(record)
        if kind == "admin_logs":
            values["changes"] = _jsonable(values["changes"])
        try:
            with self.Session.begin() as session:
                session.add(TABLES[kind](**values))
        except IntegrityError as e:
            if kind == "favorites":
                raise DuplicateError("Provider is already in your favorites") from e
            raise

    def _fetch(self, kind: str, record_id: str) -> Optional[Any]:
        with self.Session() as session:
            row = session.get(TABLES[kind], record_id)
            return self._to_record(kind, row) if row is not None else None

    def _query(self, kind: str, **equals: Any) -> List[Any]:
        with self.Session() as session:
            rows = session.scalars(select(TABLES[kind]).filter_by(**equals)).all()
            return [self._to_record(kind, row) for row in rows]

    def _patch(self, kind: str, record_id: str, changes: Dict[str, Any]) -> None:
        with self.Session.begin() as session:
            row = session.get(TABLES[kind], record_id)
            if row is None:
                return
            for name, value in changes.items():
                if not hasattr(row, name):
                    raise AttributeError(f"{kind} has no field {name!r}")
                setattr(row, name, value)

    def _remove(self, kind: str, record_id: str) -> None:
        with self.Session.begin() as session:
            row = session.get(TABLES[kind], record_id)
            if row is not None:
                session.delete(row)
