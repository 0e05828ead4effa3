"""Appointment booking and status changes."""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from src.data.models import Appointment, AppointmentStatus, utcnow
from src.services.errors import AuthorizationError, InvalidTransitionError, NotFoundError
from src.utils.validation import validate_email, validate_phone_number, validate_required

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING.value: {AppointmentStatus.CONFIRMED.value, AppointmentStatus.CANCELLED.value},
    AppointmentStatus.CONFIRMED.value: {AppointmentStatus.COMPLETED.value, AppointmentStatus.CANCELLED.value},
    AppointmentStatus.CANCELLED.value: set(),
    AppointmentStatus.COMPLETED.value: set(),
}


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def create_appointment(
    ctx,
    provider_id: str,
    scheduled_at: datetime,
    contact_name: str,
    contact_phone: str,
    contact_email: Optional[str] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Appointment:
    """Book a pending appointment for the signed-in user.

    Raises:
        AuthorizationError: if nobody is signed in
        NotFoundError: if the provider does not exist
        ValueError: on missing contact details or a time in the past
    """
    user = ctx.require_user("Please sign in to book an appointment")
    if ctx.backend.get_provider(provider_id) is None:
        raise NotFoundError(f"Provider {provider_id} not found")

    errors = []
    for ok, message in (
        validate_required(contact_name, "Name"),
        validate_phone_number(contact_phone or ""),
        validate_email(contact_email),
    ):
        if not ok:
            errors.append(message)
    scheduled_at = _as_utc(scheduled_at)
    if scheduled_at <= _as_utc(now or utcnow()):
        errors.append("Appointment time must be in the future")
    if errors:
        raise ValueError("; ".join(errors))

    appointment = ctx.backend.create_appointment(
        Appointment(
            id="",
            provider_id=provider_id,
            user_id=user.id,
            scheduled_at=scheduled_at,
            contact_name=contact_name.strip(),
            contact_phone=contact_phone.strip(),
            contact_email=contact_email or None,
            notes=notes or None,
        )
    )
    logger.info(f"Appointment {appointment.id} booked with provider {provider_id}")
    return appointment


def user_appointments(ctx) -> List[Appointment]:
    user = ctx.require_user()
    return ctx.backend.list_appointments(user_id=user.id)


def provider_appointments(ctx, provider_id: str) -> List[Appointment]:
    _require_provider_owner(ctx, provider_id)
    return ctx.backend.list_appointments(provider_id=provider_id)


def _require_provider_owner(ctx, provider_id: str) -> None:
    user = ctx.require_user()
    provider = ctx.backend.get_provider(provider_id)
    if provider is None:
        raise NotFoundError(f"Provider {provider_id} not found")
    if provider.user_id != user.id and not ctx.is_admin:
        raise AuthorizationError("Only the provider can manage these appointments")


def update_appointment_status(ctx, appointment_id: str, status: str) -> Appointment:
    """Move an appointment along its lifecycle.

    The patient may only cancel; the provider (or an admin) may confirm,
    complete or cancel.
    """
    user = ctx.require_user()
    status = status.value if isinstance(status, AppointmentStatus) else status
    appointment = ctx.backend.get_appointment(appointment_id)
    if appointment is None:
        raise NotFoundError(f"Appointment {appointment_id} not found")

    if status not in ALLOWED_TRANSITIONS:
        raise ValueError(f"Unknown appointment status: {status}")
    if status not in ALLOWED_TRANSITIONS.get(appointment.status, set()):
        raise InvalidTransitionError(f"Cannot change appointment from {appointment.status} to {status}")

    is_patient = appointment.user_id == user.id
    if not (is_patient and status == AppointmentStatus.CANCELLED.value):
        _require_provider_owner(ctx, appointment.provider_id)

    ctx.backend.update_appointment(appointment_id, status=status)
    logger.info(f"Appointment {appointment_id}: {appointment.status} -> {status}")
    return ctx.backend.get_appointment(appointment_id)


def cancel_appointment(ctx, appointment_id: str) -> Appointment:
    return update_appointment_status(ctx, appointment_id, AppointmentStatus.CANCELLED.value)
