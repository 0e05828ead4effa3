"""Self-registration of a provider account's own listing."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from src.data.models import Provider, Schedule, UserRole, VerificationRequest, VerificationStatus
from src.services.claims import ClaimDocument
from src.services.errors import DuplicateError
from src.services.verification import create_verification_request
from src.utils.validation import (
    validate_coordinates,
    validate_document,
    validate_email,
    validate_phone_number,
    validate_price,
    validate_provider_type,
    validate_required,
    validate_schedule,
    validate_website,
)

logger = logging.getLogger(__name__)


@dataclass
class ProviderRegistration:
    business_name: str
    provider_type: str
    phone: str
    address: str
    email: Optional[str] = None
    city: Optional[str] = None
    specialty: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    is_emergency: bool = False
    wheelchair_accessible: bool = False
    home_visit_available: bool = False
    consultation_price: Optional[float] = None
    accepts_insurance: bool = False
    schedules: List[Schedule] = field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass
class RegistrationResult:
    provider: Provider
    verification_request: Optional[VerificationRequest] = None
    warnings: List[str] = field(default_factory=list)


def validate_registration(form: ProviderRegistration) -> List[str]:
    checks = [
        validate_required(form.business_name, "Business name"),
        validate_provider_type(form.provider_type),
        validate_phone_number(form.phone or ""),
        validate_required(form.address, "Address"),
        validate_email(form.email),
        validate_website(form.website),
        validate_price(form.consultation_price),
    ]
    checks.extend(validate_schedule(s.day_of_week, s.start_time, s.end_time) for s in form.schedules)
    if form.latitude is not None or form.longitude is not None:
        checks.append(validate_coordinates(form.latitude, form.longitude))
    return [message for ok, message in checks if not ok]


def register_provider(ctx, form: ProviderRegistration, license_file: Optional[ClaimDocument] = None) -> RegistrationResult:
    """Create the signed-in account's listing, pending verification.

    A license upload failure does not stop the registration: the listing is
    created without a verification request and the failure is returned in
    ``warnings``.

    Raises:
        AuthorizationError: if nobody is signed in
        DuplicateError: if the account already owns a listing
        ValueError: if the form is invalid
    """
    user = ctx.require_user()
    if ctx.backend.find_provider_by_user(user.id) is not None:
        raise DuplicateError("This account already has a provider profile")
    errors = validate_registration(form)
    if license_file is not None:
        ok, message = validate_document(license_file.filename, license_file.size, license_file.content_type)
        if not ok:
            errors.append(message)
    if errors:
        raise ValueError("; ".join(errors))

    warnings = []
    license_url = None
    if license_file is not None:
        try:
            storage = ctx.require_storage()
            license_url = storage.upload(
                f"licenses/{user.id}", license_file.filename, license_file.data, license_file.content_type
            )
        except Exception as e:
            logger.warning(f"License upload failed for user {user.id}: {e}")
            warnings.append(f"The license document could not be uploaded ({e}). You can submit it later.")

    provider = ctx.backend.create_provider(
        Provider(
            id="",
            user_id=user.id,
            business_name=form.business_name.strip(),
            provider_type=form.provider_type.strip().lower(),
            phone=form.phone.strip(),
            address=form.address.strip(),
            email=form.email or None,
            city=form.city or None,
            specialty=form.specialty or None,
            description=form.description or None,
            website=form.website or None,
            latitude=form.latitude,
            longitude=form.longitude,
            accessibility_features=["wheelchair"] if form.wheelchair_accessible else [],
            is_emergency=form.is_emergency,
            home_visit_available=form.home_visit_available,
            verification_status=VerificationStatus.PENDING.value,
            is_preloaded=False,
            is_claimed=False,
            consultation_price=form.consultation_price,
            accepts_insurance=form.accepts_insurance,
            schedules=list(form.schedules),
        )
    )
    if user.role != UserRole.ADMIN.value:
        ctx.backend.set_user_role(user.id, UserRole.PROVIDER.value)

    request = None
    if license_url:
        request = create_verification_request(ctx, provider.id, [license_url], "license")

    logger.info(f"Registered provider {provider.id} for user {user.id}")
    return RegistrationResult(provider=provider, verification_request=request, warnings=warnings)
