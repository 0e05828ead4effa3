"""Data package for the provider directory: domain records and file I/O."""

from .io_utils import load_import_records, load_sample_providers, providers_to_frame
from .models import (
    ACCESSIBILITY_FEATURES,
    PROVIDER_TYPES,
    Appointment,
    AppointmentStatus,
    Favorite,
    MedicalAd,
    ProfileClaim,
    Provider,
    ProviderType,
    ReviewStatus,
    Schedule,
    UserRole,
    VerificationRequest,
    VerificationStatus,
    is_claimable,
)

__all__ = [
    "ACCESSIBILITY_FEATURES",
    "PROVIDER_TYPES",
    "Appointment",
    "AppointmentStatus",
    "Favorite",
    "MedicalAd",
    "ProfileClaim",
    "Provider",
    "ProviderType",
    "ReviewStatus",
    "Schedule",
    "UserRole",
    "VerificationRequest",
    "VerificationStatus",
    "is_claimable",
    "load_import_records",
    "load_sample_providers",
    "providers_to_frame",
]
