"""Tests for provider self-registration."""
from unittest.mock import MagicMock

import pytest

from src.data.models import Schedule
from src.services.claims import ClaimDocument
from src.services.context import AppContext, CurrentUser
from src.services.errors import AuthorizationError, DuplicateError
from src.services.registration import ProviderRegistration, register_provider, validate_registration

LICENSE = ClaimDocument("license.pdf", b"%PDF-1.4", "application/pdf")


def _form(**overrides):
    data = dict(
        business_name="  Cabinet Dr. Haddad ",
        provider_type="Doctor",
        phone="+213 48 55 66 77",
        address="12 Boulevard de la Republique",
        city="Sidi Bel Abbes",
        wheelchair_accessible=True,
        consultation_price=200,
        schedules=[Schedule(1, "08:00", "16:00")],
    )
    data.update(overrides)
    return ProviderRegistration(**data)


def test_registration_creates_owned_pending_listing(make_ctx, storage):
    ctx = make_ctx("user-7", "citizen")

    result = register_provider(ctx, _form(), LICENSE)

    provider = ctx.backend.get_provider(result.provider.id)
    assert provider.business_name == "Cabinet Dr. Haddad"
    assert provider.provider_type == "doctor"
    assert provider.user_id == "user-7"
    assert provider.verification_status == "pending"
    assert provider.is_preloaded is False
    assert provider.is_claimed is False
    assert provider.accessibility_features == ["wheelchair"]
    assert provider.schedules == [Schedule(1, "08:00", "16:00")]
    assert result.warnings == []
    assert result.verification_request.document_urls == ["memory://licenses/user-7/license.pdf"]
    assert ctx.backend.get_user_role("user-7") == "provider"


def test_registration_without_license_skips_verification_request(make_ctx):
    ctx = make_ctx("user-7")

    result = register_provider(ctx, _form())

    assert result.verification_request is None
    assert ctx.backend.list_verification_requests(provider_id=result.provider.id) == []


def test_upload_failure_becomes_warning(backend):
    storage = MagicMock()
    storage.upload.side_effect = ConnectionError("network unreachable")
    ctx = AppContext(backend=backend, storage=storage, user=CurrentUser(id="user-8"))

    result = register_provider(ctx, _form(), LICENSE)

    assert backend.get_provider(result.provider.id) is not None
    assert result.verification_request is None
    assert len(result.warnings) == 1
    assert "could not be uploaded" in result.warnings[0]


def test_one_listing_per_account(make_ctx):
    ctx = make_ctx("user-7")
    register_provider(ctx, _form())

    with pytest.raises(DuplicateError):
        register_provider(ctx, _form(business_name="Second practice"))


def test_admin_keeps_admin_role(admin_ctx):
    register_provider(admin_ctx, _form())
    assert admin_ctx.backend.get_user_role("admin-1") is None


def test_anonymous_cannot_register(make_ctx):
    with pytest.raises(AuthorizationError):
        register_provider(make_ctx(None), _form())


def test_invalid_form_creates_nothing(make_ctx, storage):
    ctx = make_ctx("user-7")

    with pytest.raises(ValueError):
        register_provider(ctx, _form(phone="abc", provider_type="wizard"), LICENSE)

    assert ctx.backend.list_providers() == []
    assert storage.files == {}


def test_invalid_license_file_rejected(make_ctx):
    with pytest.raises(ValueError):
        register_provider(make_ctx("user-7"), _form(), ClaimDocument("license.exe", b"MZ", "application/octet-stream"))


def test_validate_registration_collects_all_problems():
    errors = validate_registration(_form(business_name="", phone="", email="bad", website="example.com"))
    assert len(errors) == 4


def test_price_schedule_and_coordinates_are_checked():
    errors = validate_registration(
        _form(consultation_price=-5, schedules=[Schedule(9, "08:00", "16:00")], latitude=120.0, longitude=3.0)
    )

    assert len(errors) == 3
    assert any("negative" in e for e in errors)
    assert any("Latitude" in e for e in errors)


def test_registration_keeps_coordinates_and_insurance(make_ctx):
    ctx = make_ctx("user-8")
    result = register_provider(ctx, _form(latitude=35.19, longitude=-0.63, accepts_insurance=True))

    stored = ctx.backend.get_provider(result.provider.id)
    assert (stored.latitude, stored.longitude) == (35.19, -0.63)
    assert stored.accepts_insurance is True
