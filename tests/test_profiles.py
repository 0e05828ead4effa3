"""Tests for editing an existing listing."""
import pytest

from src.data.models import Schedule
from src.services.errors import AuthorizationError, NotFoundError
from src.services.profiles import update_provider_profile


@pytest.fixture
def owned(backend, make_provider):
    return backend.create_provider(make_provider(user_id="owner-1", is_preloaded=False, is_claimed=False))


@pytest.fixture
def owner_ctx(make_ctx):
    return make_ctx("owner-1", "provider")


def test_owner_edits_contact_details(owner_ctx, owned):
    updated = update_provider_profile(
        owner_ctx,
        owned.id,
        {
            "business_name": "  Cabinet Renamed ",
            "phone": "+213 41 00 00 00",
            "email": "new@cabinet.dz",
            "address": "5 Rue Larbi Ben M'hidi",
            "city": "Oran",
            "description": "Pediatrics",
            "website": "https://cabinet.dz",
            "home_visit_available": True,
        },
    )

    stored = owner_ctx.backend.get_provider(owned.id)
    assert updated == stored
    assert stored.business_name == "Cabinet Renamed"
    assert stored.city == "Oran"
    assert stored.website == "https://cabinet.dz"
    assert stored.home_visit_available is True
    assert stored.updated_at is not None


def test_owner_edits_search_fields(owner_ctx, owned):
    update_provider_profile(
        owner_ctx,
        owned.id,
        {
            "consultation_price": "1500",
            "accepts_insurance": True,
            "accessibility_features": ["wheelchair", "ramp", "wheelchair", ""],
            "schedules": [Schedule(0, "08:00", "12:00"), {"dayOfWeek": 2, "startTime": "14:00", "endTime": "18:00"}],
        },
    )

    stored = owner_ctx.backend.get_provider(owned.id)
    assert stored.consultation_price == 1500.0
    assert stored.accepts_insurance is True
    assert stored.accessibility_features == ["wheelchair", "ramp"]
    assert stored.schedules == [Schedule(0, "08:00", "12:00"), Schedule(2, "14:00", "18:00")]


def test_blank_optional_text_clears_the_field(owner_ctx, backend, make_provider):
    provider = backend.create_provider(make_provider(user_id="owner-1", email="old@cabinet.dz"))

    update_provider_profile(owner_ctx, provider.id, {"email": "  "})

    assert backend.get_provider(provider.id).email is None


def test_coordinates_are_validated_together(owner_ctx, owned):
    with pytest.raises(ValueError, match="Latitude"):
        update_provider_profile(owner_ctx, owned.id, {"latitude": 91, "longitude": 3})
    with pytest.raises(ValueError, match="numeric"):
        update_provider_profile(owner_ctx, owned.id, {"latitude": 35.2})

    update_provider_profile(owner_ctx, owned.id, {"latitude": 35.2, "longitude": -0.6})
    stored = owner_ctx.backend.get_provider(owned.id)
    assert (stored.latitude, stored.longitude) == (35.2, -0.6)


@pytest.mark.parametrize(
    "changes",
    [
        {"business_name": ""},
        {"phone": "abc"},
        {"email": "not-an-email"},
        {"website": "cabinet.dz"},
        {"provider_type": "wizard"},
        {"accessibility_features": ["wheelchair", "jetpack"]},
        {"consultation_price": -1},
        {"consultation_price": "cheap"},
        {"schedules": [Schedule(7, "08:00", "12:00")]},
        {"schedules": [Schedule(1, "18:00", "08:00")]},
    ],
)
def test_invalid_values_change_nothing(owner_ctx, owned, changes):
    before = owner_ctx.backend.get_provider(owned.id)

    with pytest.raises(ValueError):
        update_provider_profile(owner_ctx, owned.id, changes)

    assert owner_ctx.backend.get_provider(owned.id) == before


@pytest.mark.parametrize("field", ["is_preloaded", "is_claimed", "verification_status", "user_id", "avg_rating"])
def test_protected_fields_are_refused(owner_ctx, owned, field):
    with pytest.raises(AuthorizationError, match=field):
        update_provider_profile(owner_ctx, owned.id, {field: "verified", "city": "Oran"})

    assert owner_ctx.backend.get_provider(owned.id).city == owned.city


def test_unknown_field_is_rejected(owner_ctx, owned):
    with pytest.raises(ValueError, match="favourite_colour"):
        update_provider_profile(owner_ctx, owned.id, {"favourite_colour": "blue"})


def test_other_accounts_cannot_edit(make_ctx, owned):
    with pytest.raises(AuthorizationError):
        update_provider_profile(make_ctx("owner-2", "provider"), owned.id, {"city": "Oran"})
    with pytest.raises(AuthorizationError):
        update_provider_profile(make_ctx(None), owned.id, {"city": "Oran"})


def test_unowned_preloaded_listing_is_not_editable_by_providers(make_ctx, backend, make_provider):
    listing = backend.create_provider(make_provider(user_id="", is_preloaded=True))

    with pytest.raises(AuthorizationError):
        update_provider_profile(make_ctx("owner-1", "provider"), listing.id, {"city": "Oran"})


def test_admin_edit_is_audited(admin_ctx, backend, owned):
    update_provider_profile(admin_ctx, owned.id, {"city": "Tlemcen", "phone": "+213 43 00 00 00"})

    assert backend.get_provider(owned.id).city == "Tlemcen"
    log = backend.list_admin_logs("provider")[0]
    assert (log.action, log.entity_id, log.admin_id) == ("update", owned.id, "admin-1")
    assert log.changes == {"fields": ["city", "phone"]}


def test_owner_edit_is_not_audited(owner_ctx, backend, owned):
    update_provider_profile(owner_ctx, owned.id, {"city": "Oran"})
    assert backend.list_admin_logs() == []


def test_empty_changes_return_listing_unchanged(owner_ctx, owned):
    before = owner_ctx.backend.get_provider(owned.id)
    assert update_provider_profile(owner_ctx, owned.id, {}) == before


def test_missing_listing(owner_ctx):
    with pytest.raises(NotFoundError):
        update_provider_profile(owner_ctx, "missing", {"city": "Oran"})
