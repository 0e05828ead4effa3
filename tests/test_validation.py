"""Test suite for validation utilities.

Tests verify provider field, coordinate and uploaded document validation.
"""
import pytest

from src.utils.validation import (
    MAX_DOCUMENT_BYTES,
    validate_accessibility_features,
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


class TestValidateRequired:
    def test_present_value(self):
        valid, _ = validate_required("Cabinet X", "Business name")
        assert valid is True

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_value(self, value):
        valid, msg = validate_required(value, "Business name")
        assert valid is False
        assert msg == "Business name is required"


class TestValidateCoordinates:
    """Tests for coordinate validation."""

    def test_valid_coordinates(self):
        valid, msg = validate_coordinates(35.1903, -0.6308)
        assert valid is True, "Valid coordinates should pass"
        assert msg == "Valid coordinates"

    def test_latitude_out_of_range(self):
        valid, msg = validate_coordinates(91.0, 0.0)
        assert valid is False
        assert "Latitude must be between -90 and 90" in msg

    def test_longitude_out_of_range(self):
        valid, msg = validate_coordinates(35.0, -181.0)
        assert valid is False
        assert "Longitude must be between -180 and 180" in msg

    def test_boundaries_are_valid(self):
        assert validate_coordinates(90, 180)[0] is True
        assert validate_coordinates(-90, -180)[0] is True

    def test_non_numeric(self):
        valid, msg = validate_coordinates("35", -0.6)
        assert valid is False
        assert "numeric" in msg


class TestValidatePhoneNumber:
    """Tests for phone number validation."""

    @pytest.mark.parametrize("phone", ["+213 48 50 10 20", "048-50-10-20", "(048) 501020", "0550123456"])
    def test_valid_formats(self, phone):
        valid, _ = validate_phone_number(phone)
        assert valid is True, f"{phone} should be valid"

    def test_empty_phone_is_required(self):
        valid, msg = validate_phone_number("")
        assert valid is False
        assert "required" in msg

    @pytest.mark.parametrize("phone", ["123", "phone: 0550", "+213-abc-1234"])
    def test_invalid_formats(self, phone):
        valid, msg = validate_phone_number(phone)
        assert valid is False
        assert "Invalid phone number" in msg


class TestOptionalContactFields:
    def test_email_optional(self):
        assert validate_email(None)[0] is True
        assert validate_email("")[0] is True

    def test_email_format(self):
        assert validate_email("contact@cabinet.dz")[0] is True
        assert validate_email("not an email")[0] is False
        assert validate_email("a@b")[0] is False

    def test_website_optional(self):
        assert validate_website(None)[0] is True

    def test_website_needs_scheme(self):
        assert validate_website("https://cabinet.dz")[0] is True
        valid, msg = validate_website("cabinet.dz")
        assert valid is False
        assert "http" in msg


class TestValidateProviderType:
    @pytest.mark.parametrize("provider_type", ["doctor", "clinic", "hospital", "pharmacy", "laboratory", " Doctor "])
    def test_known_types(self, provider_type):
        assert validate_provider_type(provider_type)[0] is True

    def test_unknown_type(self):
        valid, msg = validate_provider_type("wizard")
        assert valid is False
        assert "Invalid provider type" in msg

    def test_missing_type(self):
        valid, msg = validate_provider_type("")
        assert valid is False
        assert "required" in msg


def test_accessibility_features():
    assert validate_accessibility_features(["wheelchair", "braille"])[0] is True
    valid, msg = validate_accessibility_features(["wheelchair", "jetpack"])
    assert valid is False
    assert "jetpack" in msg


class TestValidateDocument:
    def test_pdf_by_content_type(self):
        assert validate_document("license.pdf", 1024, "application/pdf")[0] is True

    def test_extension_used_without_content_type(self):
        assert validate_document("scan.PNG", 1024)[0] is True
        assert validate_document("notes.txt", 1024)[0] is False

    def test_content_type_wins_over_extension(self):
        valid, msg = validate_document("license.pdf", 1024, "text/plain")
        assert valid is False
        assert "unsupported file type" in msg

    def test_size_limit(self):
        assert validate_document("big.pdf", MAX_DOCUMENT_BYTES, "application/pdf")[0] is True
        valid, msg = validate_document("big.pdf", MAX_DOCUMENT_BYTES + 1, "application/pdf")
        assert valid is False
        assert "10 MB" in msg


@pytest.mark.parametrize(
    "price, expected",
    [(None, True), (0, True), (1500.5, True), (-1, False), ("100", False), (float("nan"), False), (True, False)],
)
def test_validate_price(price, expected):
    assert validate_price(price)[0] is expected


class TestValidateSchedule:
    def test_valid_window(self):
        assert validate_schedule(0, "08:00", "12:30") == (True, "Valid schedule")

    @pytest.mark.parametrize("day", [-1, 7, "1", None])
    def test_day_out_of_range(self, day):
        valid, msg = validate_schedule(day, "08:00", "12:00")
        assert valid is False
        assert "Sunday" in msg

    @pytest.mark.parametrize("start, end", [("8:00", "12:00"), ("08:00", "24:00"), ("", "12:00")])
    def test_malformed_time(self, start, end):
        valid, msg = validate_schedule(1, start, end)
        assert valid is False
        assert "HH:MM" in msg

    def test_closing_before_opening(self):
        valid, msg = validate_schedule(1, "18:00", "08:00")
        assert valid is False
        assert "before" in msg
