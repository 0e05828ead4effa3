"""Test suite for shared I/O utilities.

Tests verify that:
- Import file format detection works correctly
- Provider records map to a search DataFrame and back
- The bundled sample directory loads
- Provider contact sheets export as .docx
"""
from io import BytesIO

import pandas as pd
import pytest
from docx import Document

from src.data.io_utils import (
    detect_file_format,
    frame_to_providers,
    frame_to_schedules,
    load_sample_providers,
    providers_to_frame,
    schedules_to_frame,
)
from src.data.models import Schedule
from src.utils.io_utils import format_accessibility, format_phone_number, get_provider_card_bytes, sanitize_filename


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("providers.csv", "csv"),
        ("PROVIDERS.CSV", "csv"),
        ("export.json", "json"),
        ("providers.xlsx", None),
        ("", None),
        (None, None),
    ],
)
def test_detect_file_format(filename, expected):
    assert detect_file_format(filename) == expected


def test_providers_to_frame_uses_positional_index(make_provider):
    providers = [make_provider(id="a"), make_provider(id="b"), make_provider(id="c")]

    df = providers_to_frame(providers)

    assert list(df.index) == [0, 1, 2]
    assert list(df["id"]) == ["a", "b", "c"]
    assert "accessibility_features" in df.columns
    assert [p.id for p in frame_to_providers(df.iloc[[2, 0]], providers)] == ["c", "a"]


def test_providers_to_frame_empty():
    df = providers_to_frame([])
    assert df.empty
    assert "business_name" in df.columns


def test_load_sample_providers():
    providers = load_sample_providers()

    assert len(providers) == 5
    assert {p.provider_type for p in providers} == {"doctor", "clinic", "hospital", "pharmacy", "laboratory"}
    assert all(p.id.startswith("demo-") for p in providers)
    assert all(p.created_at is not None and p.created_at.tzinfo is not None for p in providers)


def test_load_sample_providers_missing_file(tmp_path):
    assert load_sample_providers(tmp_path / "nope.json") == []


class TestProviderCard:
    def test_card_is_a_docx(self, make_provider):
        data = get_provider_card_bytes(make_provider(business_name="Cabinet X"))
        assert data[:2] == b"PK"

    def test_card_contents(self, make_provider):
        provider = make_provider(
            business_name="Cabinet X",
            specialty="Cardiologie",
            verification_status="verified",
            accessibility_features=["wheelchair", "sign_language"],
            is_emergency=True,
            email="contact@cabinet.dz",
        )

        doc = Document(BytesIO(get_provider_card_bytes(provider)))
        text = "\n".join(p.text for p in doc.paragraphs)

        assert "Cabinet X" in text
        assert "Doctor - Cardiologie" in text
        assert "Verified provider" in text
        assert "Phone: +213 48 50 10 20" in text
        assert "Email: contact@cabinet.dz" in text
        assert "Emergency services available" in text
        assert "Accessibility: Wheelchair access, Sign language" in text
        assert "Website:" not in text


def test_format_phone_number():
    assert format_phone_number(" +213  48 50\t10 20 ") == "+213 48 50 10 20"
    assert format_phone_number(550123456.0) == "550123456"
    assert format_phone_number(None) is None
    assert format_phone_number("   ") is None


def test_format_accessibility_keeps_unknown_tags():
    assert format_accessibility(["parking", "valet"]) == "Parking, valet"
    assert format_accessibility(None) == ""


def test_sanitize_filename():
    assert sanitize_filename("Clinique El-Amel (Oran)") == "Clinique_ElAmel_Oran"


def test_schedules_table_uses_day_names():
    df = schedules_to_frame([Schedule(0, "08:00", "12:00"), Schedule(6, "09:00", "13:00", False)])

    assert list(df["day"]) == ["Sunday", "Saturday"]
    assert frame_to_schedules(df) == [Schedule(0, "08:00", "12:00"), Schedule(6, "09:00", "13:00", False)]


def test_edited_schedule_rows():
    df = pd.DataFrame(
        [
            {"day": "monday", "start_time": " 08:00", "end_time": "16:00", "is_active": None},
            {"day": None, "start_time": "09:00", "end_time": "10:00", "is_active": True},
        ]
    )

    assert frame_to_schedules(df) == [Schedule(1, "08:00", "16:00", True)]
    with pytest.raises(ValueError, match="Funday"):
        frame_to_schedules(pd.DataFrame([{"day": "Funday", "start_time": "08:00", "end_time": "09:00"}]))


def test_empty_schedule_table():
    assert list(schedules_to_frame([]).columns) == ["day", "start_time", "end_time", "is_active"]
    assert frame_to_schedules(schedules_to_frame([])) == []
