"""Tests for backend selection and search wiring in app_logic."""
from unittest.mock import patch

import pandas as pd
import pytest

from src.app_logic import build_backend, get_category_options, resolve_user_location, session_role, visible_results
from src.backends.document_backend import DocumentBackend
from src.backends.sql_backend import SqlBackend
from src.services.context import CurrentUser


def test_memory_backend_is_seeded_in_offline_mode():
    backend = build_backend({"kind": "document", "document_store": "memory", "offline_mode": True})

    assert isinstance(backend, DocumentBackend)
    assert len(backend.list_providers()) == 5


def test_memory_backend_empty_when_online():
    backend = build_backend({"kind": "document", "document_store": "memory", "offline_mode": False})
    assert backend.list_providers() == []


def test_sql_backend():
    backend = build_backend({"kind": "sql", "database_url": "sqlite:///:memory:"})
    assert isinstance(backend, SqlBackend)


def test_unknown_backend_kind():
    with pytest.raises(ValueError):
        build_backend({"kind": "mongo"})


def test_s3_document_store_requires_configuration(disable_s3):
    with pytest.raises(RuntimeError):
        build_backend({"kind": "document", "document_store": "s3"})


@patch("src.app_logic.geocode_location_with_cache")
def test_resolve_user_location_geocodes_text(mock_geocode):
    mock_geocode.return_value = (35.6971, -0.6308)

    coords, geocoded = resolve_user_location("Oran")

    assert coords == (35.6971, -0.6308)
    assert geocoded is True
    mock_geocode.assert_called_once_with("Oran")


@patch("src.app_logic.get_app_config")
@patch("src.app_logic.geocode_location_with_cache")
def test_resolve_user_location_falls_back_to_default_centre(mock_geocode, mock_app_config):
    mock_geocode.return_value = None
    mock_app_config.return_value = {"default_latitude": 35.1903, "default_longitude": -0.6308}

    assert resolve_user_location("Nowhere at all") == ((35.1903, -0.6308), False)
    assert resolve_user_location("  ") == ((35.1903, -0.6308), False)
    mock_geocode.assert_called_once_with("Nowhere at all")


def test_category_options():
    assert get_category_options() == ["doctor", "clinic", "hospital", "pharmacy", "laboratory"]


def test_session_role_prefers_current_choice_then_stored_role():
    backend = DocumentBackend()
    backend.set_user_role("doc-1", "provider")

    assert session_role(backend, "doc-1") == "provider"
    assert session_role(backend, "doc-1", CurrentUser(id="doc-1", role="admin")) == "admin"
    assert session_role(backend, "doc-1", CurrentUser(id="someone-else", role="admin")) == "provider"
    assert session_role(backend, "new-user") == "citizen"


def test_visible_results_pages_through_the_frame():
    results = pd.DataFrame({"id": [f"p{n}" for n in range(25)]})

    page, remaining = visible_results(results, 0, 10)
    assert list(page["id"]) == [f"p{n}" for n in range(10)]
    assert remaining == 15

    page, remaining = visible_results(results, 30, 10)
    assert len(page) == 25
    assert remaining == 0
