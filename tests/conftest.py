"""Pytest configuration helpers.

Ensure the project root is on sys.path so tests can import the `src` package
when pytest is invoked from the repository root or an isolated test runner.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest


def pytest_configure():
    # Insert the repository root (parent of the tests directory) at the front
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


class RecordingStorage:
    """FileStorage stand-in that keeps uploads in a dict."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.files = {}

    def upload(self, folder, filename, data, content_type=None):
        if self.fail:
            raise ConnectionError("network unreachable")
        key = f"memory://{folder}/{filename}"
        self.files[key] = data
        return key

    def delete(self, key):
        self.files.pop(key, None)


@pytest.fixture
def make_provider():
    """Factory for Provider records with sensible defaults."""
    from src.data.models import Provider

    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "id": f"p{counter['n']}",
            "business_name": f"Provider {counter['n']}",
            "provider_type": "doctor",
            "phone": "+213 48 50 10 20",
            "address": "1 Rue Principale, Sidi Bel Abbes",
            "created_at": datetime(2024, 1, counter["n"] % 28 + 1, tzinfo=timezone.utc),
        }
        data.update(overrides)
        return Provider(**data)

    return _make


@pytest.fixture(params=["document", "sql"])
def backend(request):
    """Each backend implementation, empty."""
    if request.param == "document":
        from src.backends.document_backend import DocumentBackend

        return DocumentBackend()
    from src.backends.sql_backend import SqlBackend

    return SqlBackend("sqlite:///:memory:")


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def make_ctx(backend, storage):
    """Build an AppContext on the shared backend for a given user id and role."""
    from src.services.context import AppContext, CurrentUser

    def _make(user_id=None, role="citizen"):
        user = CurrentUser(id=user_id, role=role) if user_id else None
        return AppContext(backend=backend, storage=storage, user=user)

    return _make


@pytest.fixture
def admin_ctx(make_ctx):
    return make_ctx("admin-1", "admin")


@pytest.fixture
def disable_s3(monkeypatch):
    """Pretend S3 is not configured."""

    def mock_get_api_config(api_name):
        if api_name == "s3":
            return {
                "aws_access_key_id": "",
                "aws_secret_access_key": "",
                "bucket_name": "",
                "region_name": "us-east-1",
                "documents_prefix": "directory",
                "uploads_prefix": "uploads",
            }
        return {}

    monkeypatch.setattr("src.utils.config.get_api_config", mock_get_api_config)
    monkeypatch.setattr("src.utils.config.is_api_enabled", lambda api_name: False)
