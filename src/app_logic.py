import logging
from datetime import datetime
from typing import List, Optional, Tuple

import pandas as pd
import streamlit as st

from src.backends.base import DirectoryBackend
from src.backends.document_backend import DocumentBackend
from src.backends.document_store import InMemoryDocumentStore, S3DocumentStore
from src.backends.sql_backend import SqlBackend
from src.data.io_utils import frame_to_providers, load_sample_providers, providers_to_frame
from src.data.models import PROVIDER_TYPES, Provider, UserRole
from src.services.context import AppContext, CurrentUser
from src.utils.config import get_app_config, get_backend_config
from src.utils.filters import FilterState, apply_filters
from src.utils.geocoding import geocode_location_with_cache
from src.utils.scoring import SortOption, calculate_distances, sort_providers
from src.utils.storage import get_file_storage

logger = logging.getLogger(__name__)

__all__ = [
    "build_backend",
    "get_backend",
    "get_app_context",
    "load_provider_records",
    "refresh_directory_cache",
    "resolve_user_location",
    "search_directory",
    "search_providers",
    "get_category_options",
    "session_role",
    "visible_results",
]

SESSION_USER_KEY = "current_user"


def build_backend(config: Optional[dict] = None) -> DirectoryBackend:
    """Create the backend described by ``config`` (defaults to ``get_backend_config()``)."""
    config = config or get_backend_config()
    kind = config.get("kind", "document")
    if kind == "sql":
        logger.info("Using SQL backend")
        return SqlBackend(config["database_url"])
    if kind != "document":
        raise ValueError(f"Unknown backend kind: {kind}")

    if config.get("document_store") == "s3":
        store = S3DocumentStore()
        if not store.is_configured():
            raise RuntimeError("Document store is set to S3 but S3 is not configured")
        logger.info("Using S3 document store")
        return DocumentBackend(store)

    backend = DocumentBackend(InMemoryDocumentStore())
    if config.get("offline_mode", True):
        backend.seed_providers(load_sample_providers())
    logger.info("Using in-memory document store")
    return backend


@st.cache_resource
def get_backend() -> DirectoryBackend:
    return build_backend()


def get_app_context() -> AppContext:
    """Context for the current script run: shared backend, storage and the session's user."""
    user = st.session_state.get(SESSION_USER_KEY)
    if user is not None and not isinstance(user, CurrentUser):
        user = None
    return AppContext(backend=get_backend(), storage=get_file_storage(), user=user)


def session_role(backend: DirectoryBackend, user_id: str, current: Optional[CurrentUser] = None) -> str:
    """Role to act as for ``user_id``: the session's current choice, else the stored role, else citizen."""
    if current is not None and current.id == user_id:
        return current.role
    return backend.get_user_role(user_id) or UserRole.CITIZEN.value


def visible_results(results: pd.DataFrame, shown: int, page_size: int) -> Tuple[pd.DataFrame, int]:
    """First ``shown`` rows (at least one page) and how many remain hidden."""
    shown = max(int(shown or 0), int(page_size))
    return results.head(shown), max(len(results) - shown, 0)


@st.cache_data(ttl=300)
def load_provider_records(_backend: DirectoryBackend, backend_name: str) -> List[Provider]:
    """All providers from the backend. ``backend_name`` keys the cache."""
    providers = _backend.list_providers()
    logger.info(f"Loaded {len(providers)} providers from {backend_name} backend")
    return providers


def refresh_directory_cache() -> None:
    """Drop cached provider lists after a write."""
    load_provider_records.clear()


def resolve_user_location(location: str) -> Tuple[Tuple[float, float], bool]:
    """Coordinates for the location text, falling back to the default map centre.

    Returns:
        ((lat, lon), geocoded) where ``geocoded`` is False when the fallback was used
    """
    if location and location.strip():
        coords = geocode_location_with_cache(location)
        if coords:
            return coords, True
    app_config = get_app_config()
    return (float(app_config["default_latitude"]), float(app_config["default_longitude"])), False


def search_directory(
    provider_df: pd.DataFrame,
    filters: FilterState,
    query: str = "",
    sort_by: str = SortOption.RELEVANCE.value,
    user_location: Optional[Tuple[float, float]] = None,
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """Filter, measure and sort a provider frame.

    Adds a ``distance_km`` column when ``user_location`` is given.
    """
    if provider_df is None or provider_df.empty:
        return provider_df

    result = apply_filters(provider_df, filters, query, now=now)
    if user_location is not None and not result.empty:
        result = result.copy()
        result["distance_km"] = calculate_distances(user_location[0], user_location[1], result)
    return sort_providers(result, sort_by)


def search_providers(
    providers: List[Provider],
    filters: FilterState,
    query: str = "",
    sort_by: str = SortOption.RELEVANCE.value,
    user_location: Optional[Tuple[float, float]] = None,
    now: Optional[datetime] = None,
) -> List[Provider]:
    """Same as ``search_directory`` but on Provider records."""
    if not providers:
        SortOption(sort_by)
        return []
    df = providers_to_frame(providers)
    return frame_to_providers(search_directory(df, filters, query, sort_by, user_location, now), providers)


def get_category_options() -> List[str]:
    return list(PROVIDER_TYPES)
