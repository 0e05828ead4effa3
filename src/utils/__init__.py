"""Utilities package for the provider directory.

Re-export stable helper functions from the utility modules.
"""
# flake8: noqa: F401

from .filters import FilterState, active_filter_count, apply_filters, clear_filters
from .geocoding import geocode_location_with_cache, handle_geocoding_error
from .io_utils import get_provider_card_bytes, handle_streamlit_error, sanitize_filename
from .scoring import SortOption, calculate_distances, sort_providers
from .url_state import deserialize_filters, serialize_filters
from .validation import validate_coordinates, validate_email, validate_phone_number

__all__ = [
    "FilterState",
    "SortOption",
    "active_filter_count",
    "apply_filters",
    "calculate_distances",
    "clear_filters",
    "deserialize_filters",
    "geocode_location_with_cache",
    "get_provider_card_bytes",
    "handle_geocoding_error",
    "handle_streamlit_error",
    "sanitize_filename",
    "serialize_filters",
    "sort_providers",
    "validate_coordinates",
    "validate_email",
    "validate_phone_number",
]
