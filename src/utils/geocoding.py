"""Geocoding helpers with caching and rate limiting."""
import logging
from typing import Optional, Tuple

import streamlit as st
from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeocoderUnavailable
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from src.utils.config import get_api_config

logger = logging.getLogger(__name__)

# Cached factory
_RATE_LIMITED_GEOCODER = None


def _get_rate_limited_geocoder():
    global _RATE_LIMITED_GEOCODER
    if _RATE_LIMITED_GEOCODER is not None:
        return _RATE_LIMITED_GEOCODER

    config = get_api_config("geocoding")
    geolocator = Nominatim(user_agent=config["nominatim_user_agent"])
    rate_limited = RateLimiter(
        geolocator.geocode,
        min_delay_seconds=float(config["rate_limit_delay"]),
        max_retries=int(config["max_retries"]),
    )
    timeout = int(config["request_timeout"])

    def geocode_fn(q):
        return rate_limited(q, timeout=timeout)

    _RATE_LIMITED_GEOCODER = geocode_fn
    return _RATE_LIMITED_GEOCODER


def build_geocode_query(location: str) -> str:
    """Append the configured country unless the text already names it."""
    country = get_api_config("geocoding").get("country_hint") or ""
    location = location.strip()
    if country and country.lower() not in location.lower():
        return f"{location}, {country}"
    return location


@st.cache_data(ttl=3600)
def geocode_location_with_cache(location: str) -> Optional[Tuple[float, float]]:
    """Coordinates for a free-text place (city, district or address), or None."""
    if not location or not location.strip():
        return None
    try:
        geocode_fn = _get_rate_limited_geocoder()
        result = geocode_fn(build_geocode_query(location))
        if result:
            return result.latitude, result.longitude
        return None
    except (GeocoderTimedOut, GeocoderServiceError, GeocoderUnavailable) as e:
        logger.warning(f"Geocoding failed for '{location}': {e}")
        st.warning(handle_geocoding_error(location, e))
        return None


def handle_geocoding_error(location: str, error: Exception) -> str:
    et = str(error).lower()
    if "timeout" in et or isinstance(error, GeocoderTimedOut):
        return "⏱️ **Geocoding Timeout**: The location lookup service is taking too long. Distances use the default map centre."
    if "rate" in et or "limit" in et:
        return "🚦 **Rate Limited**: Too many location lookups. Please wait a moment and try again."
    if "unavailable" in et or "service" in et or isinstance(error, GeocoderServiceError):
        return "🔌 **Service Unavailable**: The location lookup service is temporarily unavailable."
    if "network" in et or "connection" in et:
        return "🌐 **Network Error**: Cannot connect to the location lookup service."
    return f"❌ **Geocoding Error**: Unable to find '{location}'. (Error: {type(error).__name__})"
