"""Round-trip search filters through URL query parameters.

The Search page mirrors its sidebar into ``st.query_params`` so a search can
be bookmarked or shared. Only fields that differ from their defaults are
written, which keeps URLs short.
"""
import logging
import math
from typing import Iterable, List, Mapping, Optional, Tuple

from src.utils.filters import (
    AVAILABILITY_OPTIONS,
    DEFAULT_AVAILABILITY,
    DEFAULT_PRICE_RANGE,
    DEFAULT_RADIUS,
    FilterState,
)

logger = logging.getLogger(__name__)

BOOLEAN_PARAMS = {
    "verified_only": "verifiedOnly",
    "emergency_services": "emergencyServices",
    "wheelchair_accessible": "wheelchairAccessible",
    "insurance_accepted": "insuranceAccepted",
    "home_visit_available": "homeVisitAvailable",
}


def _format_number(value: float) -> str:
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _parse_number(raw: Optional[str], default: float = 0) -> float:
    """Parse a numeric parameter; anything unparseable (or NaN/inf) becomes 0."""
    if raw is None:
        return default
    try:
        number = float(raw)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring malformed numeric parameter: {raw!r}")
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return number


def _join_list(values: Iterable[str]) -> str:
    return ",".join(v for v in values if v and "," not in v)


def _split_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [token for token in raw.split(",") if token]


def _single(params: Mapping, key: str) -> Optional[str]:
    value = params.get(key)
    if isinstance(value, (list, tuple)):
        return value[-1] if value else None
    return value


def serialize_filters(filters: FilterState, query: str = "") -> dict:
    """Encode a FilterState (and optional search text) as query parameters."""
    params = {}
    if query:
        params["q"] = query
    categories = _join_list(filters.categories)
    if categories:
        params["categories"] = categories
    if filters.location:
        params["location"] = filters.location
    if filters.radius != DEFAULT_RADIUS:
        params["radius"] = _format_number(filters.radius)
    if filters.availability != DEFAULT_AVAILABILITY:
        params["availability"] = filters.availability
    if filters.min_rating > 0:
        params["minRating"] = _format_number(filters.min_rating)
    for attr, key in BOOLEAN_PARAMS.items():
        if getattr(filters, attr):
            params[key] = "true"
    if tuple(filters.price_range) != tuple(DEFAULT_PRICE_RANGE):
        low, high = filters.price_range
        params["priceRange"] = f"{_format_number(low)},{_format_number(high)}"
    features = _join_list(filters.accessibility_features)
    if features:
        params["accessibilityFeatures"] = features
    return params


def _parse_price_range(raw: Optional[str]) -> Tuple[float, float]:
    if not raw:
        return DEFAULT_PRICE_RANGE
    parts = raw.split(",")
    if len(parts) != 2:
        return DEFAULT_PRICE_RANGE
    low, high = _parse_number(parts[0]), _parse_number(parts[1])
    if low > high:
        low, high = high, low
    return (low, high)


def deserialize_filters(params: Mapping) -> FilterState:
    """Rebuild a FilterState from query parameters; absent keys take defaults."""
    availability = _single(params, "availability") or DEFAULT_AVAILABILITY
    if availability not in AVAILABILITY_OPTIONS:
        availability = DEFAULT_AVAILABILITY

    radius_raw = _single(params, "radius")
    radius = int(_parse_number(radius_raw, DEFAULT_RADIUS))

    price_low, price_high = _parse_price_range(_single(params, "priceRange"))

    filters = FilterState(
        categories=_split_list(_single(params, "categories")),
        location=_single(params, "location") or "",
        radius=radius,
        availability=availability,
        min_rating=_parse_number(_single(params, "minRating"), 0),
        price_range=(price_low, price_high),
        accessibility_features=_split_list(_single(params, "accessibilityFeatures")),
    )
    for attr, key in BOOLEAN_PARAMS.items():
        setattr(filters, attr, _single(params, key) == "true")
    return filters


def query_from_params(params: Mapping) -> str:
    return _single(params, "q") or ""
