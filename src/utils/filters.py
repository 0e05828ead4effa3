"""Search filters for the provider directory.

``FilterState`` is the value object behind the search sidebar. The helpers
below each narrow a provider DataFrame on one dimension and return a copy;
``apply_filters`` chains them, so every active criterion must hold (AND).
Inactive criteria leave the frame untouched, and row order is never changed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

import pandas as pd

DEFAULT_RADIUS = 25
DEFAULT_AVAILABILITY = "any"
DEFAULT_MIN_RATING = 0.0
DEFAULT_PRICE_RANGE: Tuple[float, float] = (0, 500)
AVAILABILITY_OPTIONS = ("any", "today", "week", "now")

QUERY_COLUMNS = ("business_name", "specialty", "address")


@dataclass
class FilterState:
    categories: List[str] = field(default_factory=list)
    location: str = ""
    radius: int = DEFAULT_RADIUS
    availability: str = DEFAULT_AVAILABILITY
    min_rating: float = DEFAULT_MIN_RATING
    verified_only: bool = False
    emergency_services: bool = False
    wheelchair_accessible: bool = False
    insurance_accepted: bool = False
    home_visit_available: bool = False
    price_range: Tuple[float, float] = DEFAULT_PRICE_RANGE
    accessibility_features: List[str] = field(default_factory=list)


def clear_filters() -> FilterState:
    return FilterState()


def active_filter_count(filters: FilterState) -> int:
    """Number of filter groups that differ from their defaults (sidebar badge)."""
    checks = [
        bool(filters.categories),
        bool(filters.location),
        filters.radius != DEFAULT_RADIUS,
        filters.availability != DEFAULT_AVAILABILITY,
        filters.min_rating > 0,
        filters.verified_only,
        filters.emergency_services,
        filters.wheelchair_accessible,
        filters.insurance_accepted,
        filters.home_visit_available,
        tuple(filters.price_range) != tuple(DEFAULT_PRICE_RANGE),
        bool(filters.accessibility_features),
    ]
    return sum(checks)


def _text_column(df: pd.DataFrame, column: str) -> pd.Series:
    if column not in df.columns:
        return pd.Series("", index=df.index, dtype=object)
    return df[column].fillna("").astype(str).str.lower()


def _flag_column(df: pd.DataFrame, column: str) -> pd.Series:
    if column not in df.columns:
        return pd.Series(False, index=df.index)
    return df[column].apply(lambda v: False if pd.isna(v) else bool(v)).astype(bool)


def _as_list(value) -> list:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return []


def filter_by_query(df: pd.DataFrame, query: str) -> pd.DataFrame:
    """Keep providers whose name, specialty or address contains the query text."""
    if df is None or df.empty or not query:
        return df
    needle = query.lower()
    mask = pd.Series(False, index=df.index)
    for column in QUERY_COLUMNS:
        mask |= _text_column(df, column).str.contains(needle, regex=False)
    return df[mask].copy()


def filter_by_categories(df: pd.DataFrame, categories: Iterable[str]) -> pd.DataFrame:
    """Keep providers whose type or specialty contains ANY selected category."""
    if df is None or df.empty or not categories:
        return df
    needles = [c.lower() for c in categories if c]
    if not needles:
        return df
    type_col = _text_column(df, "provider_type")
    specialty_col = _text_column(df, "specialty")
    mask = pd.Series(False, index=df.index)
    for needle in needles:
        mask |= type_col.str.contains(needle, regex=False) | specialty_col.str.contains(needle, regex=False)
    return df[mask].copy()


def filter_by_location(df: pd.DataFrame, location: str) -> pd.DataFrame:
    if df is None or df.empty or not location:
        return df
    needle = location.lower()
    mask = _text_column(df, "city").str.contains(needle, regex=False) | _text_column(df, "address").str.contains(
        needle, regex=False
    )
    return df[mask].copy()


def filter_by_accessibility(df: pd.DataFrame, features: Iterable[str]) -> pd.DataFrame:
    """Keep providers offering at least one of the requested accessibility features."""
    wanted = {f for f in features or [] if f}
    if df is None or df.empty or not wanted:
        return df
    if "accessibility_features" not in df.columns:
        return df.iloc[0:0].copy()
    mask = df["accessibility_features"].apply(lambda feats: bool(wanted & set(_as_list(feats)))).astype(bool)
    return df[mask].copy()


def filter_by_min_rating(df: pd.DataFrame, min_rating: float) -> pd.DataFrame:
    if df is None or df.empty or not min_rating or min_rating <= 0:
        return df
    if "avg_rating" not in df.columns:
        return df.iloc[0:0].copy()
    ratings = pd.to_numeric(df["avg_rating"], errors="coerce").fillna(0)
    return df[ratings >= min_rating].copy()


def filter_by_flag(df: pd.DataFrame, column: str, enabled: bool) -> pd.DataFrame:
    """Keep providers whose boolean ``column`` is set, when ``enabled``."""
    if df is None or df.empty or not enabled:
        return df
    return df[_flag_column(df, column)].copy()


def filter_verified(df: pd.DataFrame, verified_only: bool) -> pd.DataFrame:
    if df is None or df.empty or not verified_only:
        return df
    if "verification_status" not in df.columns:
        return df.iloc[0:0].copy()
    return df[df["verification_status"] == "verified"].copy()


def filter_by_price_range(df: pd.DataFrame, price_range: Tuple[float, float]) -> pd.DataFrame:
    """Keep providers with a known consultation price inside the range.

    The default range (0, 500) is treated as "no price filter".
    """
    if df is None or df.empty or tuple(price_range) == tuple(DEFAULT_PRICE_RANGE):
        return df
    low, high = price_range
    if "consultation_price" not in df.columns:
        return df.iloc[0:0].copy()
    prices = pd.to_numeric(df["consultation_price"], errors="coerce")
    return df[prices.notna() & (prices >= low) & (prices <= high)].copy()


def _schedule_parts(schedule) -> Tuple[int, str, str, bool]:
    if isinstance(schedule, dict):
        return (
            int(schedule.get("day_of_week", -1)),
            str(schedule.get("start_time", "")),
            str(schedule.get("end_time", "")),
            bool(schedule.get("is_active", True)),
        )
    return (
        int(schedule.day_of_week),
        str(schedule.start_time),
        str(schedule.end_time),
        bool(schedule.is_active),
    )


def _is_available(schedules, availability: str, now: datetime) -> bool:
    # Schedules count days from Sunday; datetime.weekday() counts from Monday
    today = (now.weekday() + 1) % 7
    clock = now.strftime("%H:%M")
    for schedule in _as_list(schedules):
        day, start, end, active = _schedule_parts(schedule)
        if not active:
            continue
        if availability == "week":
            return True
        if day != today:
            continue
        if availability == "today":
            return True
        if availability == "now" and start <= clock < end:
            return True
    return False


def filter_by_availability(df: pd.DataFrame, availability: str, now: Optional[datetime] = None) -> pd.DataFrame:
    if df is None or df.empty or not availability or availability == DEFAULT_AVAILABILITY:
        return df
    if availability not in AVAILABILITY_OPTIONS:
        raise ValueError(f"Unknown availability option: {availability}")
    if "schedules" not in df.columns:
        return df.iloc[0:0].copy()
    now = now or datetime.now()
    mask = df["schedules"].apply(lambda s: _is_available(s, availability, now)).astype(bool)
    return df[mask].copy()


def apply_filters(
    df: pd.DataFrame, filters: FilterState, query: str = "", now: Optional[datetime] = None
) -> pd.DataFrame:
    """Return the providers matching the query and every active filter, in input order."""
    if df is None or df.empty:
        return df

    result = filter_by_query(df, query)
    result = filter_by_categories(result, filters.categories)
    result = filter_by_location(result, filters.location)
    result = filter_by_accessibility(result, filters.accessibility_features)
    result = filter_by_min_rating(result, filters.min_rating)
    result = filter_verified(result, filters.verified_only)
    result = filter_by_flag(result, "is_emergency", filters.emergency_services)
    result = filter_by_flag(result, "home_visit_available", filters.home_visit_available)
    result = filter_by_flag(result, "accepts_insurance", filters.insurance_accepted)
    if filters.wheelchair_accessible:
        result = filter_by_accessibility(result, ["wheelchair"])
    result = filter_by_price_range(result, filters.price_range)
    result = filter_by_availability(result, filters.availability, now)
    return result
