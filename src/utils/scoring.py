"""Distance calculation and result ordering for provider search."""
from enum import Enum
from typing import List, Optional

import numpy as np
import pandas as pd

EARTH_RADIUS_KM = 6371.0


class SortOption(str, Enum):
    RELEVANCE = "relevance"
    DISTANCE = "distance"
    RATING = "rating"
    PRICE = "price"
    NEWEST = "newest"


SORT_LABELS = {
    SortOption.RELEVANCE: "Relevance",
    SortOption.DISTANCE: "Distance",
    SortOption.RATING: "Rating",
    SortOption.PRICE: "Price",
    SortOption.NEWEST: "Newest",
}


def calculate_distances(user_lat: float, user_lon: float, provider_df: pd.DataFrame) -> List[Optional[float]]:
    """Great-circle distance in kilometres from the user to each provider (None when unlocated)."""
    lat_arr = np.radians(pd.to_numeric(provider_df["latitude"], errors="coerce").to_numpy(dtype=float))
    lon_arr = np.radians(pd.to_numeric(provider_df["longitude"], errors="coerce").to_numpy(dtype=float))
    user_lat_rad = np.radians(user_lat)
    user_lon_rad = np.radians(user_lon)

    valid = ~np.isnan(lat_arr) & ~np.isnan(lon_arr)
    dlat = lat_arr[valid] - user_lat_rad
    dlon = lon_arr[valid] - user_lon_rad
    a = np.sin(dlat / 2) ** 2 + np.cos(user_lat_rad) * np.cos(lat_arr[valid]) * np.sin(dlon / 2) ** 2
    c = 2 * np.arcsin(np.sqrt(a))
    distances = np.full(len(provider_df), np.nan)
    distances[valid] = EARTH_RADIUS_KM * c

    return [None if np.isnan(d) else float(d) for d in distances]


def _numeric(df: pd.DataFrame, column: str, fill: float) -> pd.Series:
    if column not in df.columns:
        return pd.Series(fill, index=df.index, dtype=float)
    return pd.to_numeric(df[column], errors="coerce").fillna(fill).astype(float)


def _created_seconds(df: pd.DataFrame) -> pd.Series:
    if "created_at" not in df.columns:
        return pd.Series(0.0, index=df.index)
    created = pd.to_datetime(df["created_at"], utc=True, errors="coerce")
    # Records without a timestamp sort as if created at the epoch
    return (created - pd.Timestamp(0, tz="UTC")).dt.total_seconds().fillna(0.0)


def sort_key(df: pd.DataFrame, sort_by: str) -> Optional[pd.Series]:
    """Ascending numeric key for ``sort_by``; None means keep the input order."""
    option = SortOption(sort_by)
    if option is SortOption.RELEVANCE:
        return None
    if option is SortOption.DISTANCE:
        return _numeric(df, "distance_km", 0.0)
    if option is SortOption.RATING:
        return -_numeric(df, "avg_rating", 0.0)
    if option is SortOption.PRICE:
        return _numeric(df, "consultation_price", np.inf)
    return -_created_seconds(df)


def sort_providers(df: pd.DataFrame, sort_by: str = SortOption.RELEVANCE.value) -> pd.DataFrame:
    """Order providers by ``sort_by``. Ties keep their input order (stable mergesort).

    Raises:
        ValueError: if ``sort_by`` is not a known sort option
    """
    if df is None or df.empty:
        SortOption(sort_by)
        return df
    key = sort_key(df, sort_by)
    if key is None:
        return df
    order = np.argsort(key.to_numpy(dtype=float), kind="mergesort")
    return df.iloc[order].copy()
