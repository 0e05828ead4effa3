"""Test suite for distance calculation using haversine formula.

Tests verify great-circle distances (in kilometres) between a user and providers.
"""
import pandas as pd

from src.utils.scoring import calculate_distances

SIDI_BEL_ABBES = (35.1903, -0.6308)


class TestCalculateDistances:
    """Tests for haversine distance calculation."""

    def test_distance_to_same_location(self):
        df = pd.DataFrame({"latitude": [SIDI_BEL_ABBES[0]], "longitude": [SIDI_BEL_ABBES[1]]})

        distances = calculate_distances(*SIDI_BEL_ABBES, df)

        assert len(distances) == 1
        assert distances[0] is not None
        assert distances[0] < 0.01, "Distance to same point should be nearly zero"

    def test_known_distance_to_oran(self):
        """Sidi Bel Abbes to Oran is roughly 55-60 km as the crow flies."""
        df = pd.DataFrame({"latitude": [35.6971], "longitude": [-0.6308]})

        distances = calculate_distances(*SIDI_BEL_ABBES, df)

        assert 50 < distances[0] < 65, f"Expected ~56 km, got {distances[0]:.1f}"

    def test_multiple_providers(self):
        df = pd.DataFrame(
            {
                "latitude": [35.1903, 34.8783, 36.7538],  # Sidi Bel Abbes, Tlemcen, Algiers
                "longitude": [-0.6308, -1.3150, 3.0588],
            }
        )

        distances = calculate_distances(*SIDI_BEL_ABBES, df)

        assert len(distances) == 3
        assert distances[0] < 1
        assert 60 < distances[1] < 85, "Distance to Tlemcen should be ~71 km"
        assert 340 < distances[2] < 420, "Distance to Algiers should be ~375 km"

    def test_missing_coordinates_return_none(self):
        df = pd.DataFrame({"latitude": [float("nan"), 35.0, None], "longitude": [-0.6, float("nan"), -0.6]})

        distances = calculate_distances(*SIDI_BEL_ABBES, df)

        assert distances == [None, None, None]

    def test_object_columns_are_coerced(self):
        """Frames built from records hold coordinates as objects (floats and None)."""
        df = pd.DataFrame({"latitude": [35.6971, None], "longitude": [-0.6308, None]}, dtype=object)

        distances = calculate_distances(*SIDI_BEL_ABBES, df)

        assert distances[0] is not None
        assert distances[1] is None

    def test_empty_dataframe(self):
        df = pd.DataFrame({"latitude": [], "longitude": []})

        assert calculate_distances(*SIDI_BEL_ABBES, df) == []

    def test_cross_continent_distance(self):
        """New York to Los Angeles is about 3,940 km."""
        df = pd.DataFrame({"latitude": [34.0522], "longitude": [-118.2437]})

        distances = calculate_distances(40.7128, -74.0060, df)

        assert 3850 < distances[0] < 4000, f"Expected ~3,940 km, got {distances[0]:.1f}"

    def test_distance_calculation_is_symmetric(self):
        loc_a = SIDI_BEL_ABBES
        loc_b = (34.8783, -1.3150)

        dist_a_to_b = calculate_distances(*loc_a, pd.DataFrame({"latitude": [loc_b[0]], "longitude": [loc_b[1]]}))[0]
        dist_b_to_a = calculate_distances(*loc_b, pd.DataFrame({"latitude": [loc_a[0]], "longitude": [loc_a[1]]}))[0]

        assert abs(dist_a_to_b - dist_b_to_a) < 0.1, "Distance should be symmetric"
