"""Tests for round-tripping search filters through URL query parameters."""
import pytest

from src.utils.filters import FilterState
from src.utils.url_state import deserialize_filters, query_from_params, serialize_filters


def test_defaults_serialize_to_nothing():
    assert serialize_filters(FilterState()) == {}


def test_verified_and_categories_example():
    params = serialize_filters(FilterState(verified_only=True, categories=["doctor", "clinic"]))

    assert params["verifiedOnly"] == "true"
    assert params["categories"] == "doctor,clinic"
    assert "radius" not in params


def test_non_default_radius_is_written():
    assert serialize_filters(FilterState(radius=10))["radius"] == "10"


def test_false_booleans_are_omitted():
    params = serialize_filters(FilterState(emergency_services=True))
    assert params == {"emergencyServices": "true"}


def test_empty_and_comma_tokens_are_dropped():
    params = serialize_filters(FilterState(categories=["doctor", "", "a,b"], accessibility_features=[""]))
    assert params == {"categories": "doctor"}


def test_query_text_uses_q():
    params = serialize_filters(FilterState(), query="cardio")
    assert params == {"q": "cardio"}
    assert query_from_params(params) == "cardio"


@pytest.mark.parametrize(
    "filters",
    [
        FilterState(),
        FilterState(categories=["doctor", "clinic"], verified_only=True),
        FilterState(location="Sidi Bel Abbes", radius=40, availability="today"),
        FilterState(min_rating=4.5, emergency_services=True, wheelchair_accessible=True),
        FilterState(insurance_accepted=True, home_visit_available=True, price_range=(100, 250.5)),
        FilterState(accessibility_features=["wheelchair", "braille"], availability="now"),
    ],
)
def test_round_trip(filters):
    assert deserialize_filters(serialize_filters(filters)) == filters


def test_absent_keys_take_defaults():
    assert deserialize_filters({}) == FilterState()


def test_malformed_numbers_become_zero():
    filters = deserialize_filters({"radius": "abc", "minRating": "NaN", "priceRange": "x,200"})

    assert filters.radius == 0
    assert filters.min_rating == 0
    assert filters.price_range == (0, 200)


def test_price_range_with_wrong_arity_uses_default():
    assert deserialize_filters({"priceRange": "10,20,30"}).price_range == (0, 500)


def test_inverted_price_range_is_swapped():
    assert deserialize_filters({"priceRange": "300,100"}).price_range == (100, 300)


def test_unknown_availability_falls_back_to_any():
    assert deserialize_filters({"availability": "sometimes"}).availability == "any"


def test_only_literal_true_enables_a_boolean():
    filters = deserialize_filters({"verifiedOnly": "1", "emergencyServices": "true"})
    assert filters.verified_only is False
    assert filters.emergency_services is True


def test_list_values_from_repeated_params_use_last():
    assert deserialize_filters({"location": ["Oran", "Tlemcen"]}).location == "Tlemcen"
