import pytest
from backend.sommelier.contracts import PreferenceRecord
from backend.sommelier.ranking import infer_color, price_tier_for, rank_wines


def ids(items):
    return [item.id for item in items]


@pytest.mark.parametrize(
    ("price", "tier"),
    [
        (0.0, "budget"),
        (9.99, "budget"),
        (10.0, "mid"),
        (24.99, "mid"),
        (25.0, "premium"),
        (49.99, "premium"),
        (50.0, "luxury"),
        (480.0, "luxury"),
    ],
)
def test_price_tier_bounds_are_half_open(price, tier):
    assert price_tier_for(price) == tier


def test_infer_color_reads_product_name(catalog):
    colors = {item.id: infer_color(item) for item in catalog}
    assert colors == {
        "bordeaux-rouge": "red",
        "chardonnay": "white",
        "provence-rose": "rose",
        "merlot": "red",
        "champagne": "sparkling",
        "margaux": "red",
    }


def test_filters_by_color_and_price_keeping_catalog_order(catalog):
    preferences = PreferenceRecord(color="red", price_range="budget")
    assert ids(rank_wines(catalog, preferences, 4)) == ["bordeaux-rouge", "merlot"]


def test_filters_by_color_only(catalog):
    preferences = PreferenceRecord(color="red")
    assert ids(rank_wines(catalog, preferences, 4)) == ["bordeaux-rouge", "merlot", "margaux"]


def test_filters_by_price_only(catalog):
    preferences = PreferenceRecord(price_range="mid")
    assert ids(rank_wines(catalog, preferences, 4)) == ["chardonnay", "provence-rose"]


def test_result_is_truncated_to_limit(catalog):
    preferences = PreferenceRecord(color="red")
    assert ids(rank_wines(catalog, preferences, 2)) == ["bordeaux-rouge", "merlot"]


def test_no_match_degrades_to_unfiltered_head(catalog):
    preferences = PreferenceRecord(color="rose", price_range="luxury")
    assert ids(rank_wines(catalog, preferences, 3)) == ["bordeaux-rouge", "chardonnay", "provence-rose"]


def test_empty_preferences_return_catalog_head(catalog):
    assert ids(rank_wines(catalog, PreferenceRecord(), 2)) == ["bordeaux-rouge", "chardonnay"]


def test_food_and_occasion_do_not_filter(catalog):
    preferences = PreferenceRecord(color="white", food="fish", occasion="wedding")
    assert ids(rank_wines(catalog, preferences, 4)) == ["chardonnay"]


def test_zero_limit_and_empty_catalog(catalog):
    assert rank_wines(catalog, PreferenceRecord(color="red"), 0) == []
    assert rank_wines([], PreferenceRecord(color="red"), 4) == []


def test_negative_limit_is_rejected(catalog):
    with pytest.raises(ValueError):
        rank_wines(catalog, PreferenceRecord(), -1)


def test_ranking_does_not_mutate_catalog(catalog):
    before = list(catalog)
    rank_wines(catalog, PreferenceRecord(color="white"), 1)
    assert catalog == before


@pytest.mark.parametrize("limit", [0, 1, 3, 6, 50])
def test_result_never_exceeds_limit(catalog, limit):
    impossible = PreferenceRecord(color="rose", price_range="luxury")
    for preferences in (PreferenceRecord(), PreferenceRecord(color="red"), impossible):
        result = rank_wines(catalog, preferences, limit)
        assert len(result) <= limit
    assert len(rank_wines(catalog, impossible, limit)) == min(limit, len(catalog))
