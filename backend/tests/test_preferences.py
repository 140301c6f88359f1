import pytest
from backend.sommelier.preferences import (
    extract_preferences,
    has_recommend_intent,
    match_color,
    match_price_tier,
)


@pytest.mark.parametrize(
    ("text", "color"),
    [
        ("I want a red wine", "red"),
        ("Un vin rouge s'il vous plaît", "red"),
        ("Een fles rood voor vanavond", "red"),
        ("Something like a Cabernet", "red"),
        ("A crisp white", "white"),
        ("Een witte wijn graag", "white"),
        ("Sauvignon for the terrace", "white"),
        ("Un rosé bien frais", "rose"),
        ("Champagne for New Year", "sparkling"),
        ("A brut please", "sparkling"),
    ],
)
def test_color_triggers_resolve_across_languages(text, color):
    assert extract_preferences(text).color == color


def test_color_priority_follows_table_order():
    assert match_color("red or white, I can't decide") == "red"
    assert match_color("a sparkling rosé") == "rose"


def test_price_priority_follows_table_order():
    assert match_price_tier("premium or budget") == "budget"
    assert match_price_tier("something luxury, premium even") == "premium"
    assert match_price_tier("a medium priced bottle") == "mid"


def test_matching_is_case_insensitive():
    preferences = extract_preferences("RED WINE, CHEAP, FOR A PARTY")
    assert preferences.color == "red"
    assert preferences.price_range == "budget"
    assert preferences.occasion == "party"


def test_food_and_occasion_collect_all_keywords_in_table_order():
    preferences = extract_preferences("cheese and fish for a romantic dinner")
    assert preferences.food == "fish cheese"
    assert preferences.occasion == "dinner romantic"


def test_french_request_fills_every_dimension():
    preferences = extract_preferences("Un vin blanc économique pour du poisson", "fr")
    assert preferences.color == "white"
    assert preferences.price_range == "budget"
    assert preferences.food == "poisson"
    assert preferences.occasion == ""


def test_language_hint_does_not_narrow_triggers():
    preferences = extract_preferences("a red wine for the fête", "nl")
    assert preferences.color == "red"
    assert preferences.occasion == "fête"


@pytest.mark.parametrize("text", ["", "   ", "Hello", None])
def test_unrelated_text_yields_empty_record(text):
    preferences = extract_preferences(text)
    assert preferences.is_empty
    assert preferences.color is None
    assert preferences.price_range is None
    assert preferences.food == ""
    assert preferences.occasion == ""


def test_recommend_intent():
    assert has_recommend_intent("Can you recommend something?")
    assert has_recommend_intent("SUGGEST a bottle")
    assert not has_recommend_intent("Hello")
    assert not has_recommend_intent("")
