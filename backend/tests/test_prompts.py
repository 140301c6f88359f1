import json

import pytest
from backend.sommelier.contracts import AdvisoryRequest, AdvisoryResponse, PreferenceRecord
from backend.sommelier.pairings import StaticPairingLookup
from backend.sommelier.prompts import (
    clarification_message,
    fallback_response,
    format_price,
    system_prompt,
    user_prompt,
)


@pytest.mark.parametrize(
    ("language", "marker"),
    [("en", "sommelier for Delhaize"), ("fr", "sommelier professionnel pour Delhaize"), ("nl", "sommelier voor Delhaize")],
)
def test_system_prompt_names_store(language, marker):
    assert marker in system_prompt(language)


def test_unknown_language_uses_english():
    assert clarification_message("de") == clarification_message("en")
    assert system_prompt("de", "Colruyt").startswith("You are a professional wine sommelier for Colruyt")


def test_format_price():
    assert format_price(12.0) == "€12"
    assert format_price(8.49) == "€8.49"
    assert format_price(14.5) == "€14.50"


def test_user_prompt_samples_first_three(catalog):
    prompt = user_prompt("red for steak", catalog)
    sample = json.loads(prompt.split("Available wines (sample): ", 1)[1].split("\n\n", 1)[0])

    assert prompt.startswith('User message: "red for steak"')
    assert [wine["productName"] for wine in sample] == [
        "Bordeaux Rouge AOP",
        "Chardonnay Bourgogne Blanc",
        "Côtes de Provence Rosé",
    ]


def test_fallback_without_preferences_has_no_wanted_sentence(catalog):
    text = fallback_response(PreferenceRecord(), catalog[:1], "nl")
    assert text.startswith("Ik help u graag de perfecte wijn te vinden!\n\n")
    assert "Op zoek naar" not in text
    assert "Ik heb 1 uitstekende opties voor u gevonden:" in text
    assert text.endswith("Deze wijnen zijn verkrijgbaar bij Delhaize en zouden perfect zijn voor uw behoeften!")


def test_fallback_price_only(catalog):
    text = fallback_response(PreferenceRecord(price_range="premium"), [], "en")
    assert "I'd be happy to help you find the perfect wine! in the premium price range." in text
    assert "Let me suggest some wines from our selection:" in text


def test_request_language_defaults_to_english():
    assert AdvisoryRequest(message="hi", language="de").language == "en"
    assert AdvisoryRequest(message="hi", language="FR").language == "fr"
    assert AdvisoryRequest(message="hi", language=None).language == "en"


def test_response_parts_only_include_present_blocks():
    response = AdvisoryResponse(message="hello", food_pairings=["Brie"])
    parts = response.parts()
    assert [part.kind for part in parts] == ["text", "food_pairing_set"]
    assert parts[1].payload == ["Brie"]


def test_catalog_item_aliases_roundtrip(catalog):
    dumped = catalog[0].model_dump(by_alias=True)
    assert dumped["_id"] == "bordeaux-rouge"
    assert dumped["productName"] == "Bordeaux Rouge AOP"
    assert catalog[3].discount == ""


def test_pairing_lookup_from_file(tmp_path):
    path = tmp_path / "pairings.json"
    path.write_text(json.dumps({"Red": ["Steak"], "white": "not a list"}), encoding="utf-8")
    lookup = StaticPairingLookup.from_file(path)
    assert lookup.pairings_for("red") == ["Steak"]
    assert lookup.pairings_for("white") == []
    assert StaticPairingLookup.from_file(tmp_path / "missing.json").pairings_for("red") == []
