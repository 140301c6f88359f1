"""Keyword-driven preference extraction for wine requests.

Every dimension is resolved from a static trigger table. Colour and price tier
are single-valued: groups are tested in table order and the first group with a
trigger present in the text wins. Food and occasion collect every keyword that
appears, in table order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .contracts import PreferenceRecord

# (value, {language: triggers}) in priority order. Grape names count as colour triggers.
COLOR_TRIGGERS: tuple[tuple[str, Mapping[str, Sequence[str]]], ...] = (
    (
        "red",
        {
            "en": ["red"],
            "fr": ["rouge"],
            "nl": ["rood"],
            "synonyms": ["cabernet", "merlot", "syrah"],
        },
    ),
    (
        "white",
        {
            "en": ["white"],
            "fr": ["blanc"],
            "nl": ["wit"],
            "synonyms": ["chardonnay", "sauvignon"],
        },
    ),
    (
        "rose",
        {
            "en": ["rose"],
            "fr": ["rosé", "gris"],
        },
    ),
    (
        "sparkling",
        {
            "en": ["sparkling"],
            "fr": ["champagne", "mousseux"],
            "synonyms": ["brut"],
        },
    ),
)

PRICE_TRIGGERS: tuple[tuple[str, Mapping[str, Sequence[str]]], ...] = (
    (
        "budget",
        {
            "en": ["budget", "cheap", "under 10"],
            "fr": ["économique", "moins de 10"],
        },
    ),
    (
        "premium",
        {
            "en": ["premium", "expensive", "over 25"],
            "fr": ["cher", "plus de 25"],
        },
    ),
    (
        "luxury",
        {
            "en": ["luxury", "over 50"],
            "fr": ["luxe", "plus de 50"],
        },
    ),
    (
        "mid",
        {
            "en": ["mid", "medium"],
            "fr": ["moyen"],
        },
    ),
)

FOOD_KEYWORDS: tuple[str, ...] = (
    "meat",
    "fish",
    "cheese",
    "pasta",
    "chicken",
    "beef",
    "seafood",
    "dessert",
    "viande",
    "poisson",
    "fromage",
    "pâtes",
    "poulet",
    "bœuf",
    "fruits de mer",
)

OCCASION_KEYWORDS: tuple[str, ...] = (
    "dinner",
    "party",
    "celebration",
    "romantic",
    "wedding",
    "dîner",
    "fête",
    "célébration",
)

RECOMMEND_TRIGGERS: tuple[str, ...] = ("recommend", "suggest")


def _flatten(groups: Mapping[str, Sequence[str]]) -> tuple[str, ...]:
    tokens: list[str] = []
    for triggers in groups.values():
        tokens.extend(token.lower() for token in triggers)
    return tuple(tokens)


_COLOR_ORDER: tuple[tuple[str, tuple[str, ...]], ...] = tuple(
    (value, _flatten(groups)) for value, groups in COLOR_TRIGGERS
)
_PRICE_ORDER: tuple[tuple[str, tuple[str, ...]], ...] = tuple(
    (value, _flatten(groups)) for value, groups in PRICE_TRIGGERS
)


def first_match(lowered: str, ordered: Sequence[tuple[str, Sequence[str]]]) -> str | None:
    for value, triggers in ordered:
        if any(token in lowered for token in triggers):
            return value
    return None


def collect_keywords(lowered: str, keywords: Sequence[str]) -> str:
    return " ".join(keyword for keyword in keywords if keyword in lowered)


def match_color(text: str) -> str | None:
    return first_match((text or "").lower(), _COLOR_ORDER)


def match_price_tier(text: str) -> str | None:
    return first_match((text or "").lower(), _PRICE_ORDER)


def extract_preferences(text: str, language_hint: str | None = None) -> PreferenceRecord:
    """Turn a free-text wine request into a :class:`PreferenceRecord`.

    ``language_hint`` does not narrow the tables; triggers of every supported
    language are always tested so mixed-language messages still resolve.
    """
    lowered = (text or "").lower()
    return PreferenceRecord(
        color=first_match(lowered, _COLOR_ORDER),
        price_range=first_match(lowered, _PRICE_ORDER),
        food=collect_keywords(lowered, FOOD_KEYWORDS),
        occasion=collect_keywords(lowered, OCCASION_KEYWORDS),
    )


def has_recommend_intent(text: str) -> bool:
    lowered = (text or "").lower()
    return any(trigger in lowered for trigger in RECOMMEND_TRIGGERS)


__all__ = [
    "COLOR_TRIGGERS",
    "FOOD_KEYWORDS",
    "OCCASION_KEYWORDS",
    "PRICE_TRIGGERS",
    "extract_preferences",
    "has_recommend_intent",
    "match_color",
    "match_price_tier",
]
