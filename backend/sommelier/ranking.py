from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from .contracts import CatalogItem, PreferenceRecord
from .preferences import match_color

logger = logging.getLogger(__name__)

# Inclusive lower bound, exclusive upper bound; the top tier is open-ended.
PRICE_TIER_BOUNDS: tuple[tuple[str, float, float], ...] = (
    ("budget", 0.0, 10.0),
    ("mid", 10.0, 25.0),
    ("premium", 25.0, 50.0),
    ("luxury", 50.0, math.inf),
)


def price_tier_for(price: float) -> str | None:
    for tier, lower, upper in PRICE_TIER_BOUNDS:
        if lower <= price < upper:
            return tier
    return None


def infer_color(item: CatalogItem) -> str | None:
    """Colour of a catalog item, read from its display name with the extraction triggers."""
    return match_color(item.name)


def matches_preferences(item: CatalogItem, preferences: PreferenceRecord) -> bool:
    if preferences.color and infer_color(item) != preferences.color:
        return False
    if preferences.price_range and price_tier_for(item.price) != preferences.price_range:
        return False
    return True


def rank_wines(
    catalog: Sequence[CatalogItem], preferences: PreferenceRecord, limit: int
) -> list[CatalogItem]:
    """
    Narrow the catalog to items satisfying the colour and price-tier constraints.

    The catalog's own order is kept; there is no scoring. When no item satisfies the
    constraints, the first ``limit`` items of the unfiltered catalog are returned so the
    caller always has something to show unless the catalog itself is empty.
    """
    if limit < 0:
        raise ValueError("limit must be >= 0")
    if limit == 0 or not catalog:
        return []

    matched = [item for item in catalog if matches_preferences(item, preferences)]
    if matched:
        return matched[:limit]

    logger.debug(
        "No catalog item matched color=%s price_range=%s; returning unfiltered head",
        preferences.color,
        preferences.price_range,
    )
    return list(catalog[:limit])


__all__ = ["PRICE_TIER_BOUNDS", "infer_color", "matches_preferences", "price_tier_for", "rank_wines"]
