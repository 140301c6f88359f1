"""Wine advisory core: preference extraction, catalog ranking, cart and suggestions."""

from .advisor import SommelierAdvisor
from .cart import CartStore
from .preferences import extract_preferences
from .ranking import rank_wines
from .suggestions import SuggestionStore

__all__ = [
    "CartStore",
    "SommelierAdvisor",
    "SuggestionStore",
    "extract_preferences",
    "rank_wines",
]
