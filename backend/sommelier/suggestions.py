from __future__ import annotations

import json
import logging
from collections.abc import Callable

from pydantic import ValidationError

from .contracts import LANGUAGES, SuggestionEntry, utcnow
from .persistence import STORAGE_ERRORS, Persistence
from .settings import settings

logger = logging.getLogger(__name__)

FALLBACK_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "en": (
        "Recommend a red wine for a steak dinner",
        "What white wine goes with seafood?",
        "A good budget wine under €10",
        "Sparkling wine for a celebration",
        "A romantic wine for dinner",
        "A premium wine to offer as a gift",
        "Which rosé for a summer party?",
        "What wine pairs with cheese?",
    ),
    "fr": (
        "Recommandez un vin rouge pour un steak",
        "Quel vin blanc avec des fruits de mer ?",
        "Un bon vin économique à moins de 10 €",
        "Un mousseux pour une célébration",
        "Un vin pour un dîner romantique",
        "Un vin premium à offrir",
        "Quel rosé pour une fête d'été ?",
        "Quel vin avec du fromage ?",
    ),
    "nl": (
        "Raad een rode wijn aan bij biefstuk",
        "Welke witte wijn past bij zeevruchten?",
        "Een goede budgetwijn onder €10",
        "Mousserende wijn voor een feest",
        "Een wijn voor een romantisch diner",
        "Een premium wijn om cadeau te geven",
        "Welke rosé voor een zomerfeest?",
        "Welke wijn past bij kaas?",
    ),
}


def normalize_query(text: str) -> str:
    """Comparison key for a query: trimmed, whitespace collapsed, case-folded."""
    return " ".join((text or "").split()).casefold()


class SuggestionStore:
    """
    Frequency-ranked memory of past queries, partitioned by language.

    Entries keep the casing of their first observation for display and are never
    deleted individually. Ties in count rank the earlier-observed query first.
    """

    def __init__(self, persistence: Persistence) -> None:
        self._persistence = persistence
        self._reset()
        # set while in-memory counts hold changes the backing store did not accept
        self._unsaved = False
        try:
            with self._persistence.lock():
                self._refresh()
        except STORAGE_ERRORS:
            logger.warning("Suggestion storage unavailable; starting empty", exc_info=True)

    # ------------------------------------------------------------------
    def _reset(self) -> None:
        self._entries: dict[str, dict[str, SuggestionEntry]] = {lang: {} for lang in LANGUAGES}
        self._sequence = 0

    def _refresh(self) -> None:
        """Replace in-memory counts with the stored ones, unless storage cannot be read."""
        if self._unsaved:
            return
        try:
            blob = self._persistence.load()
        except Exception:
            logger.warning("Suggestion storage unreadable; keeping current counts", exc_info=True)
            return
        self._reset()
        if not blob or not blob.strip():
            return
        try:
            payload = json.loads(blob)
            partitions = payload["languages"]
            sequence = int(payload.get("sequence", 0))
            for lang, entries in partitions.items():
                if lang not in self._entries:
                    continue
                for raw in entries:
                    entry = SuggestionEntry.model_validate({**raw, "language": lang})
                    key = normalize_query(entry.text)
                    if key and key not in self._entries[lang]:
                        self._entries[lang][key] = entry
                        sequence = max(sequence, entry.first_seen + 1)
            self._sequence = sequence
        except (KeyError, TypeError, ValueError, AttributeError, ValidationError):
            logger.warning("Corrupt suggestion data in storage; starting empty")
            self._reset()

    def _save(self) -> None:
        payload = {
            "sequence": self._sequence,
            "languages": {
                lang: [
                    entry.model_dump(mode="json", exclude={"language"})
                    for entry in entries.values()
                ]
                for lang, entries in self._entries.items()
            },
        }
        try:
            self._persistence.save(json.dumps(payload, ensure_ascii=False))
        except Exception:
            logger.error("Failed to persist suggestions", exc_info=True)
            self._unsaved = True
        else:
            self._unsaved = False

    def _mutate(self, change: Callable[[], bool]) -> bool:
        try:
            with self._persistence.lock():
                self._refresh()
                changed = change()
                if changed:
                    self._save()
                return changed
        except STORAGE_ERRORS:
            logger.warning("Suggestion storage locked or unavailable; change skipped", exc_info=True)
            return False

    # ------------------------------------------------------------------
    def add_query(self, text: str, language: str) -> SuggestionEntry | None:
        """Count one observation of ``text``; blank text or unknown languages are ignored."""
        display = " ".join((text or "").split())
        key = normalize_query(display)
        if not key or language not in self._entries:
            return None
        recorded: list[SuggestionEntry] = []

        def change() -> bool:
            partition = self._entries[language]
            existing = partition.get(key)
            if existing is not None:
                entry = existing.model_copy(
                    update={"count": existing.count + 1, "last_used": utcnow()}
                )
            else:
                entry = SuggestionEntry(
                    text=display, language=language, first_seen=self._sequence
                )
                self._sequence += 1
            partition[key] = entry
            recorded.append(entry)
            return True

        self._mutate(change)
        return recorded[0] if recorded else None

    def get_top_suggestions(self, language: str, n: int) -> list[str]:
        if n <= 0:
            return []
        entries = sorted(
            self._entries.get(language, {}).values(),
            key=lambda entry: (-entry.count, entry.first_seen),
        )
        return [entry.text for entry in entries[:n]]

    def get_fallback_suggestions(self, language: str) -> list[str]:
        return list(FALLBACK_SUGGESTIONS.get(language, FALLBACK_SUGGESTIONS["en"]))

    def get_suggestions(self, language: str, target: int | None = None) -> list[str]:
        """Top observed queries padded with curated fallbacks, without case-insensitive duplicates."""
        target = target if target is not None else settings.SUGGESTION_TARGET
        combined = self.get_top_suggestions(language, target)
        seen = {normalize_query(text) for text in combined}
        for fallback in self.get_fallback_suggestions(language):
            if len(combined) >= target:
                break
            key = normalize_query(fallback)
            if key in seen:
                continue
            seen.add(key)
            combined.append(fallback)
        return combined

    def get_count(self, text: str, language: str) -> int:
        entry = self._entries.get(language, {}).get(normalize_query(text))
        return entry.count if entry else 0

    def clear(self, language: str | None = None) -> None:
        def change() -> bool:
            if language is None:
                self._reset()
            elif language in self._entries:
                self._entries[language] = {}
            else:
                return False
            return True

        self._mutate(change)


__all__ = ["FALLBACK_SUGGESTIONS", "SuggestionStore", "normalize_query"]
