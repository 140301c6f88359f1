from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class PairingLookup(Protocol):
    def pairings_for(self, color: str) -> list[str]: ...


class StaticPairingLookup:
    """Food pairings keyed by wine colour; unknown colours yield an empty list."""

    def __init__(self, table: Mapping[str, Sequence[str]] | None = None) -> None:
        self._table: dict[str, tuple[str, ...]] = {
            str(color).strip().lower(): tuple(str(dish) for dish in dishes if dish)
            for color, dishes in (table or {}).items()
        }

    @classmethod
    def from_file(cls, path: Path | str) -> StaticPairingLookup:
        """Load a ``{colour: [dish, ...]}`` JSON table; an unreadable file gives an empty table."""
        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Invalid food pairing table: %s", path)
            return cls()
        if not isinstance(payload, dict):
            logger.warning("Food pairing table %s is not an object", path)
            return cls()
        return cls({key: value for key, value in payload.items() if isinstance(value, list)})

    def pairings_for(self, color: str) -> list[str]:
        return list(self._table.get((color or "").strip().lower(), ()))


__all__ = ["PairingLookup", "StaticPairingLookup"]
