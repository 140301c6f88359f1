from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .contracts import CatalogItem

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    """Raised when a catalog snapshot file cannot be read at all."""


def parse_catalog(payload: Any) -> list[CatalogItem]:
    """
    Build a catalog snapshot from decoded JSON.

    Accepts a bare list of items or the scraper wrapper
    ``{"workflowId", "runId", "executedAt", "data": [...], "totalCount"}``.
    Items failing validation are skipped; duplicate ids keep the first occurrence.
    """
    if isinstance(payload, dict):
        raw_items: Iterable[Any] = payload.get("data") or []
    elif isinstance(payload, list):
        raw_items = payload
    else:
        raise CatalogError("Catalog payload must be a list or an object with a 'data' list")

    items: list[CatalogItem] = []
    seen: set[str] = set()
    skipped = 0
    for raw in raw_items:
        try:
            item = CatalogItem.model_validate(raw)
        except ValidationError:
            skipped += 1
            continue
        if item.id in seen:
            skipped += 1
            continue
        seen.add(item.id)
        items.append(item)

    if skipped:
        logger.warning("Skipped %d invalid or duplicate catalog entries", skipped)
    return items


def load_catalog(path: Path | str) -> list[CatalogItem]:
    catalog_path = Path(path)
    try:
        payload = json.loads(catalog_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise CatalogError(f"Catalog file not found: {catalog_path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Invalid catalog file: {catalog_path}") from exc
    return parse_catalog(payload)


__all__ = ["CatalogError", "load_catalog", "parse_catalog"]
