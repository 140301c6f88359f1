from __future__ import annotations

import base64
import json
import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import urlencode

from pydantic import ValidationError

from .contracts import CartItem, CatalogItem, utcnow
from .persistence import STORAGE_ERRORS, Persistence
from .settings import settings

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}


def currency_symbol(code: str) -> str:
    return CURRENCY_SYMBOLS.get(code, code)


def _decode_items(payload: Any, *, max_items: int, max_quantity: int) -> list[CartItem]:
    if not isinstance(payload, list):
        raise ValueError("cart payload must be a list")
    items: list[CartItem] = []
    seen: set[str] = set()
    for raw in payload:
        item = CartItem.model_validate(raw)
        if item.wine.id in seen:
            continue
        seen.add(item.wine.id)
        if item.quantity > max_quantity:
            item = item.model_copy(update={"quantity": max_quantity})
        items.append(item)
    return items[:max_items]


class CartStore:
    """
    Persistent shopping selection keyed by catalog item id.

    Holds at most ``max_items`` distinct wines, each with a quantity in
    ``[1, max_quantity]``. Repeated adds accumulate and are clamped to the upper bound.
    Every mutation reloads the persisted cart, applies the change, and saves it while
    holding the persistence lock, so concurrent callers sharing the backing store do
    not lose updates. Prices are the ones captured when the wine was added.

    Storage problems never propagate: an unreadable store keeps the in-memory cart,
    and a store that cannot be locked skips the change (mutators return False).
    """

    def __init__(
        self,
        persistence: Persistence,
        *,
        max_items: int | None = None,
        max_quantity: int | None = None,
    ) -> None:
        self._persistence = persistence
        self.max_items = max_items if max_items is not None else settings.CART_MAX_ITEMS
        self.max_quantity = (
            max_quantity if max_quantity is not None else settings.CART_MAX_QUANTITY
        )
        self._items: list[CartItem] = []
        # set while the in-memory cart holds changes the backing store did not accept
        self._unsaved = False
        try:
            with self._persistence.lock():
                self._refresh()
        except STORAGE_ERRORS:
            logger.warning("Cart storage unavailable; starting with an empty cart", exc_info=True)

    # ------------------------------------------------------------------
    def _refresh(self) -> None:
        """Replace the in-memory cart with the stored one, unless storage cannot be read."""
        if self._unsaved:
            return
        try:
            blob = self._persistence.load()
        except Exception:
            logger.warning("Cart storage unreadable; keeping the current cart", exc_info=True)
            return
        if not blob or not blob.strip():
            self._items = []
            return
        try:
            self._items = _decode_items(
                json.loads(blob), max_items=self.max_items, max_quantity=self.max_quantity
            )
        except (ValueError, ValidationError):
            logger.warning("Corrupt cart data in storage; starting with an empty cart")
            self._items = []

    def _save(self) -> None:
        blob = json.dumps(
            [item.model_dump(mode="json", by_alias=True) for item in self._items],
            ensure_ascii=False,
        )
        try:
            self._persistence.save(blob)
        except Exception:
            logger.error("Failed to persist cart", exc_info=True)
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
            logger.warning("Cart storage locked or unavailable; change skipped", exc_info=True)
            return False

    def _index(self, wine_id: str) -> int:
        for position, item in enumerate(self._items):
            if item.wine.id == wine_id:
                return position
        return -1

    def _clamp(self, quantity: int) -> int:
        return max(1, min(self.max_quantity, quantity))

    # ------------------------------------------------------------------
    def add_item(self, wine: CatalogItem, quantity: int = 1) -> bool:
        """Add ``quantity`` bottles of ``wine``; False when the cart is full or quantity < 1."""
        if quantity < 1:
            return False

        def change() -> bool:
            position = self._index(wine.id)
            if position >= 0:
                current = self._items[position]
                self._items[position] = current.model_copy(
                    update={
                        "quantity": self._clamp(current.quantity + quantity),
                        "added_at": utcnow(),
                    }
                )
                return True
            if len(self._items) >= self.max_items:
                logger.info("Cart full (%s items); rejected %s", self.max_items, wine.id)
                return False
            self._items.append(
                CartItem(wine=wine.model_copy(), quantity=self._clamp(quantity), added_at=utcnow())
            )
            return True

        return self._mutate(change)

    def remove_item(self, wine_id: str) -> None:
        def change() -> bool:
            position = self._index(wine_id)
            if position < 0:
                return False
            del self._items[position]
            return True

        self._mutate(change)

    def update_quantity(self, wine_id: str, quantity: int) -> None:
        def change() -> bool:
            position = self._index(wine_id)
            if position < 0:
                return False
            if quantity <= 0:
                del self._items[position]
            else:
                self._items[position] = self._items[position].model_copy(
                    update={"quantity": self._clamp(quantity)}
                )
            return True

        self._mutate(change)

    def clear_cart(self) -> None:
        def change() -> bool:
            self._items = []
            return True

        self._mutate(change)

    # ------------------------------------------------------------------
    def get_items(self) -> list[CartItem]:
        return [item.model_copy(deep=True) for item in self._items]

    def get_item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def get_total_price(self) -> float:
        return sum(item.line_total for item in self._items)

    def is_in_cart(self, wine_id: str) -> bool:
        return self._index(wine_id) >= 0

    def get_item_quantity(self, wine_id: str) -> int:
        position = self._index(wine_id)
        return self._items[position].quantity if position >= 0 else 0

    def __len__(self) -> int:
        return len(self._items)

    # ------------------------------------------------------------------
    def export_data(self) -> str:
        return json.dumps(
            [item.model_dump(mode="json", by_alias=True) for item in self._items],
            ensure_ascii=False,
            indent=2,
        )

    def import_data(self, data: str) -> bool:
        """Replace the cart with an exported payload; invalid payloads leave it untouched."""
        try:
            imported = _decode_items(
                json.loads(data), max_items=self.max_items, max_quantity=self.max_quantity
            )
        except (TypeError, ValueError, ValidationError):
            logger.warning("Rejected invalid cart import")
            return False

        def change() -> bool:
            self._items = imported
            return True

        return self._mutate(change)

    def shopping_list(self) -> str:
        lines = []
        for number, item in enumerate(self._items, start=1):
            symbol = currency_symbol(item.wine.price_currency)
            entry = f"{number}. {item.wine.name} ({symbol}{item.wine.price}) x{item.quantity}"
            if item.wine.link:
                entry += f"\n   {item.wine.link}"
            lines.append(entry)
        body = "\n\n".join(lines)
        currency = self._items[0].wine.price_currency if self._items else "EUR"
        total = f"{currency_symbol(currency)}{self.get_total_price():.2f}"
        return f"WINE SHOPPING LIST\n\n{body}\n\nTotal: {total}"

    def checkout_url(self, base_url: str | None = None) -> str:
        """Shop URL carrying the cart as base64 JSON in the ``sommelier_cart`` parameter."""
        base = base_url or settings.CHECKOUT_BASE_URL
        if not self._items:
            return base
        cart_data = [
            {
                "id": item.wine.id,
                "name": item.wine.name,
                "price": item.wine.price,
                "quantity": item.quantity,
                "url": item.wine.link,
            }
            for item in self._items
        ]
        encoded = base64.b64encode(
            json.dumps(cart_data, ensure_ascii=False).encode("utf-8")
        ).decode("ascii")
        separator = "&" if "?" in base else "?"
        return f"{base}{separator}{urlencode({'sommelier_cart': encoded})}"


__all__ = ["CartStore"]
