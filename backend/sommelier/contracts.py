from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Language = Literal["en", "fr", "nl"]
WineColor = Literal["red", "white", "rose", "sparkling"]
PriceTier = Literal["budget", "mid", "premium", "luxury"]

LANGUAGES: tuple[str, ...] = ("en", "fr", "nl")
NO_DISCOUNT_MARKERS = {"", "null", "0"}


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Catalog ---
class CatalogItem(BaseModel):
    """One wine of a catalog snapshot, as scraped from the retailer."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="_id", min_length=1)
    name: str = Field(alias="productName")
    price: float = Field(ge=0)
    price_currency: str = Field(default="EUR", alias="priceCurrency")
    original_price: float | None = Field(default=None, alias="originalPrice")
    volume: str = ""
    price_per_liter: str = Field(default="", alias="pricePerLiter")
    discount: str = ""
    link: str = ""
    image: str = ""

    @field_validator("volume", "price_per_liter", "discount", "link", "image", mode="before")
    @classmethod
    def _labels(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("id", mode="before")
    @classmethod
    def _identifier(cls, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    @property
    def has_discount(self) -> bool:
        return self.discount.strip().lower() not in NO_DISCOUNT_MARKERS


# --- Preferences ---
class PreferenceRecord(BaseModel):
    color: WineColor | None = None
    price_range: PriceTier | None = None
    food: str = ""
    occasion: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.color or self.price_range or self.food or self.occasion)


# --- Cart ---
class CartItem(BaseModel):
    wine: CatalogItem
    quantity: int = Field(ge=1)
    added_at: datetime = Field(default_factory=utcnow, alias="addedAt")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def line_total(self) -> float:
        return self.wine.price * self.quantity


# --- Suggestions ---
class SuggestionEntry(BaseModel):
    text: str
    count: int = Field(default=1, ge=1)
    language: Language
    first_seen: int = 0
    last_used: datetime = Field(default_factory=utcnow)


# --- Advisory request/response ---
class AdvisoryRequest(BaseModel):
    message: str
    language: Language = "en"
    wines: list[CatalogItem] = Field(default_factory=list)

    @field_validator("language", mode="before")
    @classmethod
    def _language(cls, value: Any) -> str:
        lowered = str(value or "en").strip().lower()
        return lowered if lowered in LANGUAGES else "en"


class MessagePart(BaseModel):
    """One renderable block of an assistant turn, discriminated by ``kind``."""

    kind: Literal["text", "recommendation_set", "food_pairing_set"]
    payload: str | list[CatalogItem] | list[str]


class AdvisoryResponse(BaseModel):
    message: str
    recommendations: list[CatalogItem] | None = None
    food_pairings: list[str] | None = None
    needs_more_info: bool | None = None
    preferences: PreferenceRecord | None = None
    source: Literal["generator", "fallback", "clarification"] = "fallback"

    def parts(self) -> list[MessagePart]:
        blocks = [MessagePart(kind="text", payload=self.message)]
        if self.recommendations:
            blocks.append(MessagePart(kind="recommendation_set", payload=list(self.recommendations)))
        if self.food_pairings:
            blocks.append(MessagePart(kind="food_pairing_set", payload=list(self.food_pairings)))
        return blocks
