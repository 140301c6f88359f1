from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = REPO_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", extra="ignore"
    )

    # human-readable console logs instead of JSON
    DEBUG: bool = False
    SERVICE_ENVIRONMENT: str = "development"

    # persistence directory for the cart and suggestion stores
    DATA_DIR: Path | None = None
    STORE_LOCK_TIMEOUT_SECONDS: float = 10.0

    # Text generation
    OPENAI_API_KEY: str | None = None
    OPENAI_API_BASE: str = "https://api.openai.com/v1"
    OPENAI_TIMEOUT_SECONDS: float = 15.0
    OPENAI_CONNECT_TIMEOUT_SECONDS: float = 5.0
    SOMMELIER_GPT_MODEL: str = "gpt-4o"
    SOMMELIER_MAX_OUTPUT_TOKENS: int = 400
    SOMMELIER_TEMPERATURE: float = 0.7
    SOMMELIER_GENERATION_TIMEOUT_SECONDS: float = 20.0
    SOMMELIER_BREAKER_FAILURES: int = 3
    SOMMELIER_BREAKER_COOLDOWN_SECONDS: float = 300.0

    # Advisory limits
    RECOMMENDATION_LIMIT: int = 4
    SUGGESTION_TARGET: int = 6
    DEFAULT_LANGUAGE: Literal["en", "fr", "nl"] = "en"

    # Cart
    CART_MAX_ITEMS: int = 20
    CART_MAX_QUANTITY: int = 10
    CHECKOUT_BASE_URL: str = "https://www.delhaize.be/fr/shop"

    @property
    def data_dir(self) -> Path:
        # An empty DATA_DIR in `.env` would resolve to Path('.'); treat blank values as unset.
        def _materialize(path: Path) -> Path:
            path.mkdir(parents=True, exist_ok=True)
            return path

        raw_env = os.getenv("DATA_DIR")
        if raw_env is not None:
            trimmed = raw_env.strip()
            if trimmed:
                return _materialize(Path(trimmed).expanduser().resolve())
            return _materialize(Path.home() / ".sommelier-data")

        if self.DATA_DIR is not None:
            candidate = Path(self.DATA_DIR).expanduser()
            candidate_str = str(candidate).strip()
            if candidate_str and candidate_str not in {".", "./", ".\\"}:
                return _materialize(candidate.resolve())
        return _materialize(Path.home() / ".sommelier-data")

    @property
    def cart_path(self) -> Path:
        return self.data_dir / "cart.json"

    @property
    def suggestions_path(self) -> Path:
        return self.data_dir / "suggestions.json"

    @property
    def generation_enabled(self) -> bool:
        return bool((self.OPENAI_API_KEY or "").strip())


settings = Settings()
