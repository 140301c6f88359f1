import os
import sys
from contextlib import contextmanager
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

test_data_dir = ROOT / "artifacts" / "test-data"
test_data_dir.mkdir(parents=True, exist_ok=True)
os.environ["DATA_DIR"] = str(test_data_dir)
os.environ.pop("OPENAI_API_KEY", None)

from backend.sommelier.contracts import CatalogItem  # noqa: E402
from backend.sommelier.persistence import MemoryPersistence  # noqa: E402
from backend.sommelier.settings import settings  # noqa: E402

CATALOG_ROWS = [
    {
        "_id": "bordeaux-rouge",
        "productName": "Bordeaux Rouge AOP",
        "price": 8.49,
        "volume": "75cl",
        "pricePerLiter": "11.32 €/l",
        "discount": "",
        "link": "https://shop.example/bordeaux-rouge",
    },
    {
        "_id": "chardonnay",
        "productName": "Chardonnay Bourgogne Blanc",
        "price": 14.5,
        "volume": "75cl",
        "link": "https://shop.example/chardonnay",
    },
    {
        "_id": "provence-rose",
        "productName": "Côtes de Provence Rosé",
        "price": 11.9,
        "volume": "75cl",
        "discount": "-20%",
    },
    {
        "_id": "merlot",
        "productName": "Merlot Pays d'Oc",
        "price": 6.99,
        "volume": "75cl",
        "discount": None,
    },
    {
        "_id": "champagne",
        "productName": "Champagne Brut Réserve",
        "price": 32.0,
        "volume": "75cl",
    },
    {
        "_id": "margaux",
        "productName": "Château Margaux Rouge",
        "price": 65.0,
        "volume": "75cl",
    },
]


def _make_wine(**overrides) -> CatalogItem:
    row = {"_id": "demo", "productName": "Demo Rouge", "price": 9.99, "volume": "75cl"}
    row.update(overrides)
    return CatalogItem.model_validate(row)


@pytest.fixture
def make_wine():
    return _make_wine


@pytest.fixture
def catalog() -> list[CatalogItem]:
    return [CatalogItem.model_validate(row) for row in CATALOG_ROWS]


@pytest.fixture
def catalog_rows() -> list[dict]:
    return [dict(row) for row in CATALOG_ROWS]


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    yield


class FlakyPersistence(MemoryPersistence):
    """In-memory store whose load, save or lock can be switched to fail."""

    def __init__(self, blob: str | None = None) -> None:
        super().__init__(blob)
        self.fail_load = False
        self.fail_save = False
        self.fail_lock = False

    def load(self) -> str | None:
        if self.fail_load:
            raise OSError("storage unreadable")
        return super().load()

    def save(self, blob: str) -> None:
        if self.fail_save:
            raise OSError("storage read-only")
        super().save(blob)

    @contextmanager
    def lock(self):
        if self.fail_lock:
            raise TimeoutError("Could not acquire lock on store")
        with super().lock():
            yield


@pytest.fixture
def flaky_store() -> FlakyPersistence:
    return FlakyPersistence()
