import json

import pytest
from backend.sommelier.catalog import CatalogError, load_catalog, parse_catalog
from backend.sommelier.contracts import CatalogItem


def test_parse_bare_list(catalog_rows):
    items = parse_catalog(catalog_rows)
    assert [item.id for item in items][:2] == ["bordeaux-rouge", "chardonnay"]
    assert items[0].name == "Bordeaux Rouge AOP"
    assert items[0].price_per_liter == "11.32 €/l"


def test_parse_scraper_wrapper_skips_invalid_and_duplicates(catalog_rows):
    payload = {
        "workflowId": "wf",
        "runId": "run",
        "executedAt": "2025-01-01T00:00:00Z",
        "data": [catalog_rows[0], {"productName": "No id"}, catalog_rows[0], catalog_rows[1]],
        "totalCount": 4,
    }
    items = parse_catalog(payload)
    assert [item.id for item in items] == ["bordeaux-rouge", "chardonnay"]


def test_parse_rejects_other_shapes():
    with pytest.raises(CatalogError):
        parse_catalog("wines")


def test_load_catalog(tmp_path, catalog_rows):
    path = tmp_path / "wines.json"
    path.write_text(json.dumps({"data": catalog_rows}), encoding="utf-8")
    assert len(load_catalog(path)) == len(catalog_rows)


def test_load_catalog_errors(tmp_path):
    with pytest.raises(CatalogError, match="not found"):
        load_catalog(tmp_path / "missing.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(CatalogError, match="Invalid"):
        load_catalog(broken)


@pytest.mark.parametrize(
    ("discount", "expected"),
    [("", False), (None, False), ("null", False), ("0", False), ("-20%", True), ("2+1", True)],
)
def test_has_discount(discount, expected):
    item = CatalogItem.model_validate(
        {"_id": "x", "productName": "Demo", "price": 5, "discount": discount}
    )
    assert item.has_discount is expected


def test_negative_price_is_rejected():
    with pytest.raises(ValueError):
        CatalogItem.model_validate({"_id": "x", "productName": "Demo", "price": -1})
