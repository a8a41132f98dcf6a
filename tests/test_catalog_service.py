"""
Catalog service tests: queries, admin edits, import/export and persistence.
"""
import dataclasses
import json

import pytest

from till_pricing.exceptions import TillError
from till_pricing.services.catalog_service import CatalogService


def test_categories_in_first_seen_order(catalog):
    assert catalog.categories() == [
        "Spirits", "Draft", "Shots", "Softs", "Add-ons", "Other", "Cocktails", "Bottles", "Wine",
    ]


def test_filter_products_sorted_by_name(catalog):
    names = [p.name for p in catalog.filter_products("Bottles")]
    assert names == ["Big Bottles", "Butty Back", "Hooch", "Newcastle Brown Ale", "Small Bottles"]


def test_filter_products_search_is_case_insensitive(catalog):
    assert [p.id for p in catalog.filter_products("Draft", "  GUIN ")] == ["p-guinness"]
    assert catalog.filter_products("Spirits", "guin") == []


def test_pinned_products(catalog):
    assert [p.id for p in catalog.pinned_products("Spirits")] == ["p-mixer-charge"]
    assert catalog.pinned_products("Draft") == []


def test_band_price_edit_reaches_every_product(catalog):
    catalog.update_band_price("band-top-shelf-spirits", "Double", 550)
    units, prices = catalog.units_and_prices("p-top-shelf-spirit")
    assert units == ["Single", "Double"]
    assert prices == {"Single": 310, "Double": 550}


@pytest.mark.parametrize("band_id, unit, price, code", [
    ("band-missing", "Single", 100, "BAND_NOT_FOUND"),
    ("band-low-abv", "Treble", 100, "UNIT_NOT_FOUND"),
    ("band-low-abv", "Single", -1, "INVALID_AMOUNT"),
    ("band-low-abv", "Single", 2.5, "INVALID_AMOUNT"),
])
def test_band_price_edit_errors(catalog, band_id, unit, price, code):
    with pytest.raises(TillError) as exc:
        catalog.update_band_price(band_id, unit, price)
    assert exc.value.code == code
    assert catalog.get_band("band-low-abv").prices_pence == {"Single": 260, "Double": 420}


def test_override_price_edit(catalog):
    catalog.update_override_price("p-j20", "Mixer", 220)
    assert catalog.units_and_prices("p-j20")[1] == {"One": 250, "Mixer": 220}


def test_override_edit_rejects_band_product(catalog):
    with pytest.raises(TillError) as exc:
        catalog.update_override_price("p-low-abv", "Single", 100)
    assert exc.value.code == "NOT_OVERRIDE_PRICED"


def test_unknown_product(catalog):
    with pytest.raises(TillError) as exc:
        catalog.get_product("p-nothing")
    assert exc.value.code == "PRODUCT_NOT_FOUND"


def test_invalid_json_import_changes_nothing(catalog):
    before = catalog.document
    with pytest.raises(TillError) as exc:
        catalog.import_json("{not json")
    assert exc.value.code == "INVALID_JSON"
    assert catalog.document is before


def test_invalid_document_import_changes_nothing(catalog):
    before = catalog.document
    bad = {"bands": [], "products": [{"id": "p", "name": "P", "category": "C"}, {"oops": 1}]}
    with pytest.raises(TillError) as exc:
        catalog.import_json(json.dumps(bad))
    assert exc.value.code == "INVALID_DOCUMENT"
    assert catalog.document is before


def test_import_replaces_catalog(catalog):
    doc = {
        "pinEnabled": True,
        "pin": "4321",
        "bands": [{"id": "b1", "name": "House", "units": ["Single"], "pricesPence": {"Single": 250}}],
        "products": [{"id": "p1", "name": "House Vodka", "category": "Spirits", "bandId": "b1"}],
    }
    catalog.import_json(json.dumps(doc))

    assert catalog.categories() == ["Spirits"]
    assert catalog.units_and_prices("p1") == (["Single"], {"Single": 250})
    assert catalog.document.pin_enabled is True
    assert catalog.document.pin == "4321"


def test_export_json(catalog):
    exported = json.loads(catalog.export_json())
    assert set(exported) == {"pinEnabled", "pin", "bands", "products"}
    bombs = next(p for p in exported["products"] if p["id"] == "p-bombs")
    assert bombs["deals"] == [{"type": "bundle", "qty": 3, "pricePence": 700}]


def test_pin_settings(catalog):
    catalog.set_pin_enabled(True)
    catalog.set_pin("9999")
    assert (catalog.document.pin_enabled, catalog.document.pin) == (True, "9999")

    catalog.set_pin("   ")
    assert catalog.document.pin == "1234"


def test_reset_defaults(catalog):
    catalog.update_override_price("p-vape", "One", 650)
    catalog.reset_defaults()
    assert catalog.units_and_prices("p-vape")[1] == {"One": 600}


def test_price_list_frame(catalog):
    frame = catalog.price_list_frame()

    assert list(frame.columns) == CatalogService.PRICE_LIST_COLUMNS
    pint = frame[(frame["Product"] == "Guinness") & (frame["Unit"] == "Pint")]
    assert pint.iloc[0]["Price (p)"] == 450
    assert pint.iloc[0]["Source"] == "Override"
    spirit = frame[frame["Product"] == "Premium Spirit"]
    assert set(spirit["Source"]) == {"Premium Spirits"}
    assert frame[frame["Product"] == "Bombs"].iloc[0]["Deals"] == "3 for 700p"


def test_stats_report_dangling_band(catalog):
    catalog.import_json(json.dumps({
        "bands": [],
        "products": [{"id": "p-orphan", "name": "Orphan", "category": "Spirits", "bandId": "gone"}],
    }))
    stats = catalog.get_stats()
    assert stats["dangling_band_refs"] == ["p-orphan"]
    frame = catalog.price_list_frame()
    assert frame.iloc[0]["Source"] == "Missing band"
    assert frame.iloc[0]["Price (p)"] == 0


def test_edits_persist_to_store(settings, tmp_path):
    store = tmp_path / "till.json"
    stored_settings = dataclasses.replace(settings, catalog_store=store)

    CatalogService(stored_settings).update_band_price("band-low-abv", "Single", 275)

    reloaded = CatalogService(stored_settings)
    assert reloaded.get_band("band-low-abv").prices_pence["Single"] == 275


def test_corrupt_store_falls_back_to_defaults(settings, tmp_path):
    store = tmp_path / "till.json"
    store.write_text("{broken", encoding="utf-8")

    service = CatalogService(dataclasses.replace(settings, catalog_store=store))
    assert len(service.products) == 24
