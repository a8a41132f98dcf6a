"""
Catalog Service - Holds the till catalog and performs admin edits.

Handles reading/writing the catalog JSON file, JSON import/export,
category/search queries and price edits. Every change is written back to
the store file when one is configured, so the catalog survives restarts.
"""
import json
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import Settings, get_settings
from ..engine.catalog_resolver import resolve_units_and_prices
from ..engine.models import BundleDeal, CatalogDocument, OverridePriced, PriceBand, Product
from ..exceptions import TillError

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for looking up and editing the till catalog."""

    PRICE_LIST_COLUMNS = ['Product', 'Category', 'Unit', 'Price (p)', 'Source', 'Deals']

    def __init__(self, settings: Optional[Settings] = None, store_path: Optional[Path] = None):
        self.settings = settings or get_settings()
        self.store_path = store_path if store_path is not None else self.settings.catalog_store
        self.document = self._load()

    # ------------------------------------------------------------------
    # Loading / persistence
    # ------------------------------------------------------------------

    def _load(self) -> CatalogDocument:
        """Load the stored catalog, falling back to the built-in defaults."""
        if self.store_path and self.store_path.exists():
            try:
                document = self._parse(self.store_path.read_text(encoding='utf-8'))
                logger.info("Loaded catalog from %s", self.store_path)
                return document
            except TillError as e:
                logger.warning("Stored catalog %s unusable (%s); using defaults", self.store_path, e)
        return self.default_document()

    def default_document(self) -> CatalogDocument:
        """A fresh copy of the built-in pub catalog."""
        return self._parse(self.settings.default_catalog.read_text(encoding='utf-8'))

    @staticmethod
    def _parse(text: str) -> CatalogDocument:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise TillError("INVALID_JSON", f"Invalid JSON file: {e.msg} (line {e.lineno})")
        return CatalogDocument.from_dict(raw)

    def save(self):
        """Write the catalog back to the store file (no-op without one)."""
        if not self.store_path:
            return
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        self.store_path.write_text(self.export_json(), encoding='utf-8')

    def _replace(self, document: CatalogDocument):
        self.document = document
        self.save()

    # ------------------------------------------------------------------
    # Lookups and queries
    # ------------------------------------------------------------------

    @property
    def bands(self) -> list[PriceBand]:
        return self.document.bands

    @property
    def products(self) -> list[Product]:
        return self.document.products

    def band_lookup(self) -> dict[str, PriceBand]:
        return {b.id: b for b in self.document.bands}

    def product_lookup(self) -> dict[str, Product]:
        return {p.id: p for p in self.document.products}

    def get_product(self, product_id: str) -> Product:
        """Get a single product by ID."""
        for product in self.document.products:
            if product.id == product_id:
                return product
        raise TillError("PRODUCT_NOT_FOUND", f"Product '{product_id}' not found", product_id=product_id)

    def get_band(self, band_id: str) -> PriceBand:
        for band in self.document.bands:
            if band.id == band_id:
                return band
        raise TillError("BAND_NOT_FOUND", f"Price band '{band_id}' not found", band_id=band_id)

    def units_and_prices(self, product_id: str) -> tuple[list[str], dict[str, int]]:
        return resolve_units_and_prices(self.get_product(product_id), self.band_lookup())

    def categories(self) -> list[str]:
        """Product categories in the order they first appear."""
        return list(dict.fromkeys(p.category for p in self.document.products))

    def filter_products(self, category: Optional[str] = None, search: str = "") -> list[Product]:
        """Products in a category whose name contains `search`, sorted by name."""
        query = (search or "").strip().lower()
        matches = [
            p for p in self.document.products
            if (category is None or p.category == category)
            and (not query or query in p.name.lower())
        ]
        return sorted(matches, key=lambda p: p.name.lower())

    def pinned_products(self, category: str) -> list[Product]:
        """Quick add-ons configured for a category tab (unknown ids are skipped)."""
        lookup = self.product_lookup()
        ids = self.settings.pinned_products.get(category, ())
        return [lookup[i] for i in ids if i in lookup]

    def override_products(self) -> list[Product]:
        return [p for p in self.document.products if p.is_override]

    def price_list_frame(self) -> pd.DataFrame:
        """One row per product and unit with its resolved price."""
        bands = self.band_lookup()
        rows = []
        for product in self.document.products:
            units, prices = resolve_units_and_prices(product, bands)
            if product.is_override:
                source = "Override"
            elif product.pricing.band_id in bands:
                source = bands[product.pricing.band_id].name
            else:
                source = "Missing band"
            deals = ", ".join(
                f"{d.trigger_qty} for {d.price_pence}p"
                for d in product.deals if isinstance(d, BundleDeal)
            )
            for unit in units:
                rows.append({
                    'Product': product.name,
                    'Category': product.category,
                    'Unit': unit,
                    'Price (p)': prices.get(unit, 0),
                    'Source': source,
                    'Deals': deals,
                })
        return pd.DataFrame(rows, columns=self.PRICE_LIST_COLUMNS)

    # ------------------------------------------------------------------
    # Admin edits
    # ------------------------------------------------------------------

    def update_band_price(self, band_id: str, unit: str, price_pence: int) -> PriceBand:
        """Set one unit price on a band; every product on the band sees it."""
        band = self.get_band(band_id)
        if unit not in band.units:
            raise TillError("UNIT_NOT_FOUND", f"Band '{band_id}' has no unit '{unit}'", unit=unit)
        _check_price(price_pence)

        band.prices_pence = {**band.prices_pence, unit: int(price_pence)}
        logger.info("Band price updated", extra={"extra": {"band_id": band_id, "unit": unit, "price_pence": price_pence}})
        self.save()
        return band

    def update_override_price(self, product_id: str, unit: str, price_pence: int) -> Product:
        """Set one unit price on an individually priced product."""
        product = self.get_product(product_id)
        if not isinstance(product.pricing, OverridePriced):
            raise TillError("NOT_OVERRIDE_PRICED", f"Product '{product_id}' is priced by a band", product_id=product_id)
        if unit not in product.pricing.units:
            raise TillError("UNIT_NOT_FOUND", f"Product '{product_id}' has no unit '{unit}'", unit=unit)
        _check_price(price_pence)

        product.pricing = OverridePriced(
            units=product.pricing.units,
            prices_pence={**product.pricing.prices_pence, unit: int(price_pence)},
        )
        logger.info("Override price updated", extra={"extra": {"product_id": product_id, "unit": unit, "price_pence": price_pence}})
        self.save()
        return product

    def set_pin_enabled(self, enabled: bool):
        self.document.pin_enabled = bool(enabled)
        self.save()

    def set_pin(self, pin: Optional[str]):
        """Change the admin PIN; a blank entry restores the default PIN."""
        self.document.pin = (pin or "").strip() or self.settings.default_pin
        self.save()

    def reset_defaults(self):
        """Replace the whole catalog with the built-in defaults."""
        self._replace(self.default_document())
        logger.info("Catalog reset to defaults")

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_json(self) -> str:
        return json.dumps(self.document.to_dict(), indent=2, ensure_ascii=False)

    def import_json(self, text: str) -> CatalogDocument:
        """
        Replace the catalog with an imported JSON document.

        The document is fully validated before anything changes, so a bad
        file leaves the current catalog untouched.
        """
        try:
            document = self._parse(text)
        except TillError as e:
            logger.warning("Catalog import rejected: %s", e.message)
            raise
        self._replace(document)
        logger.info(
            "Imported catalog",
            extra={"extra": {"bands": len(document.bands), "products": len(document.products)}},
        )
        return document

    def get_stats(self) -> dict:
        """Get statistics about the catalog."""
        bands = self.band_lookup()
        dangling = [
            p.id for p in self.document.products
            if not p.is_override and p.pricing.band_id not in bands
        ]
        return {
            'bands': len(self.document.bands),
            'products': len(self.document.products),
            'override_priced': len(self.override_products()),
            'with_deals': sum(1 for p in self.document.products if p.deals),
            'dangling_band_refs': dangling,
            'pin_enabled': self.document.pin_enabled,
        }


def _check_price(price_pence):
    if isinstance(price_pence, bool) or not isinstance(price_pence, int) or price_pence < 0:
        raise TillError("INVALID_AMOUNT", f"Price must be whole pence >= 0, got {price_pence!r}")
