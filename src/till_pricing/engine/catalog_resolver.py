"""
Catalog Resolver - Works out which units a product sells and at what price.

Resolution order:
1. Product's own units and prices (override), if both are non-empty
2. The referenced price band's units and prices
3. Fallback single unit "One" at 0 pence for a dangling band reference
"""
from collections.abc import Mapping

from .models import BandPriced, OverridePriced, PriceBand, Product

FALLBACK_UNIT = "One"


def _fallback() -> tuple[list[str], dict[str, int]]:
    # Fresh objects each call so callers can never edit a shared fallback
    return [FALLBACK_UNIT], {FALLBACK_UNIT: 0}


def resolve_units_and_prices(
    product: Product,
    band_lookup: Mapping[str, PriceBand],
) -> tuple[list[str], dict[str, int]]:
    """
    Resolve a product's sellable units and pence prices.

    Band prices are returned as the band's own objects, so every product
    sharing a band sees edits to that band. A band id missing from
    `band_lookup` is not an error: the product sells as a single "One" unit
    at 0, which shows up on the till as an obviously wrong price.

    Args:
        product: Product to resolve
        band_lookup: Mapping of band id -> PriceBand

    Returns:
        (units, prices_pence)
    """
    pricing = product.pricing

    if isinstance(pricing, OverridePriced):
        if pricing.units and pricing.prices_pence:
            return pricing.units, pricing.prices_pence
        return _fallback()

    if isinstance(pricing, BandPriced):
        band = band_lookup.get(pricing.band_id)
        if band is not None:
            return band.units, band.prices_pence

    return _fallback()


def unit_price(product: Product, unit: str, band_lookup: Mapping[str, PriceBand]) -> int:
    """Resolved price of one unit; units without a price ring up at 0."""
    _, prices = resolve_units_and_prices(product, band_lookup)
    return prices.get(unit, 0)
