"""Engine subpackage - core pricing logic and resolution."""
from .catalog_resolver import resolve_units_and_prices, unit_price
from .deal_engine import best_line_total
from .models import (
    BandPriced,
    BasketLine,
    BundleDeal,
    CatalogDocument,
    LineTotal,
    OverridePriced,
    PriceBand,
    Product,
    UnsupportedDeal,
)
from .money import format_pence

__all__ = [
    'resolve_units_and_prices', 'unit_price', 'best_line_total', 'format_pence',
    'BandPriced', 'OverridePriced', 'PriceBand', 'Product', 'BundleDeal',
    'UnsupportedDeal', 'BasketLine', 'LineTotal', 'CatalogDocument',
]
