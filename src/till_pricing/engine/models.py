"""
Data models for the till pricing engine.

Uses dataclasses for structured, type-safe data representation. Each
catalog model knows how to read and write its JSON document shape
(camelCase member names, prices in pence).
"""
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..exceptions import TillError


def is_number(value: Any) -> bool:
    """True for finite ints/floats; bools and numeric strings do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _whole(value):
    """Collapse 3.0 to 3 so deal notes read '3 for ...' rather than '3.0 for ...'."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _parse_prices(raw: Any, owner: str) -> dict[str, int]:
    if not isinstance(raw, Mapping):
        raise TillError("INVALID_DOCUMENT", f"{owner}: pricesPence must be an object")
    prices = {}
    for unit, value in raw.items():
        if not is_number(value) or value < 0 or not float(value).is_integer():
            raise TillError(
                "INVALID_DOCUMENT",
                f"{owner}: price for '{unit}' must be a whole number of pence >= 0",
            )
        prices[str(unit)] = int(value)
    return prices


def _parse_units(raw: Any, owner: str) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(u, str) for u in raw):
        raise TillError("INVALID_DOCUMENT", f"{owner}: units must be a list of names")
    return list(raw)


def _require_str(raw: Mapping, key: str, owner: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        raise TillError("INVALID_DOCUMENT", f"{owner}: '{key}' is required")
    return value


def _check_units_priced(units: list[str], prices: dict[str, int], owner: str):
    missing = [u for u in units if u not in prices]
    if missing:
        raise TillError(
            "INVALID_DOCUMENT",
            f"{owner}: no price for unit(s) {', '.join(missing)}",
        )


@dataclass
class PriceBand:
    """A shared pricing tier (e.g. "Top Shelf Spirits") keyed by unit name."""
    id: str
    name: str
    units: list[str]
    prices_pence: dict[str, int]

    @classmethod
    def from_dict(cls, raw: Any) -> 'PriceBand':
        """Create a band from its JSON document shape."""
        if not isinstance(raw, Mapping):
            raise TillError("INVALID_DOCUMENT", "Each band must be an object")
        band_id = _require_str(raw, 'id', 'band')
        owner = f"band '{band_id}'"
        units = _parse_units(raw.get('units'), owner)
        prices = _parse_prices(raw.get('pricesPence'), owner)
        _check_units_priced(units, prices, owner)
        return cls(
            id=band_id,
            name=_require_str(raw, 'name', owner),
            units=units,
            prices_pence=prices,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "units": list(self.units),
            "pricesPence": dict(self.prices_pence),
        }


@dataclass
class BandPriced:
    """Product priced through a shared band."""
    band_id: str


@dataclass
class OverridePriced:
    """Product carrying its own units and prices."""
    units: list[str]
    prices_pence: dict[str, int]


Pricing = Union[BandPriced, OverridePriced]


@dataclass(frozen=True)
class BundleDeal:
    """Bundle promotion: N units for a fixed price, e.g. 3 for 700 pence."""
    trigger_qty: Union[int, float]
    price_pence: Union[int, float]

    @property
    def usable(self) -> bool:
        """Whether the pricing engine may apply this deal."""
        return (
            is_number(self.trigger_qty) and self.trigger_qty > 0
            and is_number(self.price_pence) and self.price_pence >= 0
        )

    def to_dict(self) -> dict:
        return {"type": "bundle", "qty": self.trigger_qty, "pricePence": self.price_pence}


@dataclass(frozen=True)
class UnsupportedDeal:
    """Unknown or malformed deal declaration, kept only so it survives export."""
    raw: Any

    def to_dict(self) -> Any:
        return self.raw


Deal = Union[BundleDeal, UnsupportedDeal]


def parse_deal(raw: Any) -> Deal:
    """
    Turn a raw deal declaration into a Deal variant.

    Never raises: anything that is not a well-formed bundle becomes an
    UnsupportedDeal, which the pricing engine skips.
    """
    if isinstance(raw, (BundleDeal, UnsupportedDeal)):
        return raw
    if not isinstance(raw, Mapping) or raw.get('type') != 'bundle':
        return UnsupportedDeal(raw)

    deal = BundleDeal(trigger_qty=raw.get('qty'), price_pence=raw.get('pricePence'))
    if not deal.usable:
        return UnsupportedDeal(raw)
    return BundleDeal(trigger_qty=_whole(deal.trigger_qty), price_pence=_whole(deal.price_pence))


@dataclass
class Product:
    """A sellable item on the till."""
    id: str
    name: str
    category: str
    pricing: Pricing
    deals: tuple = ()
    notes: Optional[str] = None

    @property
    def is_override(self) -> bool:
        return isinstance(self.pricing, OverridePriced)

    @classmethod
    def from_dict(cls, raw: Any) -> 'Product':
        """
        Create a product from its JSON document shape.

        A record with its own non-empty units and pricesPence is override
        priced even when it also names a bandId; the band reference is
        dropped. Anything else is band priced, possibly with a dangling or
        empty band id.
        """
        if not isinstance(raw, Mapping):
            raise TillError("INVALID_DOCUMENT", "Each product must be an object")
        product_id = _require_str(raw, 'id', 'product')
        owner = f"product '{product_id}'"

        units = raw.get('units')
        prices = raw.get('pricesPence')
        if units and prices:
            units = _parse_units(units, owner)
            prices = _parse_prices(prices, owner)
            _check_units_priced(units, prices, owner)
            pricing = OverridePriced(units=units, prices_pence=prices)
        else:
            band_id = raw.get('bandId') or ''
            if not isinstance(band_id, str):
                raise TillError("INVALID_DOCUMENT", f"{owner}: bandId must be a string")
            pricing = BandPriced(band_id=band_id)

        deals = raw.get('deals') or []
        if not isinstance(deals, list):
            raise TillError("INVALID_DOCUMENT", f"{owner}: deals must be a list")

        notes = raw.get('notes')
        return cls(
            id=product_id,
            name=_require_str(raw, 'name', owner),
            category=_require_str(raw, 'category', owner),
            pricing=pricing,
            deals=tuple(parse_deal(d) for d in deals),
            notes=notes if isinstance(notes, str) else None,
        )

    def to_dict(self) -> dict:
        data = {"id": self.id, "name": self.name, "category": self.category}
        if isinstance(self.pricing, OverridePriced):
            data["units"] = list(self.pricing.units)
            data["pricesPence"] = dict(self.pricing.prices_pence)
        else:
            data["bandId"] = self.pricing.band_id
        if self.deals:
            data["deals"] = [d.to_dict() for d in self.deals]
        if self.notes:
            data["notes"] = self.notes
        return data


@dataclass
class BasketLine:
    """One row of the sale ticket: product + unit + snapshot price, and a quantity."""
    key: str
    product_id: str
    label: str
    unit: str
    price_pence: int
    qty: int = 1

    @property
    def merge_key(self) -> tuple[str, str, int]:
        return (self.product_id, self.unit, self.price_pence)


@dataclass(frozen=True)
class LineTotal:
    """Result of pricing a basket line."""
    total_pence: Union[int, float]
    deal_note: Optional[str] = None


@dataclass
class CatalogDocument:
    """The whole till configuration: bands, products and the admin PIN flags."""
    bands: list[PriceBand] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    pin_enabled: bool = False
    pin: str = "1234"

    @classmethod
    def from_dict(cls, raw: Any) -> 'CatalogDocument':
        """Validate and build a document; raises TillError("INVALID_DOCUMENT")."""
        if not isinstance(raw, Mapping):
            raise TillError("INVALID_DOCUMENT", "Catalog must be a JSON object")
        bands = raw.get('bands')
        products = raw.get('products')
        if not isinstance(bands, list) or not isinstance(products, list):
            raise TillError("INVALID_DOCUMENT", "Catalog needs 'bands' and 'products' lists")

        pin = raw.get('pin', "1234")
        if not isinstance(pin, str):
            raise TillError("INVALID_DOCUMENT", "pin must be a string")

        document = cls(
            bands=[PriceBand.from_dict(b) for b in bands],
            products=[Product.from_dict(p) for p in products],
            pin_enabled=bool(raw.get('pinEnabled', False)),
            pin=pin,
        )
        for kind, items in (("band", document.bands), ("product", document.products)):
            ids = [item.id for item in items]
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise TillError("INVALID_DOCUMENT", f"Duplicate {kind} id(s): {', '.join(duplicates)}")
        return document

    def to_dict(self) -> dict:
        return {
            "pinEnabled": self.pin_enabled,
            "pin": self.pin,
            "bands": [b.to_dict() for b in self.bands],
            "products": [p.to_dict() for p in self.products],
        }
