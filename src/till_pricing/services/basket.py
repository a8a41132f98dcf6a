"""
Basket - The current sale: lines, cash received and change.

The basket is owned by the caller (API process, Streamlit session). It
snapshots the unit price when a line is added and asks the deal engine for
line totals whenever totals are needed, using the product's current deals.
"""
import logging
import uuid
from collections.abc import Mapping
from typing import Optional

from ..engine.catalog_resolver import FALLBACK_UNIT, unit_price
from ..engine.deal_engine import best_line_total
from ..engine.models import BasketLine, LineTotal, PriceBand, Product
from ..engine.money import parse_cash_input
from ..exceptions import TillError

logger = logging.getLogger(__name__)


def line_label(product: Product, unit: str) -> str:
    """'Guinness (Pint)', or just the name for single-unit items."""
    return product.name if unit == FALLBACK_UNIT else f"{product.name} ({unit})"


def _new_key() -> str:
    return uuid.uuid4().hex[:8]


class Basket:
    """
    Lines of the current sale.

    Lines are merged on (product id, unit, unit price). A price edit between
    two adds of the same unit therefore gives two lines, one per price.
    """

    def __init__(self):
        self.lines: list[BasketLine] = []
        self.cash_pence = 0
        self.last_add_key: Optional[str] = None

    def __len__(self) -> int:
        return len(self.lines)

    def get_line(self, key: str) -> BasketLine:
        for line in self.lines:
            if line.key == key:
                return line
        raise TillError("LINE_NOT_FOUND", f"Basket line '{key}' not found", key=key)

    def add(self, product: Product, unit: str, band_lookup: Mapping[str, PriceBand]) -> BasketLine:
        """Add one of `unit` at its current price."""
        price = unit_price(product, unit, band_lookup)

        for line in self.lines:
            if line.merge_key == (product.id, unit, price):
                line.qty += 1
                self.last_add_key = line.key
                return line

        line = BasketLine(
            key=_new_key(),
            product_id=product.id,
            label=line_label(product, unit),
            unit=unit,
            price_pence=price,
            qty=1,
        )
        self.lines.append(line)
        self.last_add_key = line.key
        logger.debug("Basket line added", extra={"extra": {"product_id": product.id, "unit": unit, "price_pence": price}})
        return line

    def increment(self, key: str) -> BasketLine:
        line = self.get_line(key)
        line.qty += 1
        return line

    def decrement(self, key: str) -> Optional[BasketLine]:
        """Take one off a line; the line is removed when it reaches zero."""
        line = self.get_line(key)
        line.qty -= 1
        if line.qty <= 0:
            self.lines.remove(line)
            return None
        return line

    def remove(self, key: str):
        self.lines.remove(self.get_line(key))

    def undo_last_add(self) -> Optional[BasketLine]:
        """Take back the most recent add; does nothing if that line is gone."""
        if not self.last_add_key:
            return None
        try:
            return self.decrement(self.last_add_key)
        except TillError:
            return None

    def clear(self):
        """Start a new sale."""
        self.lines = []
        self.cash_pence = 0
        self.last_add_key = None

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def line_total(self, line: BasketLine, product_lookup: Mapping[str, Product]) -> LineTotal:
        product = product_lookup.get(line.product_id)
        deals = product.deals if product is not None else None
        return best_line_total(line.price_pence, line.qty, deals)

    def total(self, product_lookup: Mapping[str, Product]) -> int:
        return sum(self.line_total(line, product_lookup).total_pence for line in self.lines)

    def set_cash(self, pence: int):
        self.cash_pence = max(0, int(pence))

    def set_cash_from_text(self, text: str) -> int:
        self.cash_pence = parse_cash_input(text)
        return self.cash_pence

    def set_cash_exact(self, product_lookup: Mapping[str, Product]) -> int:
        self.cash_pence = self.total(product_lookup)
        return self.cash_pence

    def change(self, product_lookup: Mapping[str, Product]) -> int:
        """Cash minus total; negative means the customer still owes."""
        return self.cash_pence - self.total(product_lookup)

    def summary(self, product_lookup: Mapping[str, Product]) -> dict:
        """Lines with totals and deal notes, plus sale total, cash and change."""
        lines = []
        for line in self.lines:
            priced = self.line_total(line, product_lookup)
            lines.append({
                "key": line.key,
                "product_id": line.product_id,
                "label": line.label,
                "unit": line.unit,
                "price_pence": line.price_pence,
                "qty": line.qty,
                "total_pence": priced.total_pence,
                "deal_note": priced.deal_note,
            })
        total = sum(l["total_pence"] for l in lines)
        return {
            "lines": lines,
            "total_pence": total,
            "cash_pence": self.cash_pence,
            "change_pence": self.cash_pence - total,
        }
