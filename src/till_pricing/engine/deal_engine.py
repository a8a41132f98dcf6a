"""
Deal Engine - Cheapest total for a basket line under bundle deals.

Each bundle deal is tried on its own against the whole quantity
(floor(qty / N) bundles plus the remainder at unit price) and the cheapest
outcome wins. Deals are never combined with each other on one line.
"""
import math
from collections.abc import Iterable
from typing import Any, Optional, Union

from .models import BundleDeal, LineTotal, parse_deal
from .money import format_pence


def usable_bundles(deals: Optional[Iterable[Any]]) -> list[BundleDeal]:
    """
    Keep only well-formed bundle deals, in declaration order.

    Accepts Deal objects or raw JSON declarations. Unknown deal types and
    malformed bundles (non-positive quantity, negative or non-numeric price)
    are dropped without error.
    """
    bundles = []
    for raw in deals or ():
        deal = parse_deal(raw)
        if isinstance(deal, BundleDeal) and deal.usable:
            bundles.append(deal)
    return bundles


def deal_note(deal: BundleDeal, bundle_count: int) -> str:
    """Human-readable note, e.g. '3 for £7.00 × 2'."""
    return f"{deal.trigger_qty} for {format_pence(deal.price_pence)} × {bundle_count}"


def best_line_total(
    unit_price: Union[int, float],
    qty: int,
    deals: Optional[Iterable[Any]] = None,
) -> LineTotal:
    """
    Calculate the cheapest total for `qty` units at `unit_price`.

    Args:
        unit_price: Price of one unit in pence
        qty: Line quantity
        deals: Product's deal declarations (Deal objects or raw mappings)

    Returns:
        LineTotal with the total in pence and a deal note, or no note when
        no deal beat the plain price
    """
    best = LineTotal(total_pence=unit_price * qty, deal_note=None)

    if qty <= 0 or not deals:
        return best

    for deal in usable_bundles(deals):
        bundle_count = math.floor(qty / deal.trigger_qty)
        remainder = qty % deal.trigger_qty
        total = bundle_count * deal.price_pence + remainder * unit_price

        # Strictly cheaper only: on a tie the earlier deal stays
        if total < best.total_pence:
            best = LineTotal(
                total_pence=total,
                deal_note=deal_note(deal, bundle_count) if bundle_count > 0 else None,
            )

    return best
