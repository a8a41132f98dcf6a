"""
Money helpers.

All amounts inside the till are integer pence. These helpers turn pence into
display strings and turn typed pound amounts back into pence.
"""
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from ..exceptions import TillError

CURRENCY_SYMBOL = "£"

_NOT_CASH_CHARS = re.compile(r"[^\d.]")


def format_pence(pence: Optional[Union[int, float]]) -> str:
    """Render pence as GBP, e.g. 450 -> '£4.50', 123450 -> '£1,234.50'."""
    pence = pence or 0
    sign = "-" if pence < 0 else ""
    pounds, rem = divmod(_round_half_up(abs(Decimal(str(pence)))), 100)
    return f"{sign}{CURRENCY_SYMBOL}{pounds:,}.{rem:02d}"


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _pounds_to_pence(pounds: Decimal) -> int:
    return _round_half_up(pounds * 100)


def parse_cash_input(text: Optional[str]) -> int:
    """
    Parse the cash-received box leniently.

    Accepts "12.34", "12", "£20" and similar; anything left unparseable after
    dropping non-digit characters counts as 0 so the till stays usable.
    """
    cleaned = _NOT_CASH_CHARS.sub("", text or "")
    if not cleaned:
        return 0
    try:
        return _pounds_to_pence(Decimal(cleaned))
    except InvalidOperation:
        return 0


def parse_price_input(text: Union[str, int, float]) -> int:
    """
    Parse an admin price entry in pounds (e.g. "3.10") into pence.

    Raises:
        TillError("INVALID_AMOUNT") for empty, non-numeric, non-finite or
        negative input.
    """
    raw = str(text).strip().lstrip(CURRENCY_SYMBOL).strip()
    try:
        pounds = Decimal(raw)
    except InvalidOperation:
        raise TillError("INVALID_AMOUNT", f"'{text}' is not a price", value=str(text))
    if not pounds.is_finite() or pounds < 0:
        raise TillError("INVALID_AMOUNT", f"'{text}' is not a price", value=str(text))
    return _pounds_to_pence(pounds)
