import pytest

from till_pricing.engine.money import format_pence, parse_cash_input, parse_price_input
from till_pricing.exceptions import TillError


@pytest.mark.parametrize("pence, text", [
    (450, "£4.50"),
    (700, "£7.00"),
    (5, "£0.05"),
    (0, "£0.00"),
    (None, "£0.00"),
    (123450, "£1,234.50"),
    (-100, "-£1.00"),
])
def test_format_pence(pence, text):
    assert format_pence(pence) == text


@pytest.mark.parametrize("text, pence", [
    ("12.34", 1234),
    ("20", 2000),
    ("£20", 2000),
    (" 5.5 ", 550),
    ("0.015", 2),
    ("", 0),
    (None, 0),
    ("abc", 0),
    ("1.2.3", 0),
    (".", 0),
])
def test_parse_cash_input(text, pence):
    assert parse_cash_input(text) == pence


@pytest.mark.parametrize("value, pence", [
    ("3.10", 310),
    ("£4", 400),
    (3.1, 310),
    (0, 0),
])
def test_parse_price_input(value, pence):
    assert parse_price_input(value) == pence


@pytest.mark.parametrize("value", ["", "abc", "-1", "nan", "inf", "1,50"])
def test_parse_price_input_rejects_bad_entries(value):
    with pytest.raises(TillError) as exc:
        parse_price_input(value)
    assert exc.value.code == "INVALID_AMOUNT"
