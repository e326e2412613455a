from decimal import Decimal

import pytest

from src.labour_portal.labour_portal.common.money import format_hours, format_money, quantize_money, to_decimal


def test_half_up_rounding():
    assert quantize_money(Decimal("2.345")) == Decimal("2.35")
    assert quantize_money(Decimal("2.344")) == Decimal("2.34")


def test_format_money_always_two_places():
    assert format_money(Decimal("5")) == "5.00"
    assert format_money("12.5") == "12.50"
    assert format_hours(None) == "0.00"


def test_to_decimal_keeps_float_text():
    assert to_decimal(0.1) == Decimal("0.1")


@pytest.mark.parametrize("value", [True, "abc"])
def test_to_decimal_rejects_junk(value):
    with pytest.raises(ValueError):
        to_decimal(value)
