from decimal import Decimal as D

import pytest

from feecalc.core.errors import InvalidAmountError
from feecalc.inputs import (
    COMMON_DISCOUNTS,
    InputUnit,
    format_rate,
    round_cents,
    to_base_amount,
    to_wanyuan,
)


def test_wanyuan_is_ten_thousand_yuan():
    assert to_base_amount("600", InputUnit.WANYUAN) == D("6000000")
    assert to_base_amount("600", "wanyuan") == D("6000000")
    assert to_base_amount(600.5, "yuan") == D("600.5")


def test_default_unit_is_wanyuan():
    assert to_base_amount(1) == D("10000")


def test_invalid_amount_rejected_before_scaling():
    with pytest.raises(InvalidAmountError):
        to_base_amount("-3", "wanyuan")
    with pytest.raises(InvalidAmountError):
        to_base_amount("", "yuan")


def test_unknown_unit():
    with pytest.raises(ValueError):
        to_base_amount("1", "dollars")


def test_to_wanyuan():
    assert to_wanyuan(D("56950")) == D("5.695")


def test_round_cents_half_up():
    assert round_cents(D("12.345")) == D("12.35")
    assert round_cents(0.125) == D("0.13")
    assert str(round_cents(D("67000.000"))) == "67000.00"


def test_format_rate():
    assert format_rate(D("1.5")) == "1.50%"
    assert format_rate(D("0.01")) == "0.01%"


def test_common_discount_presets():
    assert COMMON_DISCOUNTS[0] == "100"
    assert "85" in COMMON_DISCOUNTS
