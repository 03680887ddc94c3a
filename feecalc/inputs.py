"""Helpers for the presentation layer sitting in front of the engine.

The engine works in yuan. Users usually type bid amounts in wanyuan (units
of ten thousand yuan), so front ends convert with :func:`to_base_amount`
before calling and convert results back with :func:`to_wanyuan` for display.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

from feecalc.core._progressive import coerce_amount

_CENT = Decimal("0.01")

COMMON_DISCOUNTS = ("100", "90", "85", "80")


class InputUnit(str, Enum):
    YUAN = "yuan"
    WANYUAN = "wanyuan"

    @property
    def multiplier(self) -> Decimal:
        return _MULTIPLIERS[self]


_MULTIPLIERS = {
    InputUnit.YUAN: Decimal("1"),
    InputUnit.WANYUAN: Decimal("10000"),
}


def to_base_amount(value: Any, unit: InputUnit | str = InputUnit.WANYUAN) -> Decimal:
    """Validate a raw amount and scale it to yuan.

    Raises ``InvalidAmountError`` for anything the engine would reject, and
    ``ValueError`` for an unknown unit.
    """
    amount = coerce_amount(value)
    return amount * InputUnit(unit).multiplier


def to_wanyuan(amount: Decimal) -> Decimal:
    return amount / InputUnit.WANYUAN.multiplier


def to_decimal(value: float | Decimal) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_cents(value: float | Decimal) -> Decimal:
    return to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def format_rate(rate: Decimal) -> str:
    return f"{rate:.2f}%"


__all__ = [
    "COMMON_DISCOUNTS",
    "InputUnit",
    "format_rate",
    "round_cents",
    "to_base_amount",
    "to_decimal",
    "to_wanyuan",
]
