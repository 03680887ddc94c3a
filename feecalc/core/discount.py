from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

D = Decimal

NO_DISCOUNT = D("100")


def effective_discount(discount_percent: Any) -> D:
    """Normalize a discount percentage.

    Missing, non-numeric, non-finite or negative values mean "no discount"
    (100). Values above 100 are kept and act as a markup.
    """
    if discount_percent is None or isinstance(discount_percent, bool):
        return NO_DISCOUNT
    if isinstance(discount_percent, str):
        discount_percent = discount_percent.strip()
    try:
        value = discount_percent if isinstance(discount_percent, Decimal) else D(str(discount_percent))
    except (InvalidOperation, ValueError):
        return NO_DISCOUNT
    if not value.is_finite() or value < 0:
        return NO_DISCOUNT
    return value


def apply_discount(original_fee: D, discount_percent: Any) -> tuple[D, D]:
    effective = effective_discount(discount_percent)
    return effective, original_fee * (effective / NO_DISCOUNT)


__all__ = ["NO_DISCOUNT", "apply_discount", "effective_discount"]
