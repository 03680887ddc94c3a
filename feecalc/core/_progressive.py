from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from feecalc.core.errors import InvalidAmountError
from feecalc.core.models import BracketContribution
from feecalc.core.schedule import Bracket

D = Decimal

_ZERO = D("0")
_HUNDRED = D("100")


def coerce_amount(value: Any) -> D:
    if value is None:
        raise InvalidAmountError(value, "is missing")
    if isinstance(value, bool):
        raise InvalidAmountError(value, "must be numeric")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise InvalidAmountError(value, "is missing")
    try:
        amount = value if isinstance(value, Decimal) else D(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountError(value, "must be numeric") from exc
    if not amount.is_finite():
        raise InvalidAmountError(value, "must be finite")
    if amount < 0:
        raise InvalidAmountError(value, "must not be negative")
    return amount


def accumulate(
    base_amount: Any,
    rows: Iterable[tuple[Bracket, D]],
) -> tuple[tuple[BracketContribution, ...], D]:
    """Spread ``base_amount`` over the brackets and sum the marginal fees.

    Each bracket takes at most ``upper_bound - previous_bound`` of what is
    left; the unbounded terminal bracket takes the rest. Brackets past the
    point where the amount is used up are left out of the breakdown.
    """
    remaining = coerce_amount(base_amount)
    previous = _ZERO
    original_fee = _ZERO
    breakdown: list[BracketContribution] = []
    for index, (bracket, rate) in enumerate(rows):
        if bracket.upper_bound is None:
            in_bracket = max(remaining, _ZERO)
        else:
            in_bracket = min(max(remaining, _ZERO), bracket.upper_bound - previous)
        if in_bracket > 0:
            fee = in_bracket * (rate / _HUNDRED)
            breakdown.append(
                BracketContribution(
                    bracket_label=bracket.label,
                    rate_applied=rate,
                    amount_in_bracket=in_bracket,
                    fee_for_bracket=fee,
                )
            )
            original_fee += fee
            remaining -= in_bracket
        elif remaining <= 0 and index > 0:
            break
        if bracket.upper_bound is not None:
            previous = bracket.upper_bound
    return tuple(breakdown), original_fee


__all__ = ["accumulate", "coerce_amount"]
