from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from feecalc.core.schedule import ServiceCategory

_HUNDRED = Decimal("100")


class CalculationInput(BaseModel):
    """Raw caller input; validation happens in the engine, not here."""

    category: int | str = "goods"
    base_amount: float | str | None = None
    discount_percent: float | str | None = Field(default=100)

    model_config = ConfigDict(frozen=True, extra="forbid")


class BracketContribution(BaseModel):
    bracket_label: str
    rate_applied: Decimal
    amount_in_bracket: Decimal
    fee_for_bracket: Decimal

    model_config = ConfigDict(frozen=True)


class CalculationResult(BaseModel):
    category: ServiceCategory
    base_amount: Decimal
    breakdown: tuple[BracketContribution, ...] = ()
    original_fee: Decimal
    discount_percent: Decimal
    discounted_fee: Decimal

    model_config = ConfigDict(frozen=True)

    @property
    def fee_difference(self) -> Decimal:
        return self.original_fee - self.discounted_fee

    @property
    def discount_applied(self) -> bool:
        return self.discount_percent < _HUNDRED

    def rescaled_breakdown(self) -> tuple[BracketContribution, ...]:
        ratio = self.discount_percent / _HUNDRED
        return tuple(
            line.model_copy(update={"fee_for_bracket": line.fee_for_bracket * ratio})
            for line in self.breakdown
        )
