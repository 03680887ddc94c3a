from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from feecalc.config import get_settings
from feecalc.core._progressive import accumulate, coerce_amount
from feecalc.core.discount import apply_discount
from feecalc.core.models import CalculationInput, CalculationResult
from feecalc.core.schedule import RateSchedule, ServiceCategory, load_schedule
from feecalc.schedules import get_schedule

logger = logging.getLogger("feecalc")


class FeeEngine:
    """Progressive fee calculation over an injected rate schedule."""

    def __init__(self, schedule: RateSchedule) -> None:
        self.schedule = schedule

    def calculate(
        self,
        category: Any,
        base_amount: Any,
        discount_percent: Any = 100,
    ) -> CalculationResult:
        member = ServiceCategory.parse(category)
        rows = self.schedule.rates_for(member)
        amount = coerce_amount(base_amount)
        breakdown, original_fee = accumulate(amount, rows)
        effective, discounted = apply_discount(original_fee, discount_percent)
        return CalculationResult(
            category=member,
            base_amount=amount,
            breakdown=breakdown,
            original_fee=original_fee,
            discount_percent=effective,
            discounted_fee=discounted,
        )

    def evaluate(self, payload: CalculationInput) -> CalculationResult:
        return self.calculate(payload.category, payload.base_amount, payload.discount_percent)


@lru_cache(maxsize=1)
def get_engine() -> FeeEngine:
    settings = get_settings()
    if settings.schedule_path:
        schedule = load_schedule(settings.schedule_path)
        logger.info("Loaded rate schedule %s from %s", schedule.name, settings.schedule_path)
    else:
        schedule = get_schedule(settings.schedule_name)
        logger.info("Using bundled rate schedule %s", schedule.name)
    return FeeEngine(schedule)


def calculate(category: Any, base_amount: Any, discount_percent: Any = 100) -> CalculationResult:
    return get_engine().calculate(category, base_amount, discount_percent)


__all__ = ["FeeEngine", "calculate", "get_engine"]
