from __future__ import annotations

from decimal import Decimal

from feecalc.core.schedule import Bracket, RateSchedule, ServiceCategory

D = Decimal

# Tendering agency service fee standard, 计价格[2002]1980号. Amounts in yuan.
STANDARD_BRACKETS = (
    Bracket(D("1000000"), "100万元以下"),
    Bracket(D("5000000"), "100-500万元"),
    Bracket(D("10000000"), "500-1000万元"),
    Bracket(D("50000000"), "1000-5000万元"),
    Bracket(D("100000000"), "5000万元-1亿元"),
    Bracket(D("1000000000"), "1-10亿元"),
    Bracket(None, "10亿元以上"),
)

GOODS_RATES = tuple(D(r) for r in ("1.50", "1.10", "0.80", "0.50", "0.25", "0.05", "0.01"))
SERVICES_RATES = tuple(D(r) for r in ("1.50", "0.80", "0.45", "0.25", "0.10", "0.05", "0.01"))
WORKS_RATES = tuple(D(r) for r in ("1.00", "0.70", "0.55", "0.35", "0.20", "0.05", "0.01"))

schedule = RateSchedule(
    name="standard",
    brackets=STANDARD_BRACKETS,
    rates={
        ServiceCategory.GOODS: GOODS_RATES,
        ServiceCategory.SERVICES: SERVICES_RATES,
        ServiceCategory.WORKS: WORKS_RATES,
    },
)
