"""Progressive tendering-agent service fee calculator."""
from __future__ import annotations

from feecalc.core.engine import FeeEngine, calculate, get_engine
from feecalc.core.errors import (
    FeeCalculationError,
    InvalidAmountError,
    ScheduleValidationError,
    UnknownCategoryError,
)
from feecalc.core.models import BracketContribution, CalculationInput, CalculationResult
from feecalc.core.schedule import Bracket, RateSchedule, ServiceCategory

__version__ = "0.1.0"

__all__ = [
    "Bracket",
    "BracketContribution",
    "CalculationInput",
    "CalculationResult",
    "FeeCalculationError",
    "FeeEngine",
    "InvalidAmountError",
    "RateSchedule",
    "ScheduleValidationError",
    "ServiceCategory",
    "UnknownCategoryError",
    "calculate",
    "get_engine",
]
