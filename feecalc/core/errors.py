from __future__ import annotations

from typing import Any


class FeeCalculationError(Exception):
    pass


class InvalidAmountError(FeeCalculationError, ValueError):
    def __init__(self, value: Any, reason: str = "must be a finite number >= 0") -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid base amount {value!r}: {reason}")


class UnknownCategoryError(FeeCalculationError, KeyError):
    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Unknown service category {value!r}")

    def __str__(self) -> str:
        return self.args[0]


class ScheduleValidationError(FeeCalculationError, ValueError):
    pass


__all__ = [
    "FeeCalculationError",
    "InvalidAmountError",
    "UnknownCategoryError",
    "ScheduleValidationError",
]
