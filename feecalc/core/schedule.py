"""Rate schedule data model.

A schedule is an ordered list of brackets plus, per service category, a
parallel row of marginal rates expressed as percentages.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import IntEnum
from pathlib import Path
from types import MappingProxyType
import tomllib
from typing import Any, Iterable, Mapping

from feecalc.core.errors import ScheduleValidationError, UnknownCategoryError

D = Decimal

_HUNDRED = D("100")
_UNBOUNDED_MARKERS = {"inf", "infinity", "+inf", "unbounded", ""}


class ServiceCategory(IntEnum):
    GOODS = 1
    SERVICES = 2
    WORKS = 3

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "ServiceCategory":
        """Resolve a member, its integer value or its name (any case)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise UnknownCategoryError(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError as exc:
                raise UnknownCategoryError(value) from exc
        if isinstance(value, str):
            key = value.strip()
            if key.isdecimal():
                return cls.parse(int(key))
            try:
                return cls[key.upper()]
            except KeyError as exc:
                raise UnknownCategoryError(value) from exc
        raise UnknownCategoryError(value)


_CATEGORY_LABELS = {
    ServiceCategory.GOODS: "货物招标 (Goods)",
    ServiceCategory.SERVICES: "服务招标 (Services)",
    ServiceCategory.WORKS: "工程招标 (Works)",
}


@dataclass(frozen=True)
class Bracket:
    upper_bound: D | None
    label: str

    @property
    def unbounded(self) -> bool:
        return self.upper_bound is None


def _to_decimal(value: Any, what: str) -> D:
    if isinstance(value, bool):
        raise ScheduleValidationError(f"{what} must be numeric, got {value!r}")
    try:
        number = value if isinstance(value, Decimal) else D(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ScheduleValidationError(f"{what} must be numeric, got {value!r}") from exc
    if not number.is_finite():
        raise ScheduleValidationError(f"{what} must be finite, got {value!r}")
    return number


@dataclass(frozen=True)
class RateSchedule:
    name: str
    brackets: tuple[Bracket, ...]
    rates: Mapping[ServiceCategory, tuple[D, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        brackets = tuple(self.brackets)
        rates = {
            ServiceCategory.parse(category): tuple(
                _to_decimal(rate, f"{self.name} rate") for rate in row
            )
            for category, row in dict(self.rates).items()
        }
        _validate(self.name, brackets, rates)
        object.__setattr__(self, "brackets", brackets)
        object.__setattr__(self, "rates", MappingProxyType(rates))

    def categories(self) -> list[ServiceCategory]:
        return sorted(self.rates)

    def rates_for(self, category: Any) -> tuple[tuple[Bracket, D], ...]:
        member = ServiceCategory.parse(category)
        try:
            row = self.rates[member]
        except KeyError as exc:
            raise UnknownCategoryError(category) from exc
        return tuple(zip(self.brackets, row))


def _validate(
    name: str,
    brackets: tuple[Bracket, ...],
    rates: Mapping[ServiceCategory, tuple[D, ...]],
) -> None:
    if not brackets:
        raise ScheduleValidationError(f"Schedule {name!r} has no brackets")
    if not brackets[-1].unbounded:
        raise ScheduleValidationError(f"Schedule {name!r} must end with an unbounded bracket")
    previous = D("0")
    for bracket in brackets[:-1]:
        if bracket.unbounded:
            raise ScheduleValidationError(
                f"Schedule {name!r}: only the last bracket may be unbounded ({bracket.label})"
            )
        if bracket.upper_bound <= previous:
            raise ScheduleValidationError(
                f"Schedule {name!r}: bracket bounds must be strictly increasing "
                f"({bracket.label} at {bracket.upper_bound} after {previous})"
            )
        previous = bracket.upper_bound
    for category, row in rates.items():
        if len(row) != len(brackets):
            raise ScheduleValidationError(
                f"Schedule {name!r}: {category.name} has {len(row)} rates for {len(brackets)} brackets"
            )
        for rate in row:
            if rate < 0 or rate > _HUNDRED:
                raise ScheduleValidationError(
                    f"Schedule {name!r}: {category.name} rate {rate} outside 0-100"
                )


def _parse_bound(value: Any) -> D | None:
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in _UNBOUNDED_MARKERS:
        return None
    if isinstance(value, float) and value == float("inf"):
        return None
    return _to_decimal(value, "upper_bound")


def _parse_brackets(items: Iterable[Any]) -> tuple[Bracket, ...]:
    brackets: list[Bracket] = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise ScheduleValidationError(f"Bracket #{index} must be a table, got {item!r}")
        bound = _parse_bound(item.get("upper_bound"))
        label = item.get("label") or (f"<= {bound}" if bound is not None else "unbounded")
        brackets.append(Bracket(bound, str(label)))
    return tuple(brackets)


def schedule_from_mapping(data: Mapping[str, Any], *, name: str | None = None) -> RateSchedule:
    try:
        raw_brackets = data["brackets"]
        raw_rates = data["rates"]
    except KeyError as exc:
        raise ScheduleValidationError(f"Schedule data is missing {exc.args[0]!r}") from exc
    if not isinstance(raw_rates, Mapping):
        raise ScheduleValidationError("Schedule 'rates' must map categories to rate rows")
    rates: dict[ServiceCategory, tuple[Any, ...]] = {}
    for key, row in raw_rates.items():
        if not isinstance(row, (list, tuple)):
            raise ScheduleValidationError(f"Rates for {key!r} must be a list, got {row!r}")
        try:
            rates[ServiceCategory.parse(key)] = tuple(row)
        except UnknownCategoryError as exc:
            raise ScheduleValidationError(str(exc)) from exc
    return RateSchedule(
        name=name or str(data.get("name", "custom")),
        brackets=_parse_brackets(raw_brackets),
        rates=rates,
    )


def load_schedule(path: str | Path) -> RateSchedule:
    """Read a schedule from a TOML or JSON file."""
    source = Path(path)
    suffix = source.suffix.lower()
    try:
        if suffix == ".toml":
            with source.open("rb") as handle:
                data = tomllib.load(handle)
        elif suffix == ".json":
            data = json.loads(source.read_text(encoding="utf-8"))
        else:
            raise ScheduleValidationError(f"Unsupported schedule file type: {source.name}")
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ScheduleValidationError(f"Could not parse schedule file {source}: {exc}") from exc
    except OSError as exc:
        raise ScheduleValidationError(f"Could not read schedule file {source}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ScheduleValidationError(f"Schedule file {source} must contain a table")
    return schedule_from_mapping(data, name=data.get("name") or source.stem)


__all__ = [
    "Bracket",
    "RateSchedule",
    "ServiceCategory",
    "load_schedule",
    "schedule_from_mapping",
]
