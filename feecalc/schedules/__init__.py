from __future__ import annotations

from typing import Dict, Iterable, List

from feecalc.core.schedule import RateSchedule
from feecalc.schedules.standard import schedule as standard_schedule

DEFAULT_SCHEDULE = "standard"

_REGISTRY: Dict[str, RateSchedule] = {}


class UnknownScheduleError(KeyError):
    pass


def register_schedule(schedule: RateSchedule) -> None:
    _REGISTRY[schedule.name] = schedule


def register_schedules(schedules: Iterable[RateSchedule]) -> None:
    for schedule in schedules:
        register_schedule(schedule)


register_schedules((standard_schedule,))


def get_schedule(name: str | None = None) -> RateSchedule:
    key = name or DEFAULT_SCHEDULE
    try:
        return _REGISTRY[key]
    except KeyError as exc:
        raise UnknownScheduleError(f"No rate schedule registered as {key!r}") from exc


def list_schedules() -> List[str]:
    return sorted(_REGISTRY)


__all__ = [
    "DEFAULT_SCHEDULE",
    "UnknownScheduleError",
    "get_schedule",
    "list_schedules",
    "register_schedule",
    "register_schedules",
]
