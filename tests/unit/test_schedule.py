import json
from decimal import Decimal as D

import pytest

import feecalc.schedules
from feecalc.core.errors import ScheduleValidationError, UnknownCategoryError
from feecalc.core.schedule import (
    Bracket,
    RateSchedule,
    ServiceCategory,
    load_schedule,
    schedule_from_mapping,
)
from feecalc.schedules import (
    UnknownScheduleError,
    get_schedule,
    list_schedules,
    register_schedule,
)
from tests.fixtures.schedules import TWO_TIER_TOML, make_schedule_data, make_two_tier_schedule

_BRACKETS = (Bracket(D("100"), "low"), Bracket(None, "high"))


def test_standard_schedule_is_consistent():
    schedule = get_schedule()
    assert schedule.name == "standard"
    assert len(schedule.brackets) == 7
    assert schedule.brackets[-1].unbounded
    assert sum(1 for b in schedule.brackets if b.unbounded) == 1
    bounds = [b.upper_bound for b in schedule.brackets[:-1]]
    assert bounds == sorted(set(bounds))
    assert schedule.categories() == [ServiceCategory.GOODS, ServiceCategory.SERVICES, ServiceCategory.WORKS]
    for category in schedule.categories():
        rows = schedule.rates_for(category)
        assert len(rows) == len(schedule.brackets)
        assert all(rate >= 0 for _, rate in rows)


@pytest.mark.parametrize(
    "category, first, third",
    [
        (ServiceCategory.GOODS, D("1.50"), D("0.80")),
        (ServiceCategory.SERVICES, D("1.50"), D("0.45")),
        (ServiceCategory.WORKS, D("1.00"), D("0.55")),
    ],
)
def test_standard_rates(category, first, third):
    rows = get_schedule().rates_for(category)
    assert rows[0][1] == first
    assert rows[2][1] == third
    assert rows[-1][1] == D("0.01")


def test_rates_for_pairs_brackets_in_order():
    rows = get_schedule().rates_for("goods")
    assert rows[0][0].label == "100万元以下"
    assert rows[0][0].upper_bound == D("1000000")
    assert rows[-1][0].upper_bound is None


@pytest.mark.parametrize("value", [ServiceCategory.WORKS, 3, "3", "works", " Works ", "WORKS"])
def test_category_parse(value):
    assert ServiceCategory.parse(value) is ServiceCategory.WORKS


@pytest.mark.parametrize("value", [0, 4, "4", "²", "consulting", None, True, 1.0, ""])
def test_category_parse_rejects_unknown(value):
    with pytest.raises(UnknownCategoryError):
        ServiceCategory.parse(value)


def test_category_missing_from_schedule():
    schedule = make_two_tier_schedule()
    with pytest.raises(UnknownCategoryError):
        schedule.rates_for(ServiceCategory.WORKS)


def test_schedule_is_read_only():
    schedule = get_schedule()
    with pytest.raises(TypeError):
        schedule.rates[ServiceCategory.GOODS] = ()  # type: ignore[index]


@pytest.mark.parametrize(
    "brackets, rates",
    [
        ((), {}),
        ((Bracket(D("100"), "low"), Bracket(D("200"), "mid")), {}),
        ((Bracket(None, "open"), Bracket(D("100"), "low")), {}),
        ((Bracket(D("100"), "a"), Bracket(None, "b"), Bracket(None, "c")), {}),
        ((Bracket(D("200"), "a"), Bracket(D("100"), "b"), Bracket(None, "c")), {}),
        ((Bracket(D("100"), "a"), Bracket(D("100"), "b"), Bracket(None, "c")), {}),
        ((Bracket(D("0"), "a"), Bracket(None, "b")), {}),
        (_BRACKETS, {ServiceCategory.GOODS: (D("1"),)}),
        (_BRACKETS, {ServiceCategory.GOODS: (D("1"), D("-0.5"))}),
        (_BRACKETS, {ServiceCategory.GOODS: (D("1"), D("101"))}),
        (_BRACKETS, {ServiceCategory.GOODS: (D("1"), "abc")}),
        (_BRACKETS, {ServiceCategory.GOODS: (D("1"), float("nan"))}),
    ],
)
def test_malformed_schedules_rejected(brackets, rates):
    with pytest.raises(ScheduleValidationError):
        RateSchedule(name="bad", brackets=brackets, rates=rates)


def test_schedule_from_mapping():
    schedule = schedule_from_mapping(make_schedule_data())
    assert schedule.name == "from-mapping"
    assert [b.upper_bound for b in schedule.brackets] == [D("100"), D("500"), None]
    assert [rate for _, rate in schedule.rates_for("services")] == [D("1.5"), D("1.0"), D("0.5")]


def test_schedule_from_mapping_requires_sections():
    with pytest.raises(ScheduleValidationError):
        schedule_from_mapping({"brackets": []})
    data = make_schedule_data()
    data["rates"]["consulting"] = [1, 1, 1]
    with pytest.raises(ScheduleValidationError):
        schedule_from_mapping(data)


def test_load_schedule_toml(tmp_path):
    path = tmp_path / "two_tier.toml"
    path.write_text(TWO_TIER_TOML, encoding="utf-8")
    schedule = load_schedule(path)
    assert schedule.name == "two-tier"
    assert schedule.brackets[-1].label == "rest"
    assert schedule.categories() == [ServiceCategory.GOODS, ServiceCategory.WORKS]


def test_load_schedule_json(tmp_path):
    data = make_schedule_data()
    del data["name"]
    path = tmp_path / "custom.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    schedule = load_schedule(path)
    assert schedule.name == "custom"
    assert len(schedule.rates_for(ServiceCategory.GOODS)) == 3


def test_load_schedule_rejects_bad_files(tmp_path):
    bad_suffix = tmp_path / "rates.yaml"
    bad_suffix.write_text("x: 1", encoding="utf-8")
    with pytest.raises(ScheduleValidationError):
        load_schedule(bad_suffix)

    broken = tmp_path / "broken.toml"
    broken.write_text("[[brackets]\n", encoding="utf-8")
    with pytest.raises(ScheduleValidationError):
        load_schedule(broken)


def test_registry_lookup():
    assert "standard" in list_schedules()
    assert get_schedule("standard") is get_schedule()
    with pytest.raises(UnknownScheduleError):
        get_schedule("2031-draft")


def test_register_custom_schedule(monkeypatch):
    monkeypatch.setattr(feecalc.schedules, "_REGISTRY", dict(feecalc.schedules._REGISTRY))
    schedule = make_two_tier_schedule()
    register_schedule(schedule)
    assert get_schedule("two-tier") is schedule
    assert "two-tier" in list_schedules()


def test_registered_schedule_does_not_outlive_test():
    assert "two-tier" not in list_schedules()


def test_load_schedule_missing_file(tmp_path):
    with pytest.raises(ScheduleValidationError, match="Could not read"):
        load_schedule(tmp_path / "absent.toml")


@pytest.mark.parametrize("name", ["latin1.json", "latin1.toml"])
def test_load_schedule_undecodable_file(tmp_path, name):
    path = tmp_path / name
    path.write_bytes(b'name = "caf\xe9"\n')
    with pytest.raises(ScheduleValidationError, match="Could not parse"):
        load_schedule(path)
