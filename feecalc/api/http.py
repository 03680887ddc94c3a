import logging
from typing import Any, Literal

from fastapi import FastAPI, HTTPException, Request

from feecalc.config import Settings, get_settings
from feecalc.core.engine import FeeEngine, get_engine
from feecalc.core.errors import InvalidAmountError, UnknownCategoryError
from feecalc.core.models import CalculationInput, CalculationResult
from feecalc.core.schedule import ServiceCategory
from feecalc.inputs import COMMON_DISCOUNTS, InputUnit, format_rate, to_base_amount, to_wanyuan
from feecalc.lifespan import build_application_lifespan

logger = logging.getLogger("feecalc")


async def _announce_schedule(app: FastAPI) -> None:
    settings = app.state.settings
    logger.info(
        "Fee calculator ready; schedule=%s default_unit=%s default_discount=%s",
        app.state.schedule_name,
        settings.default_unit,
        settings.default_discount,
    )


app = FastAPI(
    title="Agent Fee Calculator",
    description="Progressive tendering-agent service fee with optional discount.",
    version="0.1.0",
    lifespan=build_application_lifespan("api", startup_hook=_announce_schedule),
)


class FeeEstimateRequest(CalculationInput):
    unit: Literal["yuan", "wanyuan"] | None = None


def _engine(request: Request) -> FeeEngine:
    return getattr(request.app.state, "engine", None) or get_engine()


def _settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def _result_payload(result: CalculationResult) -> dict[str, Any]:
    body = result.model_dump(mode="json")
    body["category_name"] = result.category.name.lower()
    body["category_label"] = result.category.label
    body["discount_applied"] = result.discount_applied
    body["fee_difference"] = str(result.fee_difference)
    body["discounted_breakdown"] = [
        line.model_dump(mode="json") for line in result.rescaled_breakdown()
    ]
    body["base_amount_wanyuan"] = str(to_wanyuan(result.base_amount))
    body["discounted_fee_wanyuan"] = str(to_wanyuan(result.discounted_fee))
    return body


def _estimate(
    engine: FeeEngine,
    settings: Settings,
    category: Any,
    amount: Any,
    unit: str | None,
    discount: Any,
) -> dict[str, Any]:
    try:
        member = ServiceCategory.parse(category)
    except UnknownCategoryError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        input_unit = InputUnit(unit or settings.default_unit)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown input unit {unit!r}") from exc
    try:
        result = engine.calculate(member, to_base_amount(amount, input_unit), discount)
    except UnknownCategoryError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except InvalidAmountError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    logger.debug(
        "Computed fee category=%s base=%s fee=%s discount=%s",
        member.name,
        result.base_amount,
        result.discounted_fee,
        result.discount_percent,
    )
    return _result_payload(result)


@app.get("/fee/estimate")
def estimate(
    request: Request,
    amount: str | None = None,
    category: str = "goods",
    unit: str | None = None,
    discount: str | None = None,
):
    settings = _settings(request)
    chosen = discount if discount is not None else settings.default_discount
    return _estimate(_engine(request), settings, category, amount, unit, chosen)


@app.post("/fee/estimate")
def estimate_from_payload(request: Request, payload: FeeEstimateRequest):
    return _estimate(
        _engine(request),
        _settings(request),
        payload.category,
        payload.base_amount,
        payload.unit,
        payload.discount_percent,
    )


@app.get("/fee/schedule")
def schedule(request: Request):
    engine = _engine(request)
    rate_schedule = engine.schedule
    return {
        "name": rate_schedule.name,
        "brackets": [
            {
                "label": bracket.label,
                "upper_bound": None if bracket.upper_bound is None else str(bracket.upper_bound),
            }
            for bracket in rate_schedule.brackets
        ],
        "categories": [
            {
                "id": int(category),
                "name": category.name.lower(),
                "label": category.label,
                "rates": [format_rate(rate) for _, rate in rate_schedule.rates_for(category)],
            }
            for category in rate_schedule.categories()
        ],
        "common_discounts": list(COMMON_DISCOUNTS),
        "units": [unit.value for unit in InputUnit],
        "default_unit": _settings(request).default_unit,
    }


@app.get("/health")
def health(request: Request):
    settings = _settings(request)
    return {
        "ok": True,
        "build": {
            "version": settings.build_version,
            "sha": settings.build_sha,
        },
        "schedule": getattr(request.app.state, "schedule_name", None) or _engine(request).schedule.name,
    }
