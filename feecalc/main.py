import argparse
import json
import logging
import os
import sys
from typing import Literal, Sequence

from rich.console import Console
from rich.table import Table

from feecalc.config import get_settings
from feecalc.core.engine import get_engine
from feecalc.core.errors import FeeCalculationError, InvalidAmountError
from feecalc.core.models import CalculationResult
from feecalc.core.schedule import ServiceCategory
from feecalc.inputs import InputUnit, format_rate, round_cents, to_base_amount, to_wanyuan

logger = logging.getLogger("feecalc")

ColorPreference = Literal["auto", "always", "never"]

_CATEGORY_CHOICES = [c.name.lower() for c in ServiceCategory]


def _resolve_color_preference(pref: ColorPreference) -> ColorPreference:
    if pref == "auto" and os.getenv("NO_COLOR"):
        return "never"
    return pref


def _get_console(pref: ColorPreference) -> Console:
    resolved = _resolve_color_preference(pref)
    if resolved == "never":
        return Console(no_color=True, highlight=False)
    return Console(force_terminal=resolved == "always" or None)


def _build_table(title: str, columns: list[str]) -> Table:
    table = Table(title=title, expand=False)
    for column in columns:
        table.add_column(column)
    return table


def _print_result(result: CalculationResult, console: Console, show_breakdown: bool) -> None:
    if show_breakdown and result.breakdown:
        table = _build_table("Breakdown", ["Bracket", "Rate", "Amount", "Fee"])
        for line in result.breakdown:
            table.add_row(
                line.bracket_label,
                format_rate(line.rate_applied),
                str(round_cents(line.amount_in_bracket)),
                str(round_cents(line.fee_for_bracket)),
            )
        console.print(table)

    summary = _build_table("Summary", ["Metric", "Value"])
    summary.add_row("Service type", result.category.label)
    summary.add_row("Base amount", str(round_cents(result.base_amount)))
    summary.add_row("Original fee", str(round_cents(result.original_fee)))
    if result.discount_applied:
        summary.add_row("Discount", f"{result.discount_percent}%")
        summary.add_row("Discounted fee", str(round_cents(result.discounted_fee)))
        summary.add_row("Savings", str(round_cents(result.fee_difference)))
    else:
        summary.add_row("Payable fee", str(round_cents(result.discounted_fee)))
    summary.add_row("Payable fee (wanyuan)", f"{to_wanyuan(result.discounted_fee):.6f}")
    console.print(summary)


def _print_schedule(console: Console) -> None:
    rate_schedule = get_engine().schedule
    categories = rate_schedule.categories()
    table = _build_table(
        f"Rate schedule: {rate_schedule.name}",
        ["Bracket"] + [category.label for category in categories],
    )
    rows = [rate_schedule.rates_for(category) for category in categories]
    for index, bracket in enumerate(rate_schedule.brackets):
        table.add_row(bracket.label, *(format_rate(row[index][1]) for row in rows))
    console.print(table)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="feecalc",
        description="Progressive tendering-agent service fee calculator.",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output preference (default: auto).",
    )
    parser.add_argument(
        "--no-color",
        dest="color",
        action="store_const",
        const="never",
        help="Alias for --color never.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    estimate = commands.add_parser("estimate", help="Calculate the service fee for a bid amount.")
    estimate.add_argument("amount", help="Winning bid amount.")
    estimate.add_argument(
        "--category",
        "-c",
        choices=_CATEGORY_CHOICES,
        default="goods",
        help="Service type (default: goods).",
    )
    estimate.add_argument(
        "--unit",
        "-u",
        choices=[unit.value for unit in InputUnit],
        default=settings.default_unit,
        help=f"Unit of AMOUNT (default: {settings.default_unit}).",
    )
    estimate.add_argument(
        "--discount",
        "-d",
        default=settings.default_discount,
        help="Discount percentage; 100 means no discount.",
    )
    estimate.add_argument("--breakdown", action="store_true", help="Show the per-bracket breakdown.")
    estimate.add_argument("--json", action="store_true", help="Print the raw result as JSON.")

    commands.add_parser("schedule", help="Show the rate schedule.")

    serve = commands.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    console = _get_console(args.color)
    if args.command == "schedule":
        try:
            _print_schedule(console)
        except FeeCalculationError as exc:
            logger.error("Could not load rate schedule: %s", exc)
            print(f"error: {exc}", file=sys.stderr)
            return 1
        return 0
    if args.command == "serve":
        import uvicorn

        uvicorn.run("feecalc.api.http:app", host=args.host, port=args.port)
        return 0

    try:
        base_amount = to_base_amount(args.amount, args.unit)
        result = get_engine().calculate(args.category, base_amount, args.discount)
    except InvalidAmountError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except FeeCalculationError as exc:
        logger.error("Calculation failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
    else:
        _print_result(result, console, args.breakdown)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
