"""Command-line entrypoint for dashboard aggregation."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

from activity_metrics.application.dto import DashboardRequest
from activity_metrics.application.use_cases import (
    BuildDashboardUseCase,
    DashboardContext,
    DataUnavailableError,
)
from activity_metrics.config import SETTINGS
from activity_metrics.domain.periods import CUSTOM, PeriodSpec
from activity_metrics.domain.services import MetricsAggregator
from activity_metrics.infrastructure.parsing.dates import normalize_date
from activity_metrics.infrastructure.parsing.utils import parse_decimal
from activity_metrics.infrastructure.repositories.json_repository import JsonActivityRepository
from activity_metrics.presentation.summary_report import export_excel, format_money


def _money_arg(text: str) -> Decimal:
    value = parse_decimal(text)
    if value is None:
        raise argparse.ArgumentTypeError(f"not a finite amount: {text!r}")
    return value


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Aggregate point-of-sale activity for the dashboard")
    parser.add_argument("snapshot", type=str, help="Path to a JSON snapshot of the REST collections")
    parser.add_argument("--period", type=str, default="all", help="today, yesterday, week, last7days, month, year, custom, all")
    parser.add_argument("--from", dest="start", type=str, help="Custom period start")
    parser.add_argument("--to", dest="end", type=str, help="Custom period end")
    parser.add_argument("--scope", type=str, help="Register (caja) id")
    parser.add_argument(
        "--opening-cash",
        type=_money_arg,
        help="Opening cash for the selected register (defaults to its saldoInicial)",
    )
    parser.add_argument("--today", type=str, help="Override the reference date (YYYY-MM-DD)")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument(
        "--export",
        type=Path,
        nargs="?",
        const=SETTINGS.export_dir / "actividad.xlsx",
        help="Write an Excel workbook (defaults to the exports directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log data-quality details")
    return parser.parse_args(argv)


def build_request(args: argparse.Namespace) -> DashboardRequest:
    start = normalize_date(args.start) if args.start else None
    end = normalize_date(args.end) if args.end else None
    if start is not None or args.period == CUSTOM:
        period = PeriodSpec(token=CUSTOM, start=start, end=end)
    else:
        period = PeriodSpec(token=args.period)
    return DashboardRequest(
        period=period,
        scope=args.scope,
        opening_cash=args.opening_cash,
        today=date.fromisoformat(args.today) if args.today else None,
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    context = DashboardContext(
        repository=JsonActivityRepository(Path(args.snapshot)),
        aggregator=MetricsAggregator(),
    )
    use_case = BuildDashboardUseCase(context)
    try:
        response = use_case.execute(build_request(args))
    except DataUnavailableError as exc:
        print(f"Could not load snapshot ({exc.outcome.error.value}): {exc}", file=sys.stderr)
        return 2
    except ValueError as exc:
        print(f"Invalid request: {exc}", file=sys.stderr)
        return 2

    if args.export:
        written = export_excel(response, args.export)
        print(f"Workbook written to {written}", file=sys.stderr)

    if args.json:
        print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
        return 0

    result = response.result
    recency = context.aggregator.recency_days
    print("Activity Summary")
    print("================")
    window = response.window.to_dict()
    print(f"Period: {window['start'] or '-'} .. {window['end'] or '-'} (today {result.today})")
    if result.scope is not None:
        print(f"Register: {result.scope}")
    print(f"Sales: {format_money(result.sales.total)} ({result.sales.count}) trend {result.sales.trend}")
    print(f"Purchases: {format_money(result.purchases.total)} ({result.purchases.count}) trend {result.purchases.trend}")
    print(f"Expenses: {format_money(result.expenses.total)} ({result.expenses.count}) trend {result.expenses.trend}")
    print(f"Profit: {format_money(result.profit)}")
    if result.balance is not None:
        print(f"Balance: {format_money(result.balance)} ({result.balance_trend})")
    print(f"New products (last {recency} days): {result.new_products}")
    print(f"New customers (last {recency} days): {result.new_customers}")
    if result.registers is not None:
        print(f"Registers operational: {result.registers.operational}/{result.registers.total}")
    if result.recent_sales:
        print("Recent sales:")
        for sale in result.recent_sales:
            print(f"  {sale.occurred_on} #{sale.record_id}: {format_money(sale.amount_or_zero)}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
