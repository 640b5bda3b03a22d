"""Domain services rolling filtered activity up into dashboard metrics."""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal, InvalidOperation, localcontext
from typing import Iterable, Sequence

from activity_metrics.config import SETTINGS

from .filtering import filter_records, normalize_scope
from .models import (
    ActivityCollections,
    InventoryRecord,
    PartyRecord,
    RegisterRecord,
    TransactionRecord,
)
from .periods import (
    UNBOUNDED,
    Window,
    current_month_period,
    month_period,
    previous_month_period,
    recent_window,
    shift_month,
)
from .results import AggregateResult, MetricFamily, RegisterSummary, SeriesPoint
from .trend import trend_percentage

logger = logging.getLogger(__name__)

ALL_OPERATIONAL = "all_operational"
NONE_OPERATIONAL = "none_operational"
PARTIALLY_OPERATIONAL = "partial"


def _occurred_on(record: TransactionRecord) -> date | None:
    return record.occurred_on


def _created_on(record: InventoryRecord | PartyRecord) -> date | None:
    return record.created_on


def _scope_of(record: TransactionRecord) -> object:
    return record.scope_id


def sum_amounts(records: Iterable[TransactionRecord]) -> Decimal:
    return sum((record.amount_or_zero for record in records), Decimal("0"))


class MetricsAggregator:
    """Computes totals, trends, balance and profit for one query cycle.

    The reference date is always supplied by the caller; the aggregator never
    reads the clock.
    """

    def __init__(
        self,
        recency_days: int | None = None,
        history_months: int | None = None,
        unbounded_admits_undated: bool | None = None,
        recent_limit: int | None = None,
    ) -> None:
        self._recency_days = SETTINGS.recency_window_days if recency_days is None else recency_days
        self._history_months = SETTINGS.trend_history_months if history_months is None else history_months
        if unbounded_admits_undated is None:
            unbounded_admits_undated = SETTINGS.unbounded_admits_undated
        self._strict_dates = not unbounded_admits_undated
        self._recent_limit = SETTINGS.recent_sales_limit if recent_limit is None else recent_limit

    def filter_collections(
        self,
        collections: ActivityCollections,
        period: Window,
        scope: object = None,
    ) -> ActivityCollections:
        strict = self._strict_dates
        wanted = normalize_scope(scope)
        registers: Sequence[RegisterRecord] = collections.registers
        if wanted is not None:
            registers = [r for r in registers if normalize_scope(r.register_id) == wanted]
        return ActivityCollections(
            sales=tuple(filter_records(collections.sales, _occurred_on, period, _scope_of, scope, strict_dates=strict)),
            purchases=tuple(
                filter_records(collections.purchases, _occurred_on, period, _scope_of, scope, strict_dates=strict)
            ),
            expenses=tuple(
                filter_records(collections.expenses, _occurred_on, period, _scope_of, scope, strict_dates=strict)
            ),
            products=tuple(filter_records(collections.products, _created_on, period, strict_dates=strict)),
            customers=tuple(filter_records(collections.customers, _created_on, period, strict_dates=strict)),
            registers=tuple(registers),
        )

    @property
    def recency_days(self) -> int:
        return self._recency_days

    def aggregate(
        self,
        collections: ActivityCollections,
        period: Window,
        today: date,
        scope: object = None,
        opening_cash: Decimal | int | float | str | None = None,
    ) -> AggregateResult:
        result, _ = self.aggregate_with_subsets(collections, period, today, scope, opening_cash)
        return result

    def aggregate_with_subsets(
        self,
        collections: ActivityCollections,
        period: Window,
        today: date,
        scope: object = None,
        opening_cash: Decimal | int | float | str | None = None,
    ) -> tuple[AggregateResult, ActivityCollections]:
        """Aggregate and also return the filtered collections the totals came from.

        Without an explicit ``opening_cash`` the selected register's opening
        balance is used. An opening cash that is not a finite number leaves
        the balance out.
        """
        with localcontext(SETTINGS.decimal_context):
            filtered = self.filter_collections(collections, period, scope)
            sales = self._family("sales", filtered.sales, collections.sales, today, scope)
            purchases = self._family("purchases", filtered.purchases, collections.purchases, today, scope)
            expenses = self._family("expenses", filtered.expenses, collections.expenses, today, scope)

            recency = recent_window(today, self._recency_days)
            new_products = len(filter_records(collections.products, _created_on, recency))
            new_customers = len(filter_records(collections.customers, _created_on, recency))

            profit = sales.total - purchases.total - expenses.total

            wanted = normalize_scope(scope)
            opening: Decimal | None = None
            balance: Decimal | None = None
            balance_trend: str | None = None
            if wanted is not None:
                if opening_cash is None:
                    opening = register_opening_cash(collections.registers, wanted)
                else:
                    opening = _finite_decimal(opening_cash)
                    if opening is None:
                        logger.warning("Ignoring opening cash %r: not a finite number", opening_cash)
            if opening is not None:
                balance = opening + profit
                balance_trend = trend_percentage(opening, balance)

            scoped_sales = filter_records(collections.sales, _occurred_on, UNBOUNDED, _scope_of, scope, strict_dates=True)
            bounded = period is not UNBOUNDED
            result = AggregateResult(
                today=today,
                period_start=period.start if bounded else None,
                period_end=period.end if bounded else None,
                scope=wanted,
                sales=sales,
                purchases=purchases,
                expenses=expenses,
                products_in_period=len(filtered.products),
                customers_in_period=len(filtered.customers),
                new_products=new_products,
                new_customers=new_customers,
                profit=profit,
                balance=balance,
                opening_cash=opening,
                balance_trend=balance_trend,
                registers=summarize_registers(filtered.registers),
                monthly_sales=tuple(self.monthly_series(collections.sales, today, scope=scope)),
                recent_sales=tuple(recent_sales(scoped_sales, self._recent_limit)),
            )
            return result, filtered

    def monthly_series(
        self,
        records: Sequence[TransactionRecord],
        today: date,
        months: int | None = None,
        scope: object = None,
    ) -> list[SeriesPoint]:
        """Totals for the last ``months`` calendar months, oldest first."""
        months = self._history_months if months is None else months
        points: list[SeriesPoint] = []
        for offset in range(months - 1, -1, -1):
            year, month = shift_month(today.year, today.month, -offset)
            window = month_period(year, month)
            selected = filter_records(records, _occurred_on, window, _scope_of, scope)
            points.append(SeriesPoint(label=f"{year:04d}-{month:02d}", total=sum_amounts(selected)))
        return points

    @staticmethod
    def daily_series(records: Sequence[TransactionRecord], period: Window, scope: object = None) -> list[SeriesPoint]:
        """Totals per calendar day inside ``period``, in date order."""
        totals: dict[date, Decimal] = defaultdict(lambda: Decimal("0"))
        for record in filter_records(records, _occurred_on, period, _scope_of, scope, strict_dates=True):
            totals[record.occurred_on] += record.amount_or_zero
        return [SeriesPoint(label=day.isoformat(), total=totals[day]) for day in sorted(totals)]

    def _family(
        self,
        name: str,
        filtered: Sequence[TransactionRecord],
        raw: Sequence[TransactionRecord],
        today: date,
        scope: object,
    ) -> MetricFamily:
        invalid = sum(1 for record in filtered if record.amount is None)
        if invalid:
            logger.debug("%d %s records have unparsable amounts and count as 0", invalid, name)
        previous = sum_amounts(filter_records(raw, _occurred_on, previous_month_period(today), _scope_of, scope))
        current = sum_amounts(filter_records(raw, _occurred_on, current_month_period(today), _scope_of, scope))
        return MetricFamily(
            total=sum_amounts(filtered),
            count=len(filtered),
            trend=trend_percentage(previous, current),
            invalid_amounts=invalid,
        )


def summarize_registers(registers: Sequence[RegisterRecord]) -> RegisterSummary | None:
    """Count registers holding cash and label the overall state."""
    if not registers:
        return None
    operational = sum(1 for register in registers if register.cash is not None and register.cash > 0)
    if operational == len(registers):
        status = ALL_OPERATIONAL
    elif operational == 0:
        status = NONE_OPERATIONAL
    else:
        status = PARTIALLY_OPERATIONAL
    return RegisterSummary(total=len(registers), operational=operational, status=status)


def recent_sales(records: Sequence[TransactionRecord], limit: int = 3) -> list[TransactionRecord]:
    """The ``limit`` latest dated sales, newest first; same-day sales keep input order."""
    dated = [record for record in records if record.occurred_on is not None]
    return sorted(dated, key=_occurred_on, reverse=True)[:limit]


def register_opening_cash(registers: Sequence[RegisterRecord], scope: object) -> Decimal | None:
    wanted = normalize_scope(scope)
    for register in registers:
        if normalize_scope(register.register_id) == wanted:
            return register.opening_cash
    return None


def _finite_decimal(value: object) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None
