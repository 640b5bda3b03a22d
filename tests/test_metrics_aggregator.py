import json
import math
from datetime import date
from decimal import Decimal

import pytest

from activity_metrics.domain.models import (
    ActivityCollections,
    InventoryRecord,
    PartyRecord,
    RegisterRecord,
    TransactionKind,
    TransactionRecord,
)
from activity_metrics.domain.periods import UNBOUNDED, ResolvedPeriod, resolve_period
from activity_metrics.domain.services import (
    ALL_OPERATIONAL,
    NONE_OPERATIONAL,
    PARTIALLY_OPERATIONAL,
    MetricsAggregator,
    recent_sales,
    summarize_registers,
)

TODAY = date(2024, 5, 10)
MAY = resolve_period("month", TODAY)


def make_record(kind, amount, when, scope=1, record_id=None) -> TransactionRecord:
    parsed = Decimal(amount) if amount is not None else None
    return TransactionRecord(
        kind=kind,
        record_id=record_id or f"{kind.value}-{when}-{amount}",
        amount=parsed,
        occurred_on=when,
        scope_id=scope,
        raw_amount=str(amount),
    )


def sale(amount, when, scope=1, record_id=None):
    return make_record(TransactionKind.SALE, amount, when, scope, record_id)


def purchase(amount, when, scope=1):
    return make_record(TransactionKind.PURCHASE, amount, when, scope)


def expense(amount, when, scope=1):
    return make_record(TransactionKind.EXPENSE, amount, when, scope)


def product(record_id, created_on):
    return InventoryRecord(record_id=record_id, name=f"Producto {record_id}", created_on=created_on)


def customer(record_id, created_on):
    return PartyRecord(record_id=record_id, name=f"Cliente {record_id}", created_on=created_on)


def test_totals_and_counts_for_month():
    collections = ActivityCollections(
        sales=(sale("100.00", date(2024, 5, 1)), sale("50.00", date(2024, 5, 2)), sale("80.00", date(2024, 4, 30)))
    )

    result = MetricsAggregator().aggregate(collections, MAY, TODAY)

    assert result.sales.total == Decimal("150.00")
    assert result.sales.count == 2
    assert result.purchases.count == 0
    assert result.period_start == date(2024, 5, 1)
    assert result.period_end == TODAY


def test_month_over_month_trend():
    collections = ActivityCollections(
        sales=(sale("100.00", date(2024, 4, 12)), sale("150.00", date(2024, 5, 3))),
    )

    result = MetricsAggregator().aggregate(collections, resolve_period("today", TODAY), TODAY)

    assert result.sales.trend == "+50.0%"
    assert result.expenses.trend == "0%"


def test_balance_and_profit_composition():
    collections = ActivityCollections(
        sales=(sale("500", date(2024, 5, 2)),),
        purchases=(purchase("200", date(2024, 5, 3)),),
        expenses=(expense("50", date(2024, 5, 4)),),
    )

    result = MetricsAggregator().aggregate(collections, MAY, TODAY, scope=1, opening_cash=1000)

    assert result.profit == Decimal("250")
    assert result.balance == Decimal("1250")
    assert result.opening_cash == Decimal("1000")
    assert result.balance_trend == "+25.0%"
    assert result.has_balance


def test_balance_requires_scope_and_opening_cash():
    collections = ActivityCollections(sales=(sale("500", date(2024, 5, 2)),))
    aggregator = MetricsAggregator()

    without_cash = aggregator.aggregate(collections, MAY, TODAY, scope=1)
    without_scope = aggregator.aggregate(collections, MAY, TODAY, opening_cash=1000)

    assert without_cash.balance is None
    assert without_scope.balance is None
    assert "balance" not in without_cash.to_dict()
    assert "balance_trend" not in without_scope.to_dict()
    assert without_scope.profit == Decimal("500")


def test_scope_isolation_in_totals():
    collections = ActivityCollections(
        sales=(sale("100", date(2024, 5, 2), scope=1), sale("999", date(2024, 5, 2), scope=2)),
    )

    result = MetricsAggregator().aggregate(collections, MAY, TODAY, scope="1")

    assert result.sales.total == Decimal("100")
    assert result.sales.count == 1
    assert result.scope == 1


def test_unparsable_amount_counts_but_adds_nothing():
    collections = ActivityCollections(
        sales=(sale("100", date(2024, 5, 2)), sale(None, date(2024, 5, 3))),
    )

    result = MetricsAggregator().aggregate(collections, MAY, TODAY)

    assert result.sales.count == 2
    assert result.sales.total == Decimal("100")
    assert result.sales.invalid_amounts == 1


def test_undated_records_under_unbounded_period():
    collections = ActivityCollections(sales=(sale("100", date(2024, 5, 2)), sale("40", None)))

    lenient = MetricsAggregator().aggregate(collections, UNBOUNDED, TODAY)
    strict = MetricsAggregator(unbounded_admits_undated=False).aggregate(collections, UNBOUNDED, TODAY)

    assert lenient.sales.total == Decimal("140")
    assert strict.sales.total == Decimal("100")
    assert lenient.period_start is None
    assert lenient.to_dict()["period"] == {"start": None, "end": None}


def test_new_entities_use_fixed_recency_window():
    collections = ActivityCollections(
        products=(
            product("edge", date(2024, 5, 3)),
            product("old", date(2024, 5, 2)),
            product("fresh", TODAY),
            product("undated", None),
        ),
        customers=(customer("c1", date(2024, 5, 9)), customer("c2", date(2024, 1, 1))),
    )

    result = MetricsAggregator().aggregate(collections, resolve_period("today", TODAY), TODAY)

    assert result.new_products == 2
    assert result.new_customers == 1
    assert result.products_in_period == 1
    assert result.customers_in_period == 0


def test_aggregation_is_idempotent_and_json_safe():
    collections = ActivityCollections(
        sales=(sale("10.25", date(2024, 5, 2)),),
        purchases=(purchase("3.10", date(2024, 5, 2)),),
        registers=(RegisterRecord(register_id=1, name="Caja 1", cash=Decimal("20")),),
    )
    aggregator = MetricsAggregator()

    first = aggregator.aggregate(collections, MAY, TODAY, scope=1, opening_cash="100")
    second = aggregator.aggregate(collections, MAY, TODAY, scope=1, opening_cash="100")

    assert first == second
    assert first.to_dict() == second.to_dict()
    payload = json.loads(json.dumps(first.to_dict()))
    assert payload["sales"]["total"] == 10.25
    assert payload["balance"] == 107.15
    assert payload["registers"] == {"total": 1, "operational": 1, "status": ALL_OPERATIONAL}


def test_registers_follow_scope():
    collections = ActivityCollections(
        registers=(
            RegisterRecord(register_id=1, name="Caja 1", cash=Decimal("20")),
            RegisterRecord(register_id="2", name="Caja 2", cash=Decimal("0")),
        ),
    )
    aggregator = MetricsAggregator()

    everything = aggregator.aggregate(collections, MAY, TODAY)
    only_two = aggregator.aggregate(collections, MAY, TODAY, scope=2)

    assert everything.registers.status == PARTIALLY_OPERATIONAL
    assert only_two.registers.total == 1
    assert only_two.registers.status == NONE_OPERATIONAL


def test_summarize_registers_without_registers():
    assert summarize_registers(()) is None
    summary = summarize_registers([RegisterRecord(register_id=1, name="Caja", cash=None)])
    assert summary.operational == 0
    assert summary.status == NONE_OPERATIONAL


def test_monthly_series_oldest_first():
    sales = [
        sale("10", date(2023, 12, 5)),
        sale("20", date(2024, 3, 31)),
        sale("5", date(2024, 5, 1)),
        sale("7", date(2024, 5, 9)),
        sale("1000", date(2023, 11, 30)),
    ]

    series = MetricsAggregator().monthly_series(sales, TODAY)

    assert [point.label for point in series] == ["2023-12", "2024-01", "2024-02", "2024-03", "2024-04", "2024-05"]
    assert [point.total for point in series] == [
        Decimal("10"),
        Decimal("0"),
        Decimal("0"),
        Decimal("20"),
        Decimal("0"),
        Decimal("12"),
    ]


def test_daily_series_skips_undated_and_sorts():
    sales = [
        sale("5", date(2024, 5, 3), record_id="a"),
        sale("2", date(2024, 5, 1), record_id="b"),
        sale("3", date(2024, 5, 3), record_id="c"),
        sale("9", None, record_id="d"),
    ]

    series = MetricsAggregator.daily_series(sales, UNBOUNDED)

    assert [(point.label, point.total) for point in series] == [
        ("2024-05-01", Decimal("2")),
        ("2024-05-03", Decimal("8")),
    ]


def test_filter_collections_keeps_catalogues_unscoped():
    collections = ActivityCollections(
        sales=(sale("1", date(2024, 5, 2), scope=2),),
        products=(product("p", date(2024, 5, 2)),),
    )

    filtered = MetricsAggregator().filter_collections(collections, ResolvedPeriod(date(2024, 5, 1), TODAY), scope=1)

    assert filtered.sales == ()
    assert len(filtered.products) == 1


@pytest.mark.parametrize("opening", ["abc", math.nan, math.inf, Decimal("NaN"), ""])
def test_unusable_opening_cash_leaves_balance_out(opening):
    collections = ActivityCollections(sales=(sale("500", date(2024, 5, 2)),))

    result = MetricsAggregator().aggregate(collections, MAY, TODAY, scope=1, opening_cash=opening)

    assert result.balance is None
    assert result.profit == Decimal("500")
    assert "balance" not in result.to_dict()


def test_register_opening_cash_is_the_default():
    collections = ActivityCollections(
        sales=(sale("500", date(2024, 5, 2), scope=2),),
        registers=(
            RegisterRecord(register_id=1, name="Caja 1", cash=Decimal("0"), opening_cash=Decimal("50")),
            RegisterRecord(register_id=2, name="Caja 2", cash=Decimal("10"), opening_cash=Decimal("200")),
            RegisterRecord(register_id=3, name="Caja 3", cash=Decimal("10")),
        ),
    )
    aggregator = MetricsAggregator()

    from_register = aggregator.aggregate(collections, MAY, TODAY, scope="2")
    explicit = aggregator.aggregate(collections, MAY, TODAY, scope=2, opening_cash="1000")
    no_opening = aggregator.aggregate(collections, MAY, TODAY, scope=3)

    assert from_register.opening_cash == Decimal("200")
    assert from_register.balance == Decimal("700")
    assert explicit.balance == Decimal("1500")
    assert no_opening.balance is None


def test_recent_sales_newest_first_and_stable():
    sales = [
        sale("1", date(2024, 5, 1), record_id="a"),
        sale("2", date(2024, 5, 3), record_id="b"),
        sale("3", None, record_id="undated"),
        sale("4", date(2024, 5, 3), record_id="c"),
        sale("5", date(2024, 5, 2), record_id="d"),
    ]

    assert [record.record_id for record in recent_sales(sales)] == ["b", "c", "d"]
    assert [record.record_id for record in recent_sales(sales, limit=10)] == ["b", "c", "d", "a"]
    assert recent_sales([]) == []


def test_result_lists_recent_sales_for_scope():
    collections = ActivityCollections(
        sales=(
            sale("10", date(2024, 4, 1), scope=1, record_id="old"),
            sale("20", date(2024, 5, 9), scope=2, record_id="other-register"),
            sale("30", date(2024, 5, 8), scope=1, record_id="new"),
        ),
    )

    result = MetricsAggregator().aggregate(collections, resolve_period("today", TODAY), TODAY, scope=1)

    assert [record.record_id for record in result.recent_sales] == ["new", "old"]
    assert result.to_dict()["recent_sales"][0] == {"id": "new", "date": "2024-05-08", "total": 30.0, "register": 1}


def test_aggregate_with_subsets_returns_filtered_collections():
    collections = ActivityCollections(sales=(sale("1", date(2024, 5, 2)), sale("2", date(2024, 4, 2))))

    result, filtered = MetricsAggregator().aggregate_with_subsets(collections, MAY, TODAY)

    assert result.sales.count == len(filtered.sales) == 1
