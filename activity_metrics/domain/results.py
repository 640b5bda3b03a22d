"""Domain-level results for activity aggregation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Sequence

from .models import ScopeId, TransactionRecord


def _sale_entry(record: TransactionRecord) -> dict[str, Any]:
    return {
        "id": record.record_id,
        "date": record.occurred_on.isoformat() if record.occurred_on else None,
        "total": _number(record.amount) if record.amount is not None else None,
        "register": record.scope_id,
    }


def _number(value: Decimal) -> float:
    return float(value)


@dataclass(frozen=True)
class MetricFamily:
    total: Decimal
    count: int
    trend: str
    invalid_amounts: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": _number(self.total),
            "count": self.count,
            "trend": self.trend,
            "invalid_amounts": self.invalid_amounts,
        }


@dataclass(frozen=True)
class RegisterSummary:
    total: int
    operational: int
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "operational": self.operational, "status": self.status}


@dataclass(frozen=True)
class SeriesPoint:
    label: str
    total: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "total": _number(self.total)}


@dataclass(frozen=True)
class AggregateResult:
    today: date
    period_start: date | None
    period_end: date | None
    scope: ScopeId | None
    sales: MetricFamily
    purchases: MetricFamily
    expenses: MetricFamily
    products_in_period: int
    customers_in_period: int
    new_products: int
    new_customers: int
    profit: Decimal
    balance: Decimal | None = None
    opening_cash: Decimal | None = None
    balance_trend: str | None = None
    registers: RegisterSummary | None = None
    monthly_sales: Sequence[SeriesPoint] = field(default_factory=tuple)
    recent_sales: Sequence[TransactionRecord] = field(default_factory=tuple)

    @property
    def has_balance(self) -> bool:
        return self.balance is not None

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-safe representation for the rendering layer."""
        payload: dict[str, Any] = {
            "today": self.today.isoformat(),
            "period": {
                "start": self.period_start.isoformat() if self.period_start else None,
                "end": self.period_end.isoformat() if self.period_end else None,
            },
            "scope": self.scope,
            "sales": self.sales.to_dict(),
            "purchases": self.purchases.to_dict(),
            "expenses": self.expenses.to_dict(),
            "products_in_period": self.products_in_period,
            "customers_in_period": self.customers_in_period,
            "new_products": self.new_products,
            "new_customers": self.new_customers,
            "profit": _number(self.profit),
            "monthly_sales": [point.to_dict() for point in self.monthly_sales],
            "recent_sales": [_sale_entry(record) for record in self.recent_sales],
        }
        if self.balance is not None:
            payload["balance"] = _number(self.balance)
            payload["opening_cash"] = _number(self.opening_cash) if self.opening_cash is not None else None
            payload["balance_trend"] = self.balance_trend
        if self.registers is not None:
            payload["registers"] = self.registers.to_dict()
        return payload
