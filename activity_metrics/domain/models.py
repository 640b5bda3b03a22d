"""Domain models for the activity aggregation pipeline.

These dataclasses capture the canonical shape of records once the boundary
adapters have normalized dates, amounts and register ids.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Sequence, Union

CalendarDate = date
ScopeId = Union[int, str]


class TransactionKind(str, Enum):
    SALE = "sale"
    PURCHASE = "purchase"
    EXPENSE = "expense"


@dataclass(frozen=True)
class TransactionRecord:
    """A sale, purchase or expense.

    ``amount`` is ``None`` when the raw value could not be read as a finite,
    non-negative decimal; such records still count but add nothing to totals.
    """

    kind: TransactionKind
    record_id: str
    amount: Decimal | None
    occurred_on: CalendarDate | None
    scope_id: ScopeId | None = None
    raw_amount: str = ""

    @property
    def amount_or_zero(self) -> Decimal:
        return self.amount if self.amount is not None else Decimal("0")


@dataclass(frozen=True)
class InventoryRecord:
    """Product; only its creation date participates in metrics."""

    record_id: str
    name: str
    created_on: CalendarDate | None


@dataclass(frozen=True)
class PartyRecord:
    """Customer; only its creation date participates in metrics."""

    record_id: str
    name: str
    created_on: CalendarDate | None


@dataclass(frozen=True)
class RegisterRecord:
    """Cash register (caja) with its current cash on hand and opening balance."""

    register_id: ScopeId
    name: str
    cash: Decimal | None
    opening_cash: Decimal | None = None


@dataclass(frozen=True)
class ActivityCollections:
    sales: Sequence[TransactionRecord] = field(default_factory=tuple)
    purchases: Sequence[TransactionRecord] = field(default_factory=tuple)
    expenses: Sequence[TransactionRecord] = field(default_factory=tuple)
    products: Sequence[InventoryRecord] = field(default_factory=tuple)
    customers: Sequence[PartyRecord] = field(default_factory=tuple)
    registers: Sequence[RegisterRecord] = field(default_factory=tuple)

    def sizes(self) -> dict[str, int]:
        return {
            "sales": len(self.sales),
            "purchases": len(self.purchases),
            "expenses": len(self.expenses),
            "products": len(self.products),
            "customers": len(self.customers),
            "registers": len(self.registers),
        }
