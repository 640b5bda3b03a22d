"""Adapters from raw REST payloads to canonical domain records.

The back office API speaks Spanish field names (``fecha``, ``total``,
``monto``, ``cajaId``); older exports use English ones. Both map onto the
same record shape here so the domain layer only sees one.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from activity_metrics.domain.filtering import normalize_scope
from activity_metrics.domain.models import (
    ActivityCollections,
    InventoryRecord,
    PartyRecord,
    RegisterRecord,
    TransactionKind,
    TransactionRecord,
)
from activity_metrics.infrastructure.parsing.dates import normalize_date
from activity_metrics.infrastructure.parsing.utils import first_present, parse_amount, parse_decimal

logger = logging.getLogger(__name__)

AMOUNT_KEYS = {
    TransactionKind.SALE: ("total", "amount"),
    TransactionKind.PURCHASE: ("total", "amount"),
    TransactionKind.EXPENSE: ("monto", "amount", "total"),
}
DATE_KEYS = {
    TransactionKind.SALE: ("fecha", "occurredAt", "occurred_at", "createdAt", "created_at"),
    TransactionKind.PURCHASE: ("fecha", "occurredAt", "occurred_at", "createdAt", "created_at"),
    TransactionKind.EXPENSE: ("createdAt", "created_at", "fecha", "occurredAt", "occurred_at"),
}
SCOPE_KEYS = ("cajaId", "caja_id", "scopeId", "scope_id", "registerId")
ID_KEYS = ("id", "codigo", "code")

COLLECTION_KEYS = {
    "sales": ("ventas", "sales"),
    "purchases": ("compras", "purchases"),
    "expenses": ("gastos", "expenses"),
    "products": ("productos", "products"),
    "customers": ("clientes", "customers"),
    "registers": ("cajas", "registers"),
}


def _record_id(raw: Mapping[str, Any], index: int) -> str:
    value = first_present(raw, *ID_KEYS)
    return str(value) if value is not None else f"row-{index}"


def to_transaction(raw: Mapping[str, Any], kind: TransactionKind, index: int = 0) -> TransactionRecord:
    raw_amount = first_present(raw, *AMOUNT_KEYS[kind])
    return TransactionRecord(
        kind=kind,
        record_id=_record_id(raw, index),
        amount=parse_amount(raw_amount),
        occurred_on=normalize_date(first_present(raw, *DATE_KEYS[kind])),
        scope_id=normalize_scope(first_present(raw, *SCOPE_KEYS)),
        raw_amount="" if raw_amount is None else str(raw_amount),
    )


def to_product(raw: Mapping[str, Any], index: int = 0) -> InventoryRecord:
    return InventoryRecord(
        record_id=_record_id(raw, index),
        name=str(first_present(raw, "nombre", "name") or ""),
        created_on=normalize_date(first_present(raw, "createdAt", "created_at")),
    )


def to_customer(raw: Mapping[str, Any], index: int = 0) -> PartyRecord:
    first_name = first_present(raw, "nombre", "name") or ""
    last_name = first_present(raw, "apellido", "last_name") or ""
    return PartyRecord(
        record_id=_record_id(raw, index),
        name=f"{first_name} {last_name}".strip(),
        created_on=normalize_date(first_present(raw, "createdAt", "created_at")),
    )


def to_register(raw: Mapping[str, Any], index: int = 0) -> RegisterRecord:
    register_id = normalize_scope(first_present(raw, "id", "numero"))
    return RegisterRecord(
        register_id=register_id if register_id is not None else f"row-{index}",
        name=str(first_present(raw, "nombre", "name") or ""),
        cash=parse_decimal(first_present(raw, "efectivo", "cash")),
        opening_cash=parse_decimal(first_present(raw, "saldoInicial", "openingCash", "opening_cash")),
    )


def transactions_from_payload(rows: Iterable[Mapping[str, Any]], kind: TransactionKind) -> tuple[TransactionRecord, ...]:
    records = tuple(to_transaction(row, kind, index) for index, row in enumerate(rows))
    undated = sum(1 for record in records if record.occurred_on is None)
    if undated:
        logger.debug("%d of %d %s rows have no readable date", undated, len(records), kind.value)
    return records


def collections_from_payload(payload: Mapping[str, Sequence[Mapping[str, Any]]]) -> ActivityCollections:
    """Build all collections from a mapping keyed by Spanish or English names."""

    def rows(name: str) -> Sequence[Mapping[str, Any]]:
        for key in COLLECTION_KEYS[name]:
            if key in payload and payload[key] is not None:
                return payload[key]
        return ()

    return ActivityCollections(
        sales=transactions_from_payload(rows("sales"), TransactionKind.SALE),
        purchases=transactions_from_payload(rows("purchases"), TransactionKind.PURCHASE),
        expenses=transactions_from_payload(rows("expenses"), TransactionKind.EXPENSE),
        products=tuple(to_product(row, index) for index, row in enumerate(rows("products"))),
        customers=tuple(to_customer(row, index) for index, row in enumerate(rows("customers"))),
        registers=tuple(to_register(row, index) for index, row in enumerate(rows("registers"))),
    )
