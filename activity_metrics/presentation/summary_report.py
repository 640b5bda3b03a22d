"""Summary report generators for dashboard results."""
from __future__ import annotations

import csv
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO, StringIO
from pathlib import Path
from typing import Sequence

import pandas as pd
from xlsxwriter.utility import xl_col_to_name

from activity_metrics.application.dto import DashboardResponse
from activity_metrics.config import SETTINGS
from activity_metrics.domain.models import InventoryRecord, PartyRecord, TransactionRecord
from activity_metrics.domain.results import AggregateResult

FAMILY_LABELS = {
    "sales": "Ventas",
    "purchases": "Compras",
    "expenses": "Gastos",
}
TRANSACTION_SHEETS = {"Ventas", "Compras", "Gastos"}


def format_money(value: Decimal) -> str:
    return str(value.quantize(SETTINGS.money_quantum, rounding=ROUND_HALF_UP))


def result_to_rows(result: AggregateResult) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for key, label in FAMILY_LABELS.items():
        family = getattr(result, key)
        rows.append(
            {
                "metric": label,
                "total": format_money(family.total),
                "count": str(family.count),
                "trend": family.trend,
            }
        )
    rows.append({"metric": "Ganancia", "total": format_money(result.profit), "count": "", "trend": ""})
    if result.balance is not None:
        rows.append(
            {"metric": "Balance", "total": format_money(result.balance), "count": "", "trend": result.balance_trend or ""}
        )
    rows.append({"metric": "Productos nuevos", "total": "", "count": str(result.new_products), "trend": ""})
    rows.append({"metric": "Clientes nuevos", "total": "", "count": str(result.new_customers), "trend": ""})
    return rows


def render_csv(result: AggregateResult) -> bytes:
    rows = result_to_rows(result)
    buffer = StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()))
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def transactions_to_dataframe(records: Sequence[TransactionRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": r.record_id,
                "kind": r.kind.value,
                "date": r.occurred_on,
                "amount": float(r.amount) if r.amount is not None else None,
                "raw_amount": r.raw_amount,
                "register": r.scope_id,
            }
            for r in records
        ],
        columns=["id", "kind", "date", "amount", "raw_amount", "register"],
    )


def parties_to_dataframe(records: Sequence[InventoryRecord | PartyRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"id": r.record_id, "name": r.name, "created": r.created_on} for r in records],
        columns=["id", "name", "created"],
    )


def export_excel(response: DashboardResponse, out: Path | BytesIO) -> Path | BytesIO:
    """Write the summary and every filtered collection to one workbook.

    Transaction rows whose amount could not be read are highlighted.
    """
    if not isinstance(out, BytesIO):
        out = Path(out)
        out.parent.mkdir(parents=True, exist_ok=True)
    filtered = response.filtered
    sheets = {
        "Resumen": pd.DataFrame(result_to_rows(response.result)),
        "Ventas": transactions_to_dataframe(filtered.sales),
        "Compras": transactions_to_dataframe(filtered.purchases),
        "Gastos": transactions_to_dataframe(filtered.expenses),
        "Productos": parties_to_dataframe(filtered.products),
        "Clientes": parties_to_dataframe(filtered.customers),
    }
    with pd.ExcelWriter(out, engine="xlsxwriter") as writer:
        yellow = writer.book.add_format({"bg_color": "#FFFF00"})
        for name, frame in sheets.items():
            frame.to_excel(writer, sheet_name=name, index=False)
            if name not in TRANSACTION_SHEETS or frame.empty:
                continue
            amount_col = xl_col_to_name(frame.columns.get_loc("amount"))
            writer.sheets[name].conditional_format(1, 0, len(frame), len(frame.columns) - 1, {
                "type": "formula",
                "criteria": f"=ISBLANK(${amount_col}2)",
                "format": yellow,
            })
    return out
