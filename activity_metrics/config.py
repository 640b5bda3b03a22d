"""Central configuration for the activity metrics package."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Context, Decimal
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
EXPORT_DIR = BASE_DIR / "exports"


@dataclass(slots=True, frozen=True)
class Settings:
    decimal_context: Context
    money_quantum: Decimal
    recency_window_days: int
    trend_history_months: int
    recent_sales_limit: int
    unbounded_admits_undated: bool
    export_dir: Path


SETTINGS = Settings(
    decimal_context=Context(prec=28),
    money_quantum=Decimal("0.01"),
    recency_window_days=7,
    trend_history_months=6,
    recent_sales_limit=3,
    unbounded_admits_undated=True,
    export_dir=EXPORT_DIR,
)
