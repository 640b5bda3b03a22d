"""Signed percentage change between two comparable aggregates."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, Decimal]

_ONE_DECIMAL = Decimal("0.1")


def trend_percentage(previous: Number, current: Number) -> str:
    """Format the change from ``previous`` to ``current``.

    A zero baseline yields ``"+100%"`` when ``current`` is positive and
    ``"0%"`` otherwise.
    """
    previous = _to_decimal(previous)
    current = _to_decimal(current)
    if previous == 0:
        return "+100%" if current > 0 else "0%"
    change = (current - previous) / abs(previous) * 100
    percent = abs(change).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
    # sign follows the unrounded change, so tiny moves read "+0.0%" or "-0.0%"
    sign = "+" if change > 0 else "-" if change < 0 else ""
    return f"{sign}{percent}%"


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
