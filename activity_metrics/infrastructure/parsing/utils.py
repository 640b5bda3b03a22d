"""Shared parsing utilities for raw REST payloads."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

_CURRENCY_NOISE = [",", "$", "€", "£", "Q", " "]


def parse_decimal(value: object) -> Decimal | None:
    """Read a money-like value, or ``None`` when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    s = str(value).strip()
    if not s or s.upper() == "NAN":
        return None
    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    for ch in _CURRENCY_NOISE:
        s = s.replace(ch, "")
    try:
        result = Decimal(s)
    except InvalidOperation:
        return None
    if not result.is_finite():
        return None
    if negative:
        result = -result
    return result


def parse_amount(value: object) -> Decimal | None:
    """Transaction amounts must be finite and non-negative."""
    result = parse_decimal(value)
    if result is None or result < 0:
        return None
    return result


def first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    """Value of the first key holding something other than ``None`` or ``""``."""
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None
