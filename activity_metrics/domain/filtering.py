"""Predicate-based record filtering over calendar-date windows and scopes."""
from __future__ import annotations

import re
from datetime import date
from typing import Callable, Iterable, TypeVar

from .models import ScopeId
from .periods import UNBOUNDED, Window

T = TypeVar("T")

_INTEGER = re.compile(r"[+-]?[0-9]+")


def normalize_scope(value: object) -> ScopeId | None:
    """Map register ids to one comparable form.

    ``1``, ``"1"`` and ``" 1 "`` all become ``1``; other strings are stripped;
    ``None`` and blank strings become ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else str(value)
    text = str(value).strip()
    if not text:
        return None
    if _INTEGER.fullmatch(text):
        return int(text)
    return text


def filter_records(
    records: Iterable[T],
    date_of: Callable[[T], date | None],
    period: Window,
    scope_of: Callable[[T], object] | None = None,
    scope: object = None,
    *,
    strict_dates: bool = False,
) -> list[T]:
    """Return the records inside ``period`` and ``scope``, in input order.

    Records without a date never pass a bounded period. Under
    :data:`UNBOUNDED` they pass unless ``strict_dates`` is set.
    """
    wanted_scope = normalize_scope(scope)
    if wanted_scope is not None and scope_of is None:
        raise ValueError("Filtering by scope requires a scope accessor")

    bounded = period is not UNBOUNDED
    selected: list[T] = []
    for record in records:
        day = date_of(record)
        if day is None:
            if bounded or strict_dates:
                continue
        elif bounded and not period.contains(day):
            continue
        if wanted_scope is not None and normalize_scope(scope_of(record)) != wanted_scope:
            continue
        selected.append(record)
    return selected
