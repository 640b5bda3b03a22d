"""Period tokens and their resolution into inclusive calendar-date windows.

Every function here is a pure function of its arguments. The reference date
is always passed in; nothing in this module reads the clock.
"""
from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Union

TODAY = "today"
YESTERDAY = "yesterday"
WEEK = "week"
MONTH = "month"
YEAR = "year"
CUSTOM = "custom"
ALL = "all"

_LAST_N_DAYS = re.compile(r"^last(\d+)days$")

TOKEN_ALIASES = {
    "hoy": TODAY,
    "ayer": YESTERDAY,
    "semana": WEEK,
    "7dias": "last7days",
    "7days": "last7days",
    "30days": "last30days",
    "365days": "last365days",
    "1mes": MONTH,
    "mes": MONTH,
    "año": YEAR,
    "anio": YEAR,
    "rango": CUSTOM,
    "range": CUSTOM,
    "todos": ALL,
}


@dataclass(frozen=True)
class ResolvedPeriod:
    """Inclusive ``[start, end]`` window of calendar dates."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


class _Unbounded:
    _instance: "_Unbounded | None" = None

    def __new__(cls) -> "_Unbounded":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNBOUNDED"

    def to_dict(self) -> dict[str, None]:
        return {"start": None, "end": None}


UNBOUNDED = _Unbounded()
Window = Union[ResolvedPeriod, _Unbounded]


@dataclass(frozen=True)
class PeriodSpec:
    """A named token, optionally carrying explicit bounds for ``custom``."""

    token: str = ALL
    start: date | None = None
    end: date | None = None

    @classmethod
    def custom(cls, start: date, end: date | None = None) -> "PeriodSpec":
        return cls(token=CUSTOM, start=start, end=end)

    @property
    def canonical_token(self) -> str:
        return canonical_token(self.token)


def canonical_token(token: str | None) -> str:
    if token is None:
        return ALL
    key = token.strip().lower()
    if not key:
        return ALL
    return TOKEN_ALIASES.get(key, key)


def resolve_period(spec: PeriodSpec | str | None, today: date) -> Window:
    """Resolve ``spec`` against ``today`` into a window.

    ``None`` and ``all`` resolve to :data:`UNBOUNDED`. A ``custom`` spec with
    no start is also unbounded. Unknown tokens raise ``ValueError``.
    """
    if spec is None:
        return UNBOUNDED
    if isinstance(spec, str):
        spec = PeriodSpec(token=spec)

    token = spec.canonical_token
    if token == ALL:
        return UNBOUNDED
    if token == TODAY:
        return ResolvedPeriod(today, today)
    if token == YESTERDAY:
        day = today - timedelta(days=1)
        return ResolvedPeriod(day, day)
    if token == WEEK:
        return ResolvedPeriod(today - timedelta(days=today.weekday()), today)
    if token == MONTH:
        return current_month_period(today)
    if token == YEAR:
        return ResolvedPeriod(date(today.year, 1, 1), today)
    if token == CUSTOM:
        if spec.start is None:
            return UNBOUNDED
        return _ordered(spec.start, spec.end or today)

    match = _LAST_N_DAYS.match(token)
    if match:
        return recent_window(today, int(match.group(1)))
    raise ValueError(f"Unknown period token: {spec.token!r}")


def recent_window(today: date, days: int) -> ResolvedPeriod:
    """``[today - days, today]``, both ends inclusive."""
    if days < 0:
        raise ValueError("days must be non-negative")
    return ResolvedPeriod(today - timedelta(days=days), today)


def month_period(year: int, month: int) -> ResolvedPeriod:
    last_day = calendar.monthrange(year, month)[1]
    return ResolvedPeriod(date(year, month, 1), date(year, month, last_day))


def current_month_period(today: date) -> ResolvedPeriod:
    """First day of ``today``'s month through ``today``."""
    return ResolvedPeriod(today.replace(day=1), today)


def previous_month_period(today: date) -> ResolvedPeriod:
    year, month = shift_month(today.year, today.month, -1)
    return month_period(year, month)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _ordered(start: date, end: date) -> ResolvedPeriod:
    if start > end:
        start, end = end, start
    return ResolvedPeriod(start, end)
