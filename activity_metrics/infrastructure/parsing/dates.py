"""Normalization of heterogeneous date values into calendar dates.

Timestamps are reduced to the calendar fields they were written with. A value
such as ``2024-06-15T00:00:00.000Z`` is 15 June no matter which UTC offset the
process runs under, because no zone conversion ever happens here.
"""
from __future__ import annotations

import re
import warnings
from datetime import date, datetime

import pandas as pd

_ISO_DATE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?)?"
    r"(?:Z|[+-]\d{2}:?\d{2})?$"
)
_DAY_FIRST = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})(?:[ ,T].*)?$")
_RELATIVE_WORDS = {"now", "today", "tomorrow", "yesterday"}
_YEAR = re.compile(r"(?<!\d)\d{4}(?!\d)")
_DAY = re.compile(r"(?<!\d)\d{1,2}(?!\d)")
_TIME = re.compile(r"\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?")


def normalize_date(value: object) -> date | None:
    """Return the calendar date carried by ``value``, or ``None``.

    Accepts date and datetime objects (including pandas timestamps),
    ``YYYY-MM-DD`` strings with an optional time part, day-first
    ``dd/mm/yyyy`` triples, and anything else pandas can parse.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return date(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    match = _ISO_DATE.match(text)
    if match:
        return _from_fields(match.groups())

    match = _DAY_FIRST.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    if text.lower() in _RELATIVE_WORDS:
        return None
    return _parse_general(text)


def _from_fields(groups: tuple[str | None, ...]) -> date | None:
    year, month, day, hour, minute, second = groups
    try:
        parsed = datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
        )
    except ValueError:
        return None
    return parsed.date()


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_general(text: str) -> date | None:
    # pandas fills missing fields from the clock or from year 1; only full dates pass
    if not _YEAR.search(text) or not _DAY.search(_TIME.sub(" ", text)):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    if str(parsed.year) not in _YEAR.findall(text):
        return None
    return date(parsed.year, parsed.month, parsed.day)
