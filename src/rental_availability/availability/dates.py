"""Parsing and formatting helpers for year-less ``M/D-M/D`` date ranges."""
from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Tuple, Union

_MONTH_DAY = re.compile(r"^\s*(?P<month>\d{1,2})\s*/\s*(?P<day>\d{1,2})\s*$")

DateLike = Union[date, datetime]


class DateRangeError(ValueError):
    """Raised when a date-range string cannot be interpreted."""


def _parse_month_day(text: str, year: int, *, source: str) -> date:
    match = _MONTH_DAY.match(text)
    if not match:
        raise DateRangeError(f"Invalid month/day '{text}' in date range '{source}'")
    try:
        return date(year, int(match.group("month")), int(match.group("day")))
    except ValueError as exc:
        raise DateRangeError(f"Invalid calendar date '{text}' in date range '{source}'") from exc


def parse_date_range(value: str, *, reference_date: date) -> Tuple[date, date]:
    """Convert ``"9/23-9/25"`` into absolute dates.

    The start takes the year of ``reference_date``. When the end falls earlier in
    the calendar than the start (``"12/28-1/3"``) it belongs to the following year.
    """
    if not value or "-" not in value:
        raise DateRangeError(f"Date range '{value}' must look like M/D-M/D")
    start_text, end_text = value.split("-", 1)
    start = _parse_month_day(start_text, reference_date.year, source=value)
    end = _parse_month_day(end_text, reference_date.year, source=value)
    if end < start:
        end = _parse_month_day(end_text, reference_date.year + 1, source=value)
    return start, end


def format_month_day(value: date) -> str:
    return f"{value.month}/{value.day}"


def format_date_range(start: date, end: date) -> str:
    return f"{format_month_day(start)}-{format_month_day(end)}"


def format_display_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def nights_between(start: DateLike, end: DateLike) -> int:
    """Whole nights between two dates, rounding partial days up."""
    if isinstance(start, datetime) or isinstance(end, datetime):
        start_dt = start if isinstance(start, datetime) else datetime.combine(start, datetime.min.time())
        end_dt = end if isinstance(end, datetime) else datetime.combine(end, datetime.min.time())
        return math.ceil((end_dt - start_dt).total_seconds() / timedelta(days=1).total_seconds())
    return (end - start).days


def as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def iter_nights(start: date, end: date):
    """Yield each calendar date in the half-open interval ``[start, end)``."""
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)
