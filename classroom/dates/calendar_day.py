"""Timezone-free civil dates and the single parser that produces them.

Class records come from an external scheduling feed and from admin date
pickers, so dates arrive as ISO strings (sometimes with a time and zone
suffix), ``dd/mm/yyyy`` text, ``datetime`` objects or stored instants.
:func:`normalize` turns any of these into a :class:`CalendarDay` without
ever moving the value across a day boundary.  Bad input yields ``None``;
callers decide the fallback.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pandas as pd

from classroom.config import get_local_timezone

LOGGER = logging.getLogger(__name__)

MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_ISO_EXACT = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DAY_FIRST = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$")
_PICKER_DMY = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$")
_NULL_TEXT = {"", "nan", "nat", "none", "null", "undefined"}
# Relative words pandas would resolve against the wall clock.
_RELATIVE_TEXT = {"today", "now", "tomorrow", "yesterday"}


@dataclass(frozen=True, order=True)
class CalendarDay:
    """One civil date with no time-of-day and no zone."""

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        try:
            date(self.year, self.month, self.day)
        except ValueError as exc:
            raise ValueError(
                f"Invalid calendar day {self.year}-{self.month}-{self.day}"
            ) from exc

    @classmethod
    def from_date(cls, value: date) -> "CalendarDay":
        return cls(value.year, value.month, value.day)

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def __str__(self) -> str:
        return to_canonical_string(self)


def _from_parts(year: int, month: int, day: int) -> Optional[CalendarDay]:
    try:
        return CalendarDay(year, month, day)
    except ValueError:
        return None


def _parse_text(text: str) -> Optional[CalendarDay]:
    raw = text.strip()
    if raw.lower() in _NULL_TEXT or raw.lower() in _RELATIVE_TEXT:
        return None

    # ISO prefix wins; anything after the date (time, "Z", offsets) is cut off.
    match = _ISO_PREFIX.match(raw)
    if match:
        return _from_parts(int(match[1]), int(match[2]), int(match[3]))

    match = _DAY_FIRST.match(raw)
    if match:
        day = _from_parts(int(match[3]), int(match[2]), int(match[1]))
        if day is not None:
            return day
        # Not a day-first date ("12/31/2026"); let the generic parser try.

    try:
        parsed = pd.to_datetime(raw, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        parsed = pd.NaT
    if pd.isna(parsed):
        LOGGER.debug("Unparseable date text %r", raw)
        return None
    # The text's own civil date, even when it carries an offset.
    return CalendarDay.from_date(parsed.date())


def normalize(value: Any) -> Optional[CalendarDay]:
    """Return the local :class:`CalendarDay` for ``value`` or ``None``.

    Strings starting with ``YYYY-MM-DD`` are read as that civil date (any
    trailing time or zone is ignored), day-first ``dd/mm/yyyy`` strings are
    accepted, and other text (including slash dates that only read
    month-first) goes through :func:`pandas.to_datetime`.  Relative words
    such as ``"today"`` are rejected rather than read from the clock.
    Naive ``datetime`` values keep their own date; timezone-aware instants
    are converted to the configured local zone first, so a stored
    ``2026-02-09T17:00Z`` reads as 10 Feb in Bangkok.
    """

    if value is None or value is pd.NaT:
        return None
    if isinstance(value, CalendarDay):
        return value
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(get_local_timezone())
        return CalendarDay.from_date(value.date())
    if isinstance(value, date):
        return CalendarDay.from_date(value)
    if isinstance(value, str):
        return _parse_text(value)
    return None


def to_canonical_string(day: CalendarDay) -> str:
    """Return ``day`` as zero-padded ``YYYY-MM-DD``."""

    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def add_days(day: CalendarDay, n: int) -> CalendarDay:
    """Return the day ``n`` days after ``day`` (before it when negative)."""

    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"Day offset must be an int, got {type(n).__name__}")
    return CalendarDay.from_date(day.to_date() + timedelta(days=n))


def diff_days(a: CalendarDay, b: CalendarDay) -> int:
    """Return ``b - a`` in whole days."""

    return (b.to_date() - a.to_date()).days


def parse_filter_date(text: Any) -> Optional[CalendarDay]:
    """Parse date-picker text (``d/m/yyyy``, ``d-m-yyyy`` or ``YYYY-MM-DD``).

    Stricter than :func:`normalize`: no time suffixes and no generic parsing,
    so a typo in a filter box clears the bound instead of guessing.
    """

    if not isinstance(text, str):
        return None
    raw = text.strip()
    if not raw:
        return None
    match = _PICKER_DMY.match(raw)
    if match:
        return _from_parts(int(match[3]), int(match[2]), int(match[1]))
    match = _ISO_EXACT.match(raw)
    if match:
        return _from_parts(int(match[1]), int(match[2]), int(match[3]))
    return None


def format_dmy(day: CalendarDay) -> str:
    """``dd/mm/yyyy`` text for filling a date picker."""

    return f"{day.day:02d}/{day.month:02d}/{day.year:04d}"


def format_day(day: CalendarDay) -> str:
    """English display form, e.g. ``17 Feb 2026``."""

    return f"{day.day} {MONTH_ABBR[day.month - 1]} {day.year}"


def format_header(day: CalendarDay) -> str:
    """Printed report column header, e.g. ``03 FEB 2026``."""

    return f"{day.day:02d} {MONTH_ABBR[day.month - 1].upper()} {day.year}"


def local_today(now: Optional[datetime] = None) -> CalendarDay:
    """Return today's civil date in the configured zone.

    Only the I/O edge should call this; the date helpers themselves take
    ``today`` as an argument.
    """

    tz = get_local_timezone()
    current = now.astimezone(tz) if now is not None else datetime.now(tz)
    return CalendarDay.from_date(current.date())


__all__ = [
    "CalendarDay",
    "MONTH_ABBR",
    "add_days",
    "diff_days",
    "format_day",
    "format_dmy",
    "format_header",
    "local_today",
    "normalize",
    "parse_filter_date",
    "to_canonical_string",
]
