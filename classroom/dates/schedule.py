"""Reconcile a class record's training days into one model.

A class document stores its days in one of two ways:

* ``days`` – an explicit list of dates (the source of truth when present);
* ``date`` + ``duration.dayCount`` – a start day and a number of
  consecutive days.

:meth:`ClassSchedule.from_record` reads either shape and always produces a
sorted, de-duplicated tuple of :class:`~classroom.dates.calendar_day.CalendarDay`.
A record with no usable dates gives an *empty* schedule, which every other
helper treats as "no data".
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from classroom.config import DEFAULT_DAY_COUNT

from .calendar_day import CalendarDay, add_days, normalize

LOGGER = logging.getLogger(__name__)

EXPLICIT = "explicit"
IMPLICIT = "implicit"

# Historical field names seen in class documents and report payloads.
DAYS_KEYS = ("days", "classDays", "trainingDays", "scheduleDays")
START_KEYS = ("date", "startDate", "start_date", "start", "startAt", "start_at")
_DAY_ITEM_KEYS = ("date", "ymd", "day", "value", "startDate", "start")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _normalize_item(item: Any) -> Optional[CalendarDay]:
    if isinstance(item, Mapping):
        for key in _DAY_ITEM_KEYS:
            if not _is_blank(item.get(key)):
                return normalize(item[key])
        return None
    return normalize(item)


def coerce_day_count(value: Any) -> int:
    """Return ``value`` as a day count of at least one.

    Missing, non-numeric or non-positive counts fall back to a single day.
    A fractional count covers a partial day, so ``2.5`` means three days.
    """

    if value is None or isinstance(value, bool):
        return DEFAULT_DAY_COUNT
    try:
        count = math.ceil(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_DAY_COUNT
    return max(DEFAULT_DAY_COUNT, count)


@dataclass(frozen=True)
class ClassSchedule:
    """The training days of one class.

    ``source`` records which representation the days came from because
    :func:`~classroom.dates.matching.overlaps` treats the two differently.
    ``length`` is the declared day count of an implicit schedule (kept even
    when its start date could not be read).
    """

    days: Tuple[CalendarDay, ...] = ()
    source: str = EXPLICIT
    start: Optional[CalendarDay] = None
    length: int = DEFAULT_DAY_COUNT

    def __post_init__(self) -> None:
        if self.source not in (EXPLICIT, IMPLICIT):
            raise ValueError(f"Unknown schedule source {self.source!r}")
        for earlier, later in zip(self.days, self.days[1:]):
            if not earlier < later:
                raise ValueError("Schedule days must be strictly ascending")

    @classmethod
    def from_days(cls, values: Iterable[Any]) -> "ClassSchedule":
        """Build an explicit schedule, dropping entries that do not parse."""

        parsed = set()
        for item in values:
            day = _normalize_item(item)
            if day is None:
                LOGGER.debug("Dropping unparseable schedule day %r", item)
                continue
            parsed.add(day)
        ordered = tuple(sorted(parsed))
        return cls(days=ordered, source=EXPLICIT, length=len(ordered) or DEFAULT_DAY_COUNT)

    @classmethod
    def from_start(cls, start: Any, day_count: Any = DEFAULT_DAY_COUNT) -> "ClassSchedule":
        """Build an implicit schedule of ``day_count`` days from ``start``."""

        count = coerce_day_count(day_count)
        first = normalize(start)
        if first is None:
            return cls(source=IMPLICIT, length=count)
        days = tuple(add_days(first, offset) for offset in range(count))
        return cls(days=days, source=IMPLICIT, start=first, length=count)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ClassSchedule":
        """Reconcile a class record into a schedule.

        An explicit day list wins whenever at least one of its entries
        parses; otherwise the start date and day count are expanded.
        """

        if not isinstance(record, Mapping):
            raise TypeError(f"Class record must be a mapping, got {type(record).__name__}")

        for key in DAYS_KEYS:
            raw = record.get(key)
            if isinstance(raw, (list, tuple)) and raw:
                explicit = cls.from_days(raw)
                if explicit.days:
                    return explicit
                LOGGER.debug("Record %r has no valid %s; using start date", record.get("title"), key)
                break

        start = next((record[k] for k in START_KEYS if not _is_blank(record.get(k))), None)
        return cls.from_start(start, record_day_count(record))

    @property
    def is_empty(self) -> bool:
        return not self.days

    @property
    def first_day(self) -> Optional[CalendarDay]:
        return self.days[0] if self.days else None

    @property
    def last_day(self) -> Optional[CalendarDay]:
        return self.days[-1] if self.days else None

    @property
    def day_count(self) -> int:
        """Number of training days (the declared count when no day parsed)."""

        return len(self.days) or self.length

    def __len__(self) -> int:
        return len(self.days)

    def __iter__(self):
        return iter(self.days)


def record_day_count(record: Mapping[str, Any]) -> int:
    """Return the declared day count of a class record."""

    duration = record.get("duration")
    raw = duration.get("dayCount") if isinstance(duration, Mapping) else None
    if _is_blank(raw) or raw == 0:
        raw = record.get("dayCount")
    return coerce_day_count(raw)


def training_day(schedule: ClassSchedule, day_number: int) -> Optional[CalendarDay]:
    """Return the date of training day ``day_number`` (1-based)."""

    if 1 <= day_number <= len(schedule.days):
        return schedule.days[day_number - 1]
    return None


def resolve_current_training_day(schedule: ClassSchedule, today: CalendarDay) -> Optional[int]:
    """Return which training day ``today`` is (1-based), or ``None``."""

    for number, day in enumerate(schedule.days, start=1):
        if day == today:
            return number
        if day > today:
            break
    return None


def is_training_day(schedule: ClassSchedule, day_number: int, today: CalendarDay) -> bool:
    """True when training day ``day_number`` is held on ``today``.

    Check-in only offers classes whose selected day is today.
    """

    expected = training_day(schedule, day_number)
    return expected is not None and expected == today


__all__ = [
    "ClassSchedule",
    "DAYS_KEYS",
    "EXPLICIT",
    "IMPLICIT",
    "START_KEYS",
    "coerce_day_count",
    "is_training_day",
    "record_day_count",
    "resolve_current_training_day",
    "training_day",
]
