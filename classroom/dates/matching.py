"""Decide whether a class falls inside a date filter.

Every list and report filter goes through :func:`overlaps` so the class
list, the dashboard and the printed reports agree on which classes a date
range selects.

The two schedule shapes keep their historical semantics:

* explicit day lists match when **any** listed day is inside the window;
* implicit start + day count schedules are one contiguous interval and
  match on interval overlap.

With a gap in the explicit list (10 Feb and 20 Feb) a window of 12–15 Feb
selects nothing, while the equivalent implicit span would overlap.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .calendar_day import CalendarDay, add_days, parse_filter_date
from .schedule import IMPLICIT, ClassSchedule

# Preset name -> number of days before ``today`` the window starts.
PRESET_LOOKBACK: Dict[str, int] = {
    "today": 0,
    "week": 6,
    "month": 29,
}


@dataclass(frozen=True)
class FilterWindow:
    """Inclusive ``[start, end]`` bounds; ``None`` leaves a side open.

    ``start > end`` is allowed and contains no day, so explicit day lists
    never match it.  Implicit schedules still use the interval test in
    :func:`overlaps` and match when their span covers both bounds.
    """

    start: Optional[CalendarDay] = None
    end: Optional[CalendarDay] = None

    @classmethod
    def from_text(cls, from_text: Any = None, to_text: Any = None) -> "FilterWindow":
        """Build a window from date-picker text; unreadable bounds are dropped."""

        return cls(parse_filter_date(from_text), parse_filter_date(to_text))

    @classmethod
    def preset(cls, name: str, today: CalendarDay) -> "FilterWindow":
        """Return the quick-filter window ending on ``today``.

        ``"today"``, ``"week"`` (last 7 days) and ``"month"`` (last 30 days)
        are supported, plus ``"all"`` for no bounds.
        """

        if name == "all":
            return cls()
        try:
            lookback = PRESET_LOOKBACK[name]
        except KeyError:
            raise ValueError(f"Unknown date preset {name!r}") from None
        return cls(add_days(today, -lookback), today)

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, day: CalendarDay) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


def overlaps(schedule: ClassSchedule, window: Optional[FilterWindow] = None) -> bool:
    """Return True if ``schedule`` has training inside ``window``.

    An empty schedule never matches, not even an unbounded window.
    """

    if window is None:
        window = FilterWindow()
    if schedule.is_empty:
        return False
    if schedule.source == IMPLICIT:
        first, last = schedule.days[0], schedule.days[-1]
        return (window.end is None or first <= window.end) and (
            window.start is None or last >= window.start
        )
    return any(window.contains(day) for day in schedule.days)


def first_day(schedule: ClassSchedule) -> Optional[CalendarDay]:
    return schedule.first_day


def last_day(schedule: ClassSchedule) -> Optional[CalendarDay]:
    return schedule.last_day


def days_in_window(
    schedule: ClassSchedule, window: Optional[FilterWindow] = None
) -> List[Tuple[int, CalendarDay]]:
    """Return ``(day_number, day)`` pairs of ``schedule`` inside ``window``.

    Day numbers are 1-based positions in the full schedule, so a report
    limited to the second half of a class still labels its columns
    "Day 3", "Day 4".
    """

    window = window or FilterWindow()
    return [
        (number, day)
        for number, day in enumerate(schedule.days, start=1)
        if window.contains(day)
    ]


def filter_classes(
    records: Iterable[Mapping[str, Any]], window: Optional[FilterWindow] = None
) -> List[Mapping[str, Any]]:
    """Return the class records whose schedule overlaps ``window``."""

    return [
        record for record in records
        if overlaps(ClassSchedule.from_record(record), window)
    ]


def sort_by_first_day(
    records: Iterable[Mapping[str, Any]], reverse: bool = False
) -> List[Mapping[str, Any]]:
    """Order records by their first training day, soonest first.

    Records without any usable day always go last.
    """

    keyed = [(ClassSchedule.from_record(record).first_day, record) for record in records]
    dated = sorted(
        (item for item in keyed if item[0] is not None),
        key=lambda item: item[0],
        reverse=reverse,
    )
    undated = [record for day, record in keyed if day is None]
    return [record for _, record in dated] + undated


__all__ = [
    "FilterWindow",
    "PRESET_LOOKBACK",
    "days_in_window",
    "filter_classes",
    "first_day",
    "last_day",
    "overlaps",
    "sort_by_first_day",
]
