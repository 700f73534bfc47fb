"""Group training days into consecutive runs and render them for display."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from classroom.config import DATE_PLACEHOLDER, SEGMENT_SEPARATOR

from .calendar_day import MONTH_ABBR, CalendarDay, add_days, diff_days, format_day
from .schedule import ClassSchedule


@dataclass(frozen=True)
class DateSegment:
    """An inclusive run of consecutive days."""

    start: CalendarDay
    end: CalendarDay

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Segment ends ({self.end}) before it starts ({self.start})")

    @property
    def is_single_day(self) -> bool:
        return self.start == self.end

    @property
    def days(self) -> Tuple[CalendarDay, ...]:
        return tuple(
            add_days(self.start, offset)
            for offset in range(diff_days(self.start, self.end) + 1)
        )

    @property
    def same_month(self) -> bool:
        return (self.start.year, self.start.month) == (self.end.year, self.end.month)


def group_consecutive(days: Iterable[CalendarDay]) -> List[DateSegment]:
    """Split ascending, de-duplicated ``days`` into maximal consecutive runs."""

    segments: List[DateSegment] = []
    start = end = None
    for day in days:
        if start is None:
            start = end = day
        elif diff_days(end, day) == 1:
            end = day
        else:
            segments.append(DateSegment(start, end))
            start = end = day
    if start is not None:
        segments.append(DateSegment(start, end))
    return segments


def _month_year(day: CalendarDay) -> str:
    return f"{MONTH_ABBR[day.month - 1]} {day.year}"


def _day_numbers(segment: DateSegment) -> str:
    if segment.is_single_day:
        return str(segment.start.day)
    return f"{segment.start.day}-{segment.end.day}"


def _full_form(segment: DateSegment) -> str:
    if segment.is_single_day:
        return format_day(segment.start)
    if segment.same_month:
        return f"{_day_numbers(segment)} {_month_year(segment.start)}"
    return f"{format_day(segment.start)} - {format_day(segment.end)}"


def format_segments(
    segments: Sequence[DateSegment],
    separator: str = SEGMENT_SEPARATOR,
    placeholder: str = DATE_PLACEHOLDER,
) -> str:
    """Render segments the way printed schedules show them.

    When every day shares one month the month and year are written once:
    ``"3-4, 17-18 Feb 2026"``.  Otherwise each run is written in full:
    ``"30 Jan 2026 - 2 Feb 2026"`` or ``"28 Feb 2026, 2-3 Mar 2026"``.
    """

    if not segments:
        return placeholder

    first = segments[0].start
    shared = all(
        (seg.start.year, seg.start.month) == (first.year, first.month)
        and (seg.end.year, seg.end.month) == (first.year, first.month)
        for seg in segments
    )
    if shared:
        return f"{separator.join(_day_numbers(seg) for seg in segments)} {_month_year(first)}"
    return separator.join(_full_form(seg) for seg in segments)


def format_schedule(
    schedule: Union[ClassSchedule, Iterable[CalendarDay]],
    separator: str = SEGMENT_SEPARATOR,
    placeholder: str = DATE_PLACEHOLDER,
) -> str:
    """Group and format a schedule in one call (the table-cell helper)."""

    days = schedule.days if isinstance(schedule, ClassSchedule) else sorted(set(schedule))
    return format_segments(group_consecutive(days), separator, placeholder)


__all__ = [
    "DateSegment",
    "format_schedule",
    "format_segments",
    "group_consecutive",
]
