"""Per-day check-in lookups for multi-day classes.

Student rows have carried check-in data in several shapes over time:

* ``checkinDaily`` – a list of ``{"day": n, "checkedIn": bool, ...}``;
* ``checkins`` – a mapping keyed by ``n``, ``"n"`` or ``"day<n>"``;
* ``checkin`` / ``checkinStatus`` – ``{"day<n>": bool}`` flags.

The helpers below read all of them so reports do not need to care which
version of the check-in screen wrote a row.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, List, Optional, Tuple

import pandas as pd

from .dates import CalendarDay, ClassSchedule, FilterWindow, days_in_window, format_header

_NAME_KEYS = ("name", "thaiName", "engName", "nameTH", "nameEN")
_LEARN_TYPE_MAP_KEYS = ("learnTypeByDay", "learnTypePerDay", "learnTypes")
_TIMELINE_KEYS = ("learnTypeTimeline", "learnTypeHistory")
_TIMELINE_DAY_KEYS = ("day", "fromDay", "startDay", "effectiveDay")
_TIMELINE_TYPE_KEYS = ("learnType", "type", "value")


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _first(mapping: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _daily_entry(student: Mapping[str, Any], day: int) -> Optional[Mapping[str, Any]]:
    for entry in student.get("checkinDaily") or []:
        if isinstance(entry, Mapping) and _as_int(entry.get("day")) == day:
            return entry
    return None


def student_name(student: Mapping[str, Any]) -> str:
    for key in _NAME_KEYS:
        name = _text(student.get(key))
        if name:
            return name
    return "-"


def checkin_info(student: Mapping[str, Any], day: int) -> Optional[Mapping[str, Any]]:
    """Return the check-in details (signature, time, lateness) for ``day``."""

    if isinstance(student.get("checkinDaily"), list):
        entry = _daily_entry(student, day)
        if entry and entry.get("checkedIn"):
            return {
                "signatureUrl": entry.get("signatureUrl"),
                "time": entry.get("time"),
                "isLate": entry.get("isLate"),
            }

    checkins = student.get("checkins")
    if isinstance(checkins, Mapping):
        for key in (day, str(day), f"day{day}"):
            if checkins.get(key):
                return checkins[key]
    return None


def is_checked_in(student: Mapping[str, Any], day: int) -> bool:
    if isinstance(student.get("checkinDaily"), list):
        entry = _daily_entry(student, day)
        return bool(entry and entry.get("checkedIn"))

    key = f"day{day}"
    flags = student.get("checkin") or {}
    status = student.get("checkinStatus") or {}
    value = flags.get(key) if isinstance(flags, Mapping) else None
    if value is None and isinstance(status, Mapping):
        value = status.get(key)
    return bool(value)


def is_late(student: Mapping[str, Any], day: int) -> bool:
    info = checkin_info(student, day)
    return bool(info and info.get("isLate"))


def checkin_time(student: Mapping[str, Any], day: int) -> Any:
    times = student.get("checkinTimes")
    if isinstance(times, Mapping) and times.get(f"day{day}"):
        return times[f"day{day}"]
    info = checkin_info(student, day)
    return info.get("time") if info else None


def learn_type_for_day(student: Mapping[str, Any], day: int) -> str:
    """Return how the student attended ``day`` (e.g. ``"classroom"``, ``"live"``).

    A per-day map wins, then a timeline of changes effective from a given
    day onward, then the student's default.
    """

    key = f"day{day}"
    for map_key in _LEARN_TYPE_MAP_KEYS:
        per_day = student.get(map_key)
        if isinstance(per_day, Mapping) and _text(per_day.get(key)):
            return _text(per_day[key]).lower()

    timeline = next(
        (student[k] for k in _TIMELINE_KEYS if isinstance(student.get(k), list)), []
    )
    changes = []
    for item in timeline:
        if not isinstance(item, Mapping):
            continue
        start = _as_int(_first(item, _TIMELINE_DAY_KEYS)) or 0
        kind = _text(_first(item, _TIMELINE_TYPE_KEYS))
        if start > 0 and kind:
            changes.append((start, kind.lower()))
    current = ""
    for start, kind in sorted(changes):
        if start > day:
            break
        current = kind
    if current:
        return current

    return _text(
        student.get("learnType") or student.get("trainingType") or student.get("mode")
    ).lower()


def count_checked_days(student: Mapping[str, Any], day_count: int) -> int:
    return sum(1 for day in range(1, max(day_count, 1) + 1) if is_checked_in(student, day))


def _report_days(
    schedule: ClassSchedule, window: Optional[FilterWindow]
) -> List[Tuple[int, Optional[CalendarDay]]]:
    if not schedule.is_empty:
        return list(days_in_window(schedule, window))
    if window is None or window.is_unbounded:
        # Dates unknown: fall back to numbered days.
        return [(number, None) for number in range(1, schedule.day_count + 1)]
    return []


def day_label(number: int, day: Optional[CalendarDay]) -> str:
    return f"Day {number} ({format_header(day)})" if day else f"Day {number}"


def checkin_frame(
    students: Iterable[Mapping[str, Any]],
    schedule: ClassSchedule,
    window: Optional[FilterWindow] = None,
) -> pd.DataFrame:
    """Return one row per student with a check-in column per training day.

    Only days inside ``window`` become columns; ``checked_days`` counts the
    check-ins among those columns.
    """

    report_days = _report_days(schedule, window)
    labels = [day_label(number, day) for number, day in report_days]

    rows = []
    for student in students:
        row = {"name": student_name(student)}
        checked = 0
        for (number, _), label in zip(report_days, labels):
            row[label] = is_checked_in(student, number)
            checked += row[label]
        row["checked_days"] = checked
        rows.append(row)

    return pd.DataFrame(rows, columns=["name", *labels, "checked_days"])


__all__ = [
    "checkin_frame",
    "checkin_info",
    "checkin_time",
    "count_checked_days",
    "day_label",
    "is_checked_in",
    "is_late",
    "learn_type_for_day",
    "student_name",
]
