"""Titles and payloads for classes created from the schedule feed.

Class titles double as the class code shown on sign-in sheets, e.g.
``CR-PUB-MSE-L6-23-02-69-1``: training type, channel, course code, the
first training day as ``DD-MM-YY`` in the Buddhist era, and a run number
that distinguishes several classes of the same course starting that day.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any, Dict, Optional

from .dates import CalendarDay, ClassSchedule, normalize, to_canonical_string

LOGGER = logging.getLogger(__name__)

BUDDHIST_ERA_OFFSET = 543
DEFAULT_CHANNEL = "PUB"
DEFAULT_COURSE_CODE = "CLASS"

_FEED_START_KEYS = ("startDate", "start_at", "start", "date")


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def type_prefix(item: Mapping[str, Any]) -> str:
    """``H`` for hybrid trainings, ``CR`` (classroom) otherwise."""

    return "H" if _text(item.get("type")).lower() == "hybrid" else "CR"


def channel_prefix(item: Mapping[str, Any]) -> str:
    raw = item.get("channel") or item.get("channelCode") or item.get("audience")
    return _text(raw).upper() or DEFAULT_CHANNEL


def normalize_course_code(code: Any) -> str:
    """Upper-case a course code and join its words with dashes."""

    return re.sub(r"\s+", "-", _text(code).upper()) or DEFAULT_COURSE_CODE


def date_token(day: Optional[CalendarDay]) -> str:
    """``DD-MM-YY`` with a two-digit Buddhist-era year."""

    if day is None:
        return "00-00-00"
    year = str(day.year + BUDDHIST_ERA_OFFSET)[-2:]
    return f"{day.day:02d}-{day.month:02d}-{year}"


def first_feed_day(item: Mapping[str, Any]) -> Optional[CalendarDay]:
    """Return the first training day of a feed item.

    ``dates[0]`` is preferred; single start fields are the fallback.
    """

    dates = item.get("dates")
    if isinstance(dates, (list, tuple)) and dates:
        return normalize(dates[0])
    for key in _FEED_START_KEYS:
        if item.get(key):
            return normalize(item[key])
    return None


def feed_course_code(item: Mapping[str, Any]) -> str:
    course = item.get("course")
    nested = course.get("course_id") if isinstance(course, Mapping) else None
    return _text(nested or item.get("course_id") or item.get("courseCode") or item.get("code"))


def feed_course_name(item: Mapping[str, Any]) -> str:
    course = item.get("course")
    nested = course.get("course_name") if isinstance(course, Mapping) else None
    return _text(
        nested or item.get("course_name") or item.get("courseName") or item.get("title")
    )


def build_title_prefix(
    item: Mapping[str, Any], course_code: Any, first_day: Optional[CalendarDay]
) -> str:
    return "-".join(
        [
            type_prefix(item),
            channel_prefix(item),
            normalize_course_code(course_code),
            date_token(first_day),
        ]
    )


def parse_run_number(title: Any) -> Optional[int]:
    """Return the trailing run number of ``title`` if it has one."""

    last = _text(title).split("-")[-1]
    if not last.isdigit():
        return None
    run = int(last)
    return run if run > 0 else None


def next_run_number(prefix: str, existing_titles: Iterable[Any]) -> int:
    """Return one more than the highest run already used with ``prefix``."""

    highest = 0
    for title in existing_titles:
        text = _text(title)
        if not text.startswith(prefix + "-"):
            continue
        run = parse_run_number(text)
        if run and run > highest:
            highest = run
    return highest + 1


def build_class_title(item: Mapping[str, Any], existing_titles: Iterable[Any] = ()) -> str:
    """Return a new, unused title for the class created from ``item``.

    Without a first training day the run number cannot be checked against
    existing classes and starts at 1.
    """

    first = first_feed_day(item)
    prefix = build_title_prefix(item, feed_course_code(item), first)
    run = next_run_number(prefix, existing_titles) if first is not None else 1
    return f"{prefix}-{run}"


def class_payload_from_feed(item: Mapping[str, Any], title: str) -> Dict[str, Any]:
    """Build the class record created for schedule feed ``item``.

    Raises
    ------
    ValueError
        If ``title`` is blank or the item has no readable first date.
    """

    if not _text(title):
        raise ValueError("Class title is required")
    first = first_feed_day(item)
    if first is None:
        raise ValueError("Schedule item has no readable first date (dates[0])")

    dates = item.get("dates")
    payload: Dict[str, Any] = {
        "title": _text(title),
        "courseCode": feed_course_code(item),
        "courseName": feed_course_name(item),
        "date": to_canonical_string(first),
        "dayCount": len(dates) if isinstance(dates, (list, tuple)) and dates else 1,
        "room": _text(item.get("room")),
        "source": "api",
        "externalScheduleId": _text(
            item.get("_id") or item.get("id") or item.get("schedule_id")
        ),
        "trainingType": _text(item.get("type")),
        "channel": channel_prefix(item),
    }
    if isinstance(dates, (list, tuple)) and dates:
        explicit = ClassSchedule.from_days(dates)
        payload["days"] = [to_canonical_string(day) for day in explicit.days]
        unreadable = sum(1 for value in dates if normalize(value) is None)
        if unreadable:
            LOGGER.warning(
                "Schedule %s: %d of %d dates could not be read",
                payload["externalScheduleId"] or payload["title"],
                unreadable,
                len(dates),
            )
    return payload


__all__ = [
    "build_class_title",
    "build_title_prefix",
    "channel_prefix",
    "class_payload_from_feed",
    "date_token",
    "feed_course_code",
    "feed_course_name",
    "first_feed_day",
    "next_run_number",
    "normalize_course_code",
    "parse_run_number",
    "type_prefix",
]
