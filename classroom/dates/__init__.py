"""Class date model: normalising, grouping and filtering training days."""

from .calendar_day import (
    CalendarDay,
    add_days,
    diff_days,
    format_day,
    format_dmy,
    format_header,
    local_today,
    normalize,
    parse_filter_date,
    to_canonical_string,
)
from .matching import (
    FilterWindow,
    days_in_window,
    filter_classes,
    first_day,
    last_day,
    overlaps,
    sort_by_first_day,
)
from .schedule import (
    EXPLICIT,
    IMPLICIT,
    ClassSchedule,
    coerce_day_count,
    is_training_day,
    record_day_count,
    resolve_current_training_day,
    training_day,
)
from .segments import DateSegment, format_schedule, format_segments, group_consecutive

__all__ = [
    "CalendarDay",
    "ClassSchedule",
    "DateSegment",
    "EXPLICIT",
    "FilterWindow",
    "IMPLICIT",
    "add_days",
    "coerce_day_count",
    "days_in_window",
    "diff_days",
    "filter_classes",
    "first_day",
    "format_day",
    "format_dmy",
    "format_header",
    "format_schedule",
    "format_segments",
    "group_consecutive",
    "is_training_day",
    "last_day",
    "local_today",
    "normalize",
    "overlaps",
    "parse_filter_date",
    "record_day_count",
    "resolve_current_training_day",
    "sort_by_first_day",
    "to_canonical_string",
    "training_day",
]
