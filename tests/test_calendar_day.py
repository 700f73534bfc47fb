from datetime import UTC, date, datetime, timedelta, timezone

import pandas as pd
import pytest

from classroom.dates import calendar_day
from classroom.dates.calendar_day import (
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


def test_normalize_iso_string():
    day = normalize("2026-02-18")
    assert day == CalendarDay(2026, 2, 18)
    assert to_canonical_string(day) == "2026-02-18"


@pytest.mark.parametrize(
    "raw",
    [
        "2026-02-18T00:00:00Z",
        "2026-02-18T23:59:59+07:00",
        "2026-02-18T00:30:00-10:00",
        "2026-02-18 07:30:00",
        "  2026-02-18  ",
    ],
)
def test_normalize_truncates_time_and_zone(raw):
    assert normalize(raw) == CalendarDay(2026, 2, 18)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("18/02/2026", CalendarDay(2026, 2, 18)),
        ("3/2/2026", CalendarDay(2026, 2, 3)),
        ("18-02-2026", CalendarDay(2026, 2, 18)),
        ("18.02.2026", CalendarDay(2026, 2, 18)),
        ("Feb 18 2026", CalendarDay(2026, 2, 18)),
        ("12/31/2026", CalendarDay(2026, 12, 31)),
    ],
)
def test_normalize_other_text_formats(raw, expected):
    assert normalize(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        None, "", "   ", "nan", "None", "not a date", "2026-02-30", "31/02/2026",
        "today", "Now", " tomorrow ", "yesterday", [], {}, 42, True,
    ],
)
def test_normalize_rejects_bad_input(raw):
    assert normalize(raw) is None


def test_normalize_date_like_values():
    assert normalize(date(2026, 1, 5)) == CalendarDay(2026, 1, 5)
    assert normalize(datetime(2026, 1, 5, 23, 59)) == CalendarDay(2026, 1, 5)
    assert normalize(pd.Timestamp("2026-01-05 08:00")) == CalendarDay(2026, 1, 5)
    assert normalize(pd.NaT) is None
    day = CalendarDay(2026, 1, 5)
    assert normalize(day) is day


def test_aware_instants_use_local_zone(monkeypatch):
    monkeypatch.setenv("CLASSROOM_TIMEZONE", "Asia/Bangkok")
    stored = datetime(2026, 2, 9, 17, 0, tzinfo=UTC)
    assert normalize(stored) == CalendarDay(2026, 2, 10)

    monkeypatch.setenv("CLASSROOM_TIMEZONE", "UTC")
    assert normalize(stored) == CalendarDay(2026, 2, 9)


def test_round_trip_every_day_of_a_leap_year():
    current = date(2024, 1, 1)
    while current.year == 2024:
        text = current.isoformat()
        assert to_canonical_string(normalize(text)) == text
        current += timedelta(days=1)


def test_canonical_string_pads_small_years():
    day = CalendarDay(987, 3, 4)
    assert to_canonical_string(day) == "0987-03-04"
    assert normalize(to_canonical_string(day)) == day


def test_calendar_day_ordering_and_validation():
    assert CalendarDay(2026, 1, 31) < CalendarDay(2026, 2, 1) < CalendarDay(2027, 1, 1)
    assert sorted({CalendarDay(2026, 2, 1), CalendarDay(2025, 12, 31)}) == [
        CalendarDay(2025, 12, 31),
        CalendarDay(2026, 2, 1),
    ]
    with pytest.raises(ValueError):
        CalendarDay(2026, 2, 29)


def test_add_days_rolls_over_months_and_years():
    assert add_days(CalendarDay(2026, 1, 30), 3) == CalendarDay(2026, 2, 2)
    assert add_days(CalendarDay(2025, 12, 31), 1) == CalendarDay(2026, 1, 1)
    assert add_days(CalendarDay(2024, 3, 1), -1) == CalendarDay(2024, 2, 29)
    assert add_days(CalendarDay(2026, 5, 5), 0) == CalendarDay(2026, 5, 5)


def test_add_days_requires_int_offset():
    with pytest.raises(TypeError):
        add_days(CalendarDay(2026, 1, 1), 1.5)
    with pytest.raises(TypeError):
        add_days(CalendarDay(2026, 1, 1), True)


def test_diff_days_inverts_add_days():
    start = CalendarDay(2023, 11, 15)
    for n in range(-400, 401, 7):
        moved = add_days(start, n)
        assert diff_days(start, moved) == n
        assert add_days(start, diff_days(start, moved)) == moved


@pytest.mark.parametrize(
    "text, expected",
    [
        ("18/02/2026", CalendarDay(2026, 2, 18)),
        ("1/2/2026", CalendarDay(2026, 2, 1)),
        ("18-02-2026", CalendarDay(2026, 2, 18)),
        ("2026-02-18", CalendarDay(2026, 2, 18)),
        ("31/02/2026", None),
        ("2026-02-18T10:00", None),
        ("18.02.2026", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_filter_date(text, expected):
    assert parse_filter_date(text) == expected


def test_display_formats():
    day = CalendarDay(2026, 2, 3)
    assert format_dmy(day) == "03/02/2026"
    assert format_day(day) == "3 Feb 2026"
    assert format_header(day) == "03 FEB 2026"
    assert parse_filter_date(format_dmy(day)) == day


def test_local_today_uses_configured_zone(monkeypatch):
    monkeypatch.setenv("CLASSROOM_TIMEZONE", "Asia/Bangkok")
    now = datetime(2026, 3, 1, 20, 0, tzinfo=timezone.utc)
    assert local_today(now) == CalendarDay(2026, 3, 2)


def test_unknown_timezone_falls_back_to_utc(monkeypatch, caplog):
    monkeypatch.setenv("CLASSROOM_TIMEZONE", "Mars/Olympus")
    stored = datetime(2026, 2, 9, 17, 0, tzinfo=UTC)
    with caplog.at_level("WARNING"):
        assert calendar_day.normalize(stored) == CalendarDay(2026, 2, 9)
    assert "falling back to UTC" in caplog.text
