from unittest.mock import MagicMock

import pandas as pd
import pytest
import requests

from classroom import records
from classroom.dates.matching import FilterWindow, filter_classes
from classroom.dates.calendar_day import CalendarDay
from classroom.dates.schedule import ClassSchedule

CSV_TEXT = (
    "Title,Course Code,Days,Start Date,Day Count\n"
    'CR-PUB-MSE-L6-03-02-69-1,MSE-L6,"2026-02-03;2026-02-04;2026-02-17",,\n'
    "CR-PUB-EXCEL-10-02-69-1,EXCEL,,2026-02-10,3\n"
    'CR-PUB-AI-01-03-69-1,AI,"[""2026-03-01"", ""2026-03-02""]",,\n'
)


def _response(text, status=200):
    resp = MagicMock()
    resp.text = text
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


def test_load_class_records_parses_export(monkeypatch):
    mock_get = MagicMock(return_value=_response(CSV_TEXT))
    monkeypatch.setattr(records.requests, "get", mock_get)

    rows = records.load_class_records("https://example.test/classes.csv")

    mock_get.assert_called_once()
    assert mock_get.call_args[1]["timeout"] == 12
    assert mock_get.call_args[1]["headers"]["Cache-Control"] == "no-cache"

    assert [row["title"] for row in rows] == [
        "CR-PUB-MSE-L6-03-02-69-1",
        "CR-PUB-EXCEL-10-02-69-1",
        "CR-PUB-AI-01-03-69-1",
    ]
    assert rows[0]["days"] == ["2026-02-03", "2026-02-04", "2026-02-17"]
    assert rows[0]["date"] is None
    assert rows[1]["days"] is None
    assert rows[1]["date"] == "2026-02-10"
    assert rows[1]["dayCount"] == "3"
    assert rows[2]["days"] == ["2026-03-01", "2026-03-02"]
    assert rows[0]["courseCode"] == "MSE-L6"


def test_loaded_records_feed_the_date_filters(monkeypatch):
    monkeypatch.setattr(records.requests, "get", MagicMock(return_value=_response(CSV_TEXT)))
    rows = records.load_class_records("https://example.test/classes.csv")

    implicit = ClassSchedule.from_record(rows[1])
    assert implicit.days[-1] == CalendarDay(2026, 2, 12)

    window = FilterWindow(CalendarDay(2026, 2, 12), CalendarDay(2026, 2, 16))
    assert [row["title"] for row in filter_classes(rows, window)] == ["CR-PUB-EXCEL-10-02-69-1"]


def test_timeout_comes_from_environment(monkeypatch):
    monkeypatch.setenv("CLASSROOM_FEED_TIMEOUT", "30")
    mock_get = MagicMock(return_value=_response(CSV_TEXT))
    monkeypatch.setattr(records.requests, "get", mock_get)
    records.load_class_records("https://example.test/classes.csv")
    assert mock_get.call_args[1]["timeout"] == 30

    records.load_class_records("https://example.test/classes.csv", timeout=5)
    assert mock_get.call_args[1]["timeout"] == 5


@pytest.mark.parametrize(
    "response",
    [
        _response("<html><body>Sign in</body></html>"),
        _response("", status=200),
        _response("oops", status=503),
    ],
)
def test_load_class_records_failures(monkeypatch, caplog, response):
    monkeypatch.setattr(records.requests, "get", MagicMock(return_value=response))
    with pytest.raises(records.ScheduleExportError):
        records.load_class_records("https://example.test/classes.csv")
    assert "Could not load class export" in caplog.text


def test_network_error_is_wrapped(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(records.requests, "get", boom)
    with pytest.raises(records.ScheduleExportError) as excinfo:
        records.load_class_records("https://example.test/classes.csv")
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_header_only_export_is_rejected(monkeypatch):
    monkeypatch.setattr(
        records.requests, "get", MagicMock(return_value=_response("title,days\n"))
    )
    with pytest.raises(records.ScheduleExportError, match="no rows"):
        records.load_class_records("https://example.test/classes.csv")


def test_records_from_frame_accepts_lists_and_missing_values():
    df = pd.DataFrame(
        {
            "TrainingDays": [["2026-02-03", " "], None],
            "startDate": [None, "2026-02-10"],
            "room": ["Mars", float("nan")],
        }
    )
    rows = records.records_from_frame(df)
    assert rows == [
        {"days": ["2026-02-03"], "date": None, "room": "Mars"},
        {"days": None, "date": "2026-02-10", "room": None},
    ]
