"""Load class records from a CSV export of the class collection.

Exports come from a spreadsheet or the admin "export classes" download and
arrive as text, so this module also turns each row back into the record
shape :meth:`classroom.dates.ClassSchedule.from_record` understands.
"""

from __future__ import annotations

import io
import json
import logging
import re
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from .config import get_feed_timeout

_REQUEST_HEADERS = {
    # Avoid stale exports from caching intermediaries
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "User-Agent": "Mozilla/5.0 (compatible; classroom-ops/1.0)",
}

# lower-cased header -> canonical record key
_COLUMN_ALIASES = {
    "days": "days",
    "classdays": "days",
    "trainingdays": "days",
    "date": "date",
    "startdate": "date",
    "start_date": "date",
    "daycount": "dayCount",
    "day_count": "dayCount",
    "days_count": "dayCount",
    "duration": "dayCount",
    "title": "title",
    "classname": "title",
    "class": "title",
    "coursecode": "courseCode",
    "course_code": "courseCode",
}

_DAY_SPLIT = re.compile(r"[;,|]")


class ScheduleExportError(RuntimeError):
    """The class export could not be fetched or held no usable rows."""


def _split_days(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    text = str(value).strip()
    if not text:
        return None
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]
    return [part.strip() for part in _DAY_SPLIT.split(text) if part.strip()]


def _rename_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    taken = set()
    for column in df.columns:
        key = str(column).strip().replace(" ", "")
        canonical = _COLUMN_ALIASES.get(key.lower(), key)
        if canonical in taken:
            continue
        taken.add(canonical)
        renamed[column] = canonical
    return df[list(renamed)].rename(columns=renamed)


def records_from_frame(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert an export frame to class records.

    Column names are matched case-insensitively against common aliases
    (``Start Date``, ``Day Count`` ...).  The ``days`` cell may hold a JSON
    list or dates separated by ``;``, ``,`` or ``|``.  Empty cells become
    ``None``.
    """

    frame = _rename_columns(df)
    frame = frame.astype(object).where(frame.notna(), None)

    records = []
    for row in frame.to_dict(orient="records"):
        if "days" in row:
            row["days"] = _split_days(row["days"])
        records.append(row)
    return records


def load_class_records(csv_url: str, *, timeout: Optional[int] = None) -> List[Dict[str, Any]]:
    """Fetch a CSV export from ``csv_url`` and return its class records.

    Raises
    ------
    ScheduleExportError
        On network errors, HTML instead of CSV, unparseable CSV or an empty
        export.
    """

    try:
        resp = requests.get(
            csv_url,
            timeout=timeout or get_feed_timeout(),
            headers=_REQUEST_HEADERS,
        )
        resp.raise_for_status()
        txt = resp.text
        # Private sheets and login walls answer with an HTML page
        if "<html" in txt[:512].lower():
            raise ValueError("Expected CSV, got HTML (check export sharing).")
        df = pd.read_csv(
            io.StringIO(txt),
            dtype=str,
            keep_default_na=True,
            na_values=["", " ", "nan", "NaN", "None"],
        )
    except (requests.RequestException, pd.errors.ParserError, ValueError) as exc:
        logging.exception("Could not load class export from %s", csv_url)
        raise ScheduleExportError(f"Could not load class export: {exc}") from exc

    if df.empty:
        raise ScheduleExportError("Class export has no rows")
    return records_from_frame(df)


__all__ = ["ScheduleExportError", "load_class_records", "records_from_frame"]
