"""Configuration for the classroom date helpers.

Settings are read from environment variables once at import time so every
module (and the tests) share the same values.  Display constants live here
as well so that list screens and printed reports agree on how an empty
schedule or a multi-run date range is rendered.
"""

from __future__ import annotations

import logging
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_TIMEZONE_ENV = "CLASSROOM_TIMEZONE"
_FEED_TIMEOUT_ENV = "CLASSROOM_FEED_TIMEOUT"

DEFAULT_TIMEZONE = "Asia/Bangkok"
DEFAULT_FEED_TIMEOUT = 12

# Shown wherever a class has no usable training days.
DATE_PLACEHOLDER = "-"

# Joins date runs, e.g. "3-4, 17-18 Feb 2026".
SEGMENT_SEPARATOR = ", "

# Classes without a day count run for a single day.
DEFAULT_DAY_COUNT = 1


def get_local_timezone() -> ZoneInfo:
    """Return the zone used to read stored instants as civil dates.

    ``CLASSROOM_TIMEZONE`` overrides the default.  An unknown zone name is
    logged and UTC is used instead so date handling keeps working.
    """

    name = os.environ.get(_TIMEZONE_ENV, "").strip() or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logging.warning("Unknown timezone %r in %s; falling back to UTC", name, _TIMEZONE_ENV)
        return ZoneInfo("UTC")


def get_feed_timeout() -> int:
    """Return the HTTP timeout (seconds) for schedule export downloads."""

    raw = os.environ.get(_FEED_TIMEOUT_ENV, "").strip()
    if not raw:
        return DEFAULT_FEED_TIMEOUT
    try:
        seconds = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{_FEED_TIMEOUT_ENV} must be an integer") from exc
    if seconds <= 0:
        raise RuntimeError(f"{_FEED_TIMEOUT_ENV} must be positive (got {seconds})")
    return seconds


__all__ = [
    "DATE_PLACEHOLDER",
    "DEFAULT_DAY_COUNT",
    "DEFAULT_FEED_TIMEOUT",
    "DEFAULT_TIMEZONE",
    "SEGMENT_SEPARATOR",
    "get_feed_timeout",
    "get_local_timezone",
]
