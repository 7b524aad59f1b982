"""Date helpers: UTC timestamps, filter bounds, week and month bucket keys."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def parse_iso_date(value: str | None) -> date | None:
    if not value:
        return None
    return date.fromisoformat(value)


def week_bucket(value: date) -> str:
    """Return the ``YYYY-WW`` key of the Sunday-started week holding ``value``.

    Week 1 is the (possibly partial) week containing 1 January, so a week that
    straddles the new year is split into two buckets.
    """
    jan_first = date(value.year, 1, 1)
    day_of_year = (value - jan_first).days
    jan_first_weekday = (jan_first.weekday() + 1) % 7
    week = math.ceil((day_of_year + jan_first_weekday + 1) / 7)
    return f"{value.year}-{week:02d}"


def month_bucket(value: date) -> str:
    return f"{value.year}-{value.month:02d}"


def shift_month(month_key: str, months: int) -> str:
    year, month = (int(part) for part in month_key.split("-"))
    index = year * 12 + (month - 1) + months
    return f"{index // 12}-{index % 12 + 1:02d}"
