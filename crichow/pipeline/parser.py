"""Raw record parsing: dates, best-effort numbers, coordinates."""

from __future__ import annotations

import math
import re
from datetime import date
from typing import Any, Mapping

from crichow.common.constants import QUANTITY_KEYS
from crichow.common.models import CleanedRecord, Rejected
from crichow.common.time_utils import week_bucket
from crichow.pipeline.classifier import HouseholdClassifier

REJECT_MISSING_DATE = "MISSING_DATE"
REJECT_INVALID_DATE = "INVALID_DATE"
REJECT_MISSING_GROUP = "MISSING_GROUP"
REJECT_NOT_AN_OBJECT = "NOT_AN_OBJECT"

_LEADING_FLOAT_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_DECIMAL_PAIR_RE = re.compile(r"^\s*([+-]?\d+(?:\.\d+)?)\s*[,;\s]\s*([+-]?\d+(?:\.\d+)?)\s*$")
_DMS_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*°\s*"
    r"(?:(\d+(?:\.\d+)?)\s*['′]\s*)?"
    r"(?:(\d+(?:\.\d+)?)\s*(?:\"|″|'')\s*)?"
    r"([NSEWnsew])"
)


def parse_date(value: str | None, *, day_first: bool = True) -> date | None:
    if not value or not value.strip():
        return None

    parts = [part.strip() for part in value.strip().split("/")]
    if len(parts) != 3 or not all(part.isdecimal() for part in parts):
        return None

    first, second, year = (int(part) for part in parts)
    day, month = (first, second) if day_first else (second, first)
    if not (1 <= month <= 12 and 1 <= day <= 31 and 1 <= year <= 9999):
        return None

    try:
        parsed = date(year, month, day)
    except ValueError:
        return None

    if (parsed.year, parsed.month, parsed.day) != (year, month, day):
        return None
    return parsed


def to_number(value: Any) -> float:
    """Coerce a quantity cell to float. Blank or unreadable content is 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return 0.0
        match = _LEADING_FLOAT_RE.match(cleaned)
        if match is None:
            return 0.0
        number = float(match.group(0))
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _valid_lat_lon(lat: float | None, lon: float | None) -> bool:
    if lat is None or lon is None:
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def _dms_to_decimal(degrees: str, minutes: str | None, seconds: str | None, hemisphere: str) -> float:
    value = float(degrees) + float(minutes or 0) / 60 + float(seconds or 0) / 3600
    if hemisphere.upper() in ("S", "W"):
        value = -value
    return value


def parse_location(value: Any) -> tuple[float | None, float | None]:
    if not isinstance(value, str) or not value.strip():
        return None, None

    pair = _DECIMAL_PAIR_RE.match(value)
    if pair:
        lat, lon = float(pair.group(1)), float(pair.group(2))
        return (lat, lon) if _valid_lat_lon(lat, lon) else (None, None)

    lat = lon = None
    for degrees, minutes, seconds, hemisphere in _DMS_RE.findall(value):
        decimal = _dms_to_decimal(degrees, minutes, seconds, hemisphere)
        if hemisphere.upper() in ("N", "S"):
            lat = decimal
        else:
            lon = decimal

    if not _valid_lat_lon(lat, lon):
        return None, None
    return lat, lon


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_record(
    raw: Any,
    *,
    fields: Mapping[str, str | None],
    classifier: HouseholdClassifier,
    day_first: bool = True,
) -> CleanedRecord | Rejected:
    if not isinstance(raw, Mapping):
        return Rejected(reason=REJECT_NOT_AN_OBJECT, raw={})

    date_value = raw.get(fields["date"])
    group = _text(raw.get(fields["group"]))

    if date_value is None or _text(date_value) == "":
        return Rejected(reason=REJECT_MISSING_DATE, raw=dict(raw))
    if not group:
        return Rejected(reason=REJECT_MISSING_GROUP, raw=dict(raw))

    parsed_date = parse_date(date_value, day_first=day_first) if isinstance(date_value, str) else None
    if parsed_date is None:
        return Rejected(reason=REJECT_INVALID_DATE, raw=dict(raw))

    household_name = _text(raw.get(fields["household_name"]))
    quantities = {key: to_number(raw.get(fields[key])) for key in QUANTITY_KEYS}

    location_field = fields.get("location")
    location = _text(raw.get(location_field)) if location_field else ""
    latitude, longitude = parse_location(location)

    return CleanedRecord(
        date=parsed_date,
        date_string=date_value.strip(),
        group=group,
        household_name=household_name,
        week_bucket=week_bucket(parsed_date),
        is_business_household=classifier.is_business(group, household_name),
        location=location or None,
        latitude=latitude,
        longitude=longitude,
        **quantities,
    )
