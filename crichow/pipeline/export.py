"""CSV exports of the group ranking and the cleaned records."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from crichow.common.fs import write_csv
from crichow.common.models import CleanedRecord, GroupBreakdown

GROUP_RANKING_HEADERS = [
    "rank",
    "group",
    "display_name",
    "household_count",
    "wet_waste",
    "dry_waste",
    "total_weight",
    "hdpe",
    "pet",
    "pp",
    "paper",
    "metal",
    "glass",
]

CLEANED_RECORD_HEADERS = [
    "date",
    "week_bucket",
    "group",
    "household_name",
    "is_business_household",
    "wet_waste",
    "dry_waste",
    "total_waste",
    "hdpe",
    "pet",
    "pp",
    "paper",
    "metal",
    "glass",
    "latitude",
    "longitude",
]

COORDINATE_KEYS = {"latitude", "longitude"}


def _serialize_row(row: dict, headers: list[str]) -> dict:
    out = {}
    for key in headers:
        value = row.get(key)
        if value is None:
            out[key] = ""
        elif isinstance(value, bool):
            out[key] = "true" if value else "false"
        elif isinstance(value, float):
            decimals = 6 if key in COORDINATE_KEYS else 2
            out[key] = f"{value:.{decimals}f}"
        else:
            out[key] = value
    return out


def write_group_ranking_csv(data_dir: Path, breakdown: Sequence[GroupBreakdown]) -> Path:
    out_path = data_dir / "out" / "group_ranking.csv"
    rows = [
        _serialize_row({"rank": rank, **row.to_dict()}, GROUP_RANKING_HEADERS)
        for rank, row in enumerate(breakdown, start=1)
    ]
    write_csv(out_path, GROUP_RANKING_HEADERS, rows)
    return out_path


def write_cleaned_records_csv(data_dir: Path, records: Sequence[CleanedRecord]) -> Path:
    out_path = data_dir / "out" / "cleaned_records.csv"
    rows = [_serialize_row(record.to_dict(), CLEANED_RECORD_HEADERS) for record in records]
    write_csv(out_path, CLEANED_RECORD_HEADERS, rows)
    return out_path
