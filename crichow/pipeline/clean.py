"""Cleaning stage: raw snapshot rows to the canonical record list."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable

from crichow.common.constants import REJECT_SAMPLE_LIMIT
from crichow.common.models import CleanedRecord, CleaningResult, Rejected
from crichow.pipeline.classifier import HouseholdClassifier
from crichow.pipeline.parser import parse_record


def clean_records(
    raw_rows: Iterable[Any],
    dataset_config: dict,
    *,
    classifier: HouseholdClassifier | None = None,
) -> CleaningResult:
    classifier = classifier or HouseholdClassifier.from_config(dataset_config)
    fields = dataset_config["fields"]
    day_first = dataset_config["date_order"] == "day_first"

    records: list[CleanedRecord] = []
    rejected_by_reason: dict[str, int] = defaultdict(int)
    rejected_samples: list[dict] = []
    rows_in = 0

    for raw in raw_rows:
        rows_in += 1
        parsed = parse_record(raw, fields=fields, classifier=classifier, day_first=day_first)
        if isinstance(parsed, Rejected):
            rejected_by_reason[parsed.reason] += 1
            if len(rejected_samples) < REJECT_SAMPLE_LIMIT:
                rejected_samples.append(
                    {
                        "reason": parsed.reason,
                        "date": parsed.raw.get(fields["date"]),
                        "group": parsed.raw.get(fields["group"]),
                        "household_name": parsed.raw.get(fields["household_name"]),
                    }
                )
            continue
        records.append(parsed)

    return CleaningResult(
        records=records,
        rows_in=rows_in,
        rejected_by_reason=dict(sorted(rejected_by_reason.items())),
        rejected_samples=rejected_samples,
    )


def clean(raw_rows: Iterable[Any], dataset_config: dict) -> list[CleanedRecord]:
    return clean_records(raw_rows, dataset_config).records
