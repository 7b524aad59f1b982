"""Reducers producing the dashboard KPIs, rankings and breakdowns.

Every reducer is a pure function of its input records. An empty input gives
zeroed numbers and empty lists.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from crichow.common.constants import MATERIAL_KEYS, QUANTITY_KEYS
from crichow.common.groups import GroupNameTranslator
from crichow.common.models import (
    CategoryAverages,
    CategoryRates,
    CleanedRecord,
    GlobalKPIs,
    GroupBreakdown,
    MaterialTotals,
    MonthlyTotals,
    UniqueValues,
)


def _distinct_households(records: Sequence[CleanedRecord]) -> set[str]:
    return {record.household_name for record in records if record.household_name.strip()}


def _sum_quantities(records: Sequence[CleanedRecord]) -> dict[str, float]:
    totals = {key: 0.0 for key in QUANTITY_KEYS}
    for record in records:
        for key in QUANTITY_KEYS:
            totals[key] += getattr(record, key)
    return totals


def compute_global_kpis(
    records: Sequence[CleanedRecord],
    *,
    household_count: int | None = None,
) -> GlobalKPIs:
    """Headline KPIs. ``household_count`` replaces the observed count when set."""
    total_wet = sum(record.wet_waste for record in records)
    total_dry = sum(record.dry_waste for record in records)
    observed_households = len(_distinct_households(records))
    return GlobalKPIs(
        number_of_groups=len({record.group for record in records}),
        number_of_households=household_count if household_count is not None else observed_households,
        number_of_weeks=len({record.week_bucket for record in records}),
        total_wet_waste=total_wet,
        total_dry_waste=total_dry,
        total_weight=total_wet + total_dry,
    )


def compute_group_breakdown(
    records: Sequence[CleanedRecord],
    translator: GroupNameTranslator | None = None,
) -> list[GroupBreakdown]:
    grouped: dict[str, list[CleanedRecord]] = defaultdict(list)
    for record in records:
        grouped[record.group].append(record)

    breakdown: list[GroupBreakdown] = []
    for group, group_records in grouped.items():
        totals = _sum_quantities(group_records)
        breakdown.append(
            GroupBreakdown(
                group=group,
                display_name=translator.to_display(group) if translator is not None else group,
                total_weight=totals["wet_waste"] + totals["dry_waste"],
                household_count=len(_distinct_households(group_records)),
                **totals,
            )
        )

    # Charts rank groups left to right in this order.
    return sorted(breakdown, key=lambda row: (-row.total_weight, row.group))


def _category_rates(records: Sequence[CleanedRecord]) -> CategoryRates:
    households = len(_distinct_households(records))
    weeks = len({record.week_bucket for record in records})
    household_divisor = households or 1
    week_divisor = weeks or 1
    total_wet = sum(record.wet_waste for record in records)
    total_dry = sum(record.dry_waste for record in records)
    return CategoryRates(
        avg_weekly_wet_waste=total_wet / household_divisor / week_divisor,
        avg_weekly_dry_waste=total_dry / household_divisor / week_divisor,
        total_households=households,
        total_weeks=weeks,
    )


def compute_category_averages(records: Sequence[CleanedRecord]) -> CategoryAverages:
    """Average weekly generation per household, split domestic / business."""
    business = [record for record in records if record.is_business_household]
    domestic = [record for record in records if not record.is_business_household]
    return CategoryAverages(domestic=_category_rates(domestic), business=_category_rates(business))


def compute_material_totals(records: Sequence[CleanedRecord]) -> MaterialTotals:
    totals = {key: 0.0 for key in MATERIAL_KEYS}
    for record in records:
        for key in MATERIAL_KEYS:
            totals[key] += getattr(record, key)
    return MaterialTotals(**totals)


def extract_unique_values(
    records: Sequence[CleanedRecord],
    translator: GroupNameTranslator | None = None,
) -> UniqueValues:
    keys = {record.group for record in records}
    if translator is not None:
        groups = sorted(translator.to_display(key) for key in keys)
    else:
        groups = sorted(keys)
    return UniqueValues(groups=groups, households=sorted(_distinct_households(records)))


def compute_monthly_totals(records: Sequence[CleanedRecord]) -> list[MonthlyTotals]:
    grouped: dict[str, list[CleanedRecord]] = defaultdict(list)
    for record in records:
        grouped[record.month_bucket].append(record)
    return [MonthlyTotals(month=month, **_sum_quantities(grouped[month])) for month in sorted(grouped)]
