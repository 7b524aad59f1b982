"""Population-level rate extrapolation and month-over-month trend forecast."""

from __future__ import annotations

from typing import Sequence

from crichow.common.models import (
    CleanedRecord,
    ForecastPoint,
    MonthlyTotals,
    ProjectionResult,
    ProjectionTargets,
)
from crichow.common.time_utils import shift_month

DAYS_PER_WEEK = 7


def _safe_rate(total: float, households: int, weeks: int) -> float:
    if households == 0 or weeks == 0:
        return 0.0
    return total / households / weeks


def extrapolate(
    records: Sequence[CleanedRecord],
    targets: ProjectionTargets,
    *,
    weeks_per_month: float,
) -> ProjectionResult:
    """Scale observed per-household weekly rates up to the target population.

    Pass the full cleaned dataset, not a filtered view: the rates describe the
    whole monitored population.
    """
    households = len({record.household_name for record in records if record.household_name.strip()})
    weeks = len({record.week_bucket for record in records})

    weekly_wet = _safe_rate(sum(record.wet_waste for record in records), households, weeks)
    weekly_dry = _safe_rate(sum(record.dry_waste for record in records), households, weeks)
    weekly_total = weekly_wet + weekly_dry

    scale = targets.households * targets.weeks
    extrapolated_wet = weekly_wet * scale
    extrapolated_dry = weekly_dry * scale

    return ProjectionResult(
        targets=targets,
        observed_households=households,
        observed_weeks=weeks,
        weeks_per_month=weeks_per_month,
        avg_weekly_wet_waste=weekly_wet,
        avg_weekly_dry_waste=weekly_dry,
        avg_weekly_total_weight=weekly_total,
        avg_daily_wet_waste=weekly_wet / DAYS_PER_WEEK,
        avg_daily_dry_waste=weekly_dry / DAYS_PER_WEEK,
        avg_daily_total_weight=weekly_total / DAYS_PER_WEEK,
        avg_monthly_wet_waste=weekly_wet * weeks_per_month,
        avg_monthly_dry_waste=weekly_dry * weeks_per_month,
        avg_monthly_total_weight=weekly_total * weeks_per_month,
        total_monthly_wet_waste=weekly_wet * weeks_per_month * households,
        total_monthly_dry_waste=weekly_dry * weeks_per_month * households,
        total_monthly_total_weight=weekly_total * weeks_per_month * households,
        extrapolated_wet_waste=extrapolated_wet,
        extrapolated_dry_waste=extrapolated_dry,
        extrapolated_total_weight=extrapolated_wet + extrapolated_dry,
    )


def forecast_trend(
    monthly: Sequence[MonthlyTotals],
    *,
    window: int = 3,
    horizon: int = 6,
    wet_share: float = 0.7,
) -> list[ForecastPoint]:
    if len(monthly) < 2:
        return []

    ordered = sorted(monthly, key=lambda row: row.month)
    recent = ordered[-window:]
    growth = 0.0
    if len(recent) > 1:
        growth = (recent[-1].total_weight - recent[0].total_weight) / (len(recent) - 1)

    last = ordered[-1]
    points: list[ForecastPoint] = []
    for step in range(1, horizon + 1):
        predicted = max(0.0, last.total_weight + growth * step)
        points.append(
            ForecastPoint(
                month=shift_month(last.month, step),
                predicted=predicted,
                wet_waste=predicted * wet_share,
                dry_waste=predicted * (1 - wet_share),
            )
        )
    return points
