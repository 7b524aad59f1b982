"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from crichow.common.time_utils import month_bucket


class HouseholdCategory(str, Enum):
    DOMESTIC = "domestic"
    BUSINESS = "business"


@dataclass(frozen=True)
class CleanedRecord:
    date: date
    date_string: str
    group: str
    household_name: str
    wet_waste: float
    dry_waste: float
    hdpe: float
    pet: float
    pp: float
    paper: float
    metal: float
    glass: float
    week_bucket: str
    is_business_household: bool
    location: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @property
    def total_waste(self) -> float:
        return self.wet_waste + self.dry_waste

    @property
    def month_bucket(self) -> str:
        return month_bucket(self.date)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["date"] = self.date.isoformat()
        payload["total_waste"] = self.total_waste
        return payload


@dataclass(frozen=True)
class Rejected:
    reason: str
    raw: dict[str, Any]


@dataclass(frozen=True)
class CleaningResult:
    records: list[CleanedRecord]
    rows_in: int
    rejected_by_reason: dict[str, int]
    rejected_samples: list[dict[str, Any]]

    @property
    def rejected_count(self) -> int:
        return sum(self.rejected_by_reason.values())


@dataclass(frozen=True)
class FilterState:
    """User-selected dashboard filters. Empty selections mean "all"."""

    start: date | None = None
    end: date | None = None
    groups: frozenset[str] = field(default_factory=frozenset)
    households: frozenset[str] = field(default_factory=frozenset)
    materials: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class GlobalKPIs:
    number_of_groups: int
    number_of_households: int
    number_of_weeks: int
    total_wet_waste: float
    total_dry_waste: float
    total_weight: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GroupBreakdown:
    group: str
    display_name: str
    wet_waste: float
    dry_waste: float
    hdpe: float
    pet: float
    pp: float
    paper: float
    metal: float
    glass: float
    total_weight: float
    household_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CategoryRates:
    avg_weekly_wet_waste: float
    avg_weekly_dry_waste: float
    total_households: int
    total_weeks: int


@dataclass(frozen=True)
class CategoryAverages:
    domestic: CategoryRates
    business: CategoryRates

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MaterialTotals:
    hdpe: float
    pet: float
    pp: float
    paper: float
    metal: float
    glass: float

    @property
    def total(self) -> float:
        return self.hdpe + self.pet + self.pp + self.paper + self.metal + self.glass

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["total"] = self.total
        return payload


@dataclass(frozen=True)
class UniqueValues:
    groups: list[str]
    households: list[str]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyTotals:
    month: str
    wet_waste: float
    dry_waste: float
    hdpe: float
    pet: float
    pp: float
    paper: float
    metal: float
    glass: float

    @property
    def total_weight(self) -> float:
        return self.wet_waste + self.dry_waste

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["total_weight"] = self.total_weight
        return payload


@dataclass(frozen=True)
class ProjectionTargets:
    groups: int
    households: int
    weeks: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProjectionResult:
    targets: ProjectionTargets
    observed_households: int
    observed_weeks: int
    weeks_per_month: float
    avg_weekly_wet_waste: float
    avg_weekly_dry_waste: float
    avg_weekly_total_weight: float
    avg_daily_wet_waste: float
    avg_daily_dry_waste: float
    avg_daily_total_weight: float
    avg_monthly_wet_waste: float
    avg_monthly_dry_waste: float
    avg_monthly_total_weight: float
    total_monthly_wet_waste: float
    total_monthly_dry_waste: float
    total_monthly_total_weight: float
    extrapolated_wet_waste: float
    extrapolated_dry_waste: float
    extrapolated_total_weight: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ForecastPoint:
    month: str
    predicted: float
    wet_waste: float
    dry_waste: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
