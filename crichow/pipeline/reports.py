"""Stage payloads and the combined dashboard report."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

from crichow.common.config_loader import ConfigBundle
from crichow.common.fs import write_json
from crichow.common.groups import GroupNameTranslator
from crichow.common.models import CleanedRecord, CleaningResult, FilterState
from crichow.pipeline.aggregate import (
    compute_category_averages,
    compute_global_kpis,
    compute_group_breakdown,
    compute_material_totals,
    compute_monthly_totals,
    extract_unique_values,
)
from crichow.pipeline.extrapolate import extrapolate, forecast_trend
from crichow.pipeline.filters import filter_records, households_for_groups, project_materials

REPORT_DECIMALS = 2


def round_floats(value: Any, decimals: int = REPORT_DECIMALS) -> Any:
    if isinstance(value, float):
        return round(value, decimals)
    if isinstance(value, dict):
        return {key: round_floats(item, decimals) for key, item in value.items()}
    if isinstance(value, list):
        return [round_floats(item, decimals) for item in value]
    return value


def filter_payload(state: FilterState) -> dict:
    return {
        "start": state.start.isoformat() if state.start else None,
        "end": state.end.isoformat() if state.end else None,
        "groups": sorted(state.groups),
        "households": sorted(state.households),
        "materials": sorted(state.materials),
    }


def clean_payload(result: CleaningResult, dataset_config: dict) -> dict:
    return {
        "dataset": dataset_config["dataset"],
        "rows_in": result.rows_in,
        "rows_out": len(result.records),
        "rejected": result.rejected_by_reason,
        "rejected_samples": result.rejected_samples,
    }


def summary_payload(
    filtered: Sequence[CleanedRecord],
    bundle: ConfigBundle,
    translator: GroupNameTranslator,
    all_records: Sequence[CleanedRecord],
    state: FilterState,
) -> dict:
    unique = extract_unique_values(all_records, translator)
    return {
        "kpis": compute_global_kpis(filtered, household_count=bundle.fixed_household_count).to_dict(),
        "filter_options": {
            "groups": unique.groups,
            "households": households_for_groups(all_records, state.groups, translator),
        },
        "monthly": [row.to_dict() for row in compute_monthly_totals(filtered)],
    }


def groups_payload(filtered: Sequence[CleanedRecord], translator: GroupNameTranslator) -> dict:
    return {"groups": [row.to_dict() for row in compute_group_breakdown(filtered, translator)]}


def categories_payload(filtered: Sequence[CleanedRecord]) -> dict:
    return compute_category_averages(filtered).to_dict()


def materials_payload(filtered: Sequence[CleanedRecord], state: FilterState) -> dict:
    totals = compute_material_totals(filtered)
    selected = project_materials(totals, state)
    return {
        "totals": totals.to_dict(),
        "selected": selected,
        "selected_total": sum(selected.values()),
    }


def extrapolate_payload(all_records: Sequence[CleanedRecord], bundle: ConfigBundle) -> dict:
    return extrapolate(all_records, bundle.targets, weeks_per_month=bundle.weeks_per_month).to_dict()


def forecast_payload(filtered: Sequence[CleanedRecord], bundle: ConfigBundle) -> dict:
    forecast_cfg = bundle.projections["forecast"]
    monthly = compute_monthly_totals(filtered)
    points = forecast_trend(
        monthly,
        window=int(forecast_cfg["window_months"]),
        horizon=int(forecast_cfg["horizon_months"]),
        wet_share=float(forecast_cfg["wet_share"]),
    )
    return {
        "historical": [{"month": row.month, "total_weight": row.total_weight} for row in monthly],
        "predicted": [point.to_dict() for point in points],
    }


def build_dashboard_report(
    all_records: Sequence[CleanedRecord],
    state: FilterState,
    bundle: ConfigBundle,
    translator: GroupNameTranslator,
) -> dict:
    filtered = filter_records(all_records, state, translator)
    return {
        "filters": filter_payload(state),
        "record_count": len(filtered),
        "summary": summary_payload(filtered, bundle, translator, all_records, state),
        "groups": groups_payload(filtered, translator),
        "categories": categories_payload(filtered),
        "materials": materials_payload(filtered, state),
        "extrapolation": extrapolate_payload(all_records, bundle),
        "forecast": forecast_payload(filtered, bundle),
    }


def write_stage_output(data_dir: Path, stage: str, payload: dict, *, run_id: str) -> Path:
    out_path = data_dir / "out" / f"{stage}.json"
    write_json(out_path, {"run_id": run_id, "stage": stage, **round_floats(payload)})
    return out_path


def write_dashboard_report(data_dir: Path, payload: dict, *, run_id: str) -> Path:
    report_path = data_dir / "out" / "dashboard_report.json"
    write_json(report_path, {"run_id": run_id, **round_floats(payload)})
    return report_path
