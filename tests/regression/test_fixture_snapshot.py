from __future__ import annotations

from pathlib import Path

import pytest

from crichow.cli import parse_args, run_command
from crichow.common.fs import read_json

FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "waste_records.json"


def _run(data_dir: Path, run_id: str) -> dict:
    args = parse_args(
        [
            "all",
            "--config-dir",
            "config",
            "--source",
            str(FIXTURE),
            "--data-dir",
            str(data_dir),
            "--run-id",
            run_id,
        ]
    )
    assert run_command(args) == 0
    return read_json(data_dir / "out" / "dashboard_report.json")


@pytest.mark.regression
def test_fixture_report_values_are_stable(tmp_path: Path):
    report = _run(tmp_path / "data", "run-snapshot")

    assert report["record_count"] == 5
    assert report["summary"]["kpis"] == {
        "number_of_groups": 3,
        "number_of_households": 3,
        "number_of_weeks": 3,
        "total_wet_waste": 67.0,
        "total_dry_waste": 30.9,
        "total_weight": 97.9,
    }
    assert report["summary"]["filter_options"]["groups"] == ["Kel Takau", "Kibera East", "Nawal"]
    assert [row["month"] for row in report["summary"]["monthly"]] == ["2025-03", "2025-04", "2025-05"]

    groups = report["groups"]["groups"]
    assert [(row["group"], row["total_weight"]) for row in groups] == [
        ("Kel Takau", 52.0),
        ("Nawal", 33.9),
        ("Kibera East", 12.0),
    ]

    assert report["categories"]["business"] == {
        "avg_weekly_wet_waste": 25.0,
        "avg_weekly_dry_waste": 5.0,
        "total_households": 1,
        "total_weeks": 1,
    }
    assert report["categories"]["domestic"]["avg_weekly_wet_waste"] == 7.0
    assert report["categories"]["domestic"]["avg_weekly_dry_waste"] == 4.32

    assert report["materials"]["totals"]["total"] == 23.4

    extrapolation = report["extrapolation"]
    assert extrapolation["observed_households"] == 3
    assert extrapolation["observed_weeks"] == 3
    assert extrapolation["avg_weekly_wet_waste"] == 7.44
    assert extrapolation["weeks_per_month"] == 4.33
    assert extrapolation["total_monthly_wet_waste"] == 96.7

    predicted = report["forecast"]["predicted"]
    assert [point["month"] for point in predicted] == ["2025-06", "2025-07", "2025-08", "2025-09", "2025-10", "2025-11"]
    assert all(point["predicted"] == 0.0 for point in predicted)


@pytest.mark.regression
def test_extrapolation_ignores_user_filters(tmp_path: Path):
    data_dir = tmp_path / "data"
    args = parse_args(
        [
            "all",
            "--config-dir",
            "config",
            "--source",
            str(FIXTURE),
            "--data-dir",
            str(data_dir),
            "--group",
            "Nawal",
        ]
    )
    assert run_command(args) == 0

    report = read_json(data_dir / "out" / "dashboard_report.json")
    assert report["summary"]["kpis"]["number_of_groups"] == 1
    assert report["extrapolation"]["observed_households"] == 3
