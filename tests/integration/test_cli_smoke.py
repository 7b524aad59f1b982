import json
from pathlib import Path

import pytest

from crichow.cli import parse_args, run_command
from crichow.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from crichow.common.fs import read_json

FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "waste_records.json"


def _args(data_dir: Path, *extra: str):
    return parse_args(
        [
            *extra,
            "--config-dir",
            "config",
            "--source",
            str(FIXTURE),
            "--data-dir",
            str(data_dir),
            "--run-id",
            "run-test",
        ]
    )


@pytest.mark.integration
def test_cli_all_generates_expected_artifacts(tmp_path: Path):
    data_dir = tmp_path / "data"

    exit_code = run_command(_args(data_dir, "all"))

    assert exit_code == EXIT_SUCCESS
    for stage in ("clean", "summary", "groups", "categories", "materials", "extrapolate", "forecast"):
        assert (data_dir / "out" / f"{stage}.json").exists()
    assert (data_dir / "out" / "group_ranking.csv").exists()
    assert (data_dir / "out" / "cleaned_records.csv").exists()
    assert (data_dir / "out" / "dashboard_report.json").exists()
    assert (data_dir / "run_meta" / "run-test.log.jsonl").exists()


@pytest.mark.integration
def test_cli_clean_reports_rejections(tmp_path: Path):
    data_dir = tmp_path / "data"

    assert run_command(_args(data_dir, "clean")) == EXIT_SUCCESS

    payload = read_json(data_dir / "out" / "clean.json")
    assert payload["rows_in"] == 7
    assert payload["rows_out"] == 5
    assert payload["rejected"] == {"INVALID_DATE": 1, "MISSING_GROUP": 1}

    log_text = (data_dir / "run_meta" / "run-test.log.jsonl").read_text(encoding="utf-8")
    assert "RECORDS_REJECTED" in log_text


@pytest.mark.integration
def test_cli_filters_apply_to_group_stage(tmp_path: Path):
    data_dir = tmp_path / "data"

    exit_code = run_command(_args(data_dir, "groups", "--group", "Nawal", "--end", "2025-03-31"))

    assert exit_code == EXIT_SUCCESS
    groups = read_json(data_dir / "out" / "groups.json")["groups"]
    assert [row["group"] for row in groups] == ["Nawal"]
    assert groups[0]["total_weight"] == 16.9


@pytest.mark.integration
def test_cli_group_list_overlay_with_display_names(tmp_path: Path):
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "dataset.yml").write_text(
        """classifier:
  policy: group_list
  mixed_groups: [Kel Takau]
groups:
  display_names:
    Kel Takau: Kel Takau Youth Group
""",
        encoding="utf-8",
    )
    data_dir = tmp_path / "data"
    args = _args(data_dir, "categories", "--overlay-config-dir", str(overlay), "--group", "Kel Takau Youth Group")

    assert run_command(args) == EXIT_SUCCESS

    payload = read_json(data_dir / "out" / "categories.json")
    assert payload["business"]["total_households"] == 2
    assert payload["domestic"]["total_households"] == 0


@pytest.mark.integration
def test_cli_missing_asset_is_hard_failure(tmp_path: Path):
    data_dir = tmp_path / "data"
    args = parse_args(
        [
            "all",
            "--config-dir",
            "config",
            "--source",
            str(tmp_path / "missing.json"),
            "--data-dir",
            str(data_dir),
            "--run-id",
            "run-missing",
        ]
    )

    assert run_command(args) == EXIT_HARD_FAIL
    assert not (data_dir / "out").exists()
    log_text = (data_dir / "run_meta" / "run-missing.log.jsonl").read_text(encoding="utf-8")
    assert "ASSET_LOAD_ERROR" in log_text


@pytest.mark.integration
def test_cli_invalid_filter_date_is_hard_failure(tmp_path: Path):
    assert run_command(_args(tmp_path / "data", "summary", "--start", "13/3/2025")) == EXIT_HARD_FAIL


def _log_lines(data_dir: Path, run_id: str = "run-test") -> list[dict]:
    log_path = data_dir / "run_meta" / f"{run_id}.log.jsonl"
    return [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines() if line.strip()]


def _failures(data_dir: Path) -> list[dict]:
    return [line for line in _log_lines(data_dir) if line["event"] == "STAGE_FAIL"]


@pytest.mark.integration
def test_cli_duplicate_display_names_fail_with_logged_cause(tmp_path: Path):
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "dataset.yml").write_text(
        """groups:
  display_names:
    KT: Kel Takau
    KT2: Kel Takau
""",
        encoding="utf-8",
    )
    data_dir = tmp_path / "data"

    exit_code = run_command(_args(data_dir, "summary", "--overlay-config-dir", str(overlay)))

    assert exit_code == EXIT_HARD_FAIL
    failures = _failures(data_dir)
    assert len(failures) == 1
    assert failures[0]["error_code"] == "CONFIG_ERROR"
    assert not (data_dir / "out").exists()


@pytest.mark.integration
def test_cli_cleaning_failure_is_logged(tmp_path: Path, monkeypatch):
    def broken_clean(raw_rows, dataset_config):
        raise RuntimeError("boom")

    monkeypatch.setattr("crichow.cli.clean_records", broken_clean)
    data_dir = tmp_path / "data"

    assert run_command(_args(data_dir, "summary")) == EXIT_HARD_FAIL
    failures = _failures(data_dir)
    assert [(line["stage"], line["error_code"]) for line in failures] == [("clean", "UNEXPECTED_ERROR")]


@pytest.mark.integration
def test_cli_dashboard_report_failure_is_partial(tmp_path: Path, monkeypatch):
    def broken_report(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr("crichow.cli.build_dashboard_report", broken_report)
    data_dir = tmp_path / "data"

    assert run_command(_args(data_dir, "all")) == EXIT_PARTIAL
    assert (data_dir / "out" / "summary.json").exists()
    assert not (data_dir / "out" / "dashboard_report.json").exists()
    failures = _failures(data_dir)
    assert [(line["stage"], line["error_code"]) for line in failures] == [("report", "UNEXPECTED_ERROR")]


@pytest.mark.integration
def test_cli_oversized_quantity_does_not_abort_run(tmp_path: Path):
    source = tmp_path / "records.json"
    source.write_text(
        '[{"DATE": "13/3/2025", "Group": "KT", "HOUSEHOLD NAME": "H1", "WET WASTE (KGS)": 1' + "0" * 400 + ', "DRY WASTE (KGS)": 2}]',
        encoding="utf-8",
    )
    data_dir = tmp_path / "data"
    args = parse_args(["summary", "--config-dir", "config", "--source", str(source), "--data-dir", str(data_dir), "--run-id", "run-test"])

    assert run_command(args) == EXIT_SUCCESS
    kpis = read_json(data_dir / "out" / "summary.json")["kpis"]
    assert kpis["total_wet_waste"] == 0.0
    assert kpis["total_dry_waste"] == 2.0
    assert _failures(data_dir) == []
