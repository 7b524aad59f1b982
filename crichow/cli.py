"""CLI entrypoint for the waste-collection dashboard pipeline."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from crichow.common.config_loader import ConfigBundle, load_all_configs
from crichow.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS, MATERIAL_KEYS, STAGES
from crichow.common.errors import PipelineError
from crichow.common.groups import GroupNameTranslator
from crichow.common.ids import generate_run_id
from crichow.common.logging import build_logger, log_event
from crichow.common.models import CleanedRecord, CleaningResult, FilterState
from crichow.common.time_utils import parse_iso_date
from crichow.pipeline.aggregate import compute_group_breakdown
from crichow.pipeline.clean import clean_records
from crichow.pipeline.export import write_cleaned_records_csv, write_group_ranking_csv
from crichow.pipeline.filters import filter_records
from crichow.pipeline.load import load_raw_records
from crichow.pipeline.reports import (
    build_dashboard_report,
    categories_payload,
    clean_payload,
    extrapolate_payload,
    forecast_payload,
    groups_payload,
    materials_payload,
    summary_payload,
    write_dashboard_report,
    write_stage_output,
)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*STAGES, "all"])
    parser.add_argument("--source", default="./data/practical-action-data.json")
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--start", default=None, help="inclusive lower date bound, YYYY-MM-DD")
    parser.add_argument("--end", default=None, help="inclusive upper date bound, YYYY-MM-DD")
    parser.add_argument("--group", action="append", default=[], dest="groups")
    parser.add_argument("--household", action="append", default=[], dest="households")
    parser.add_argument("--material", action="append", default=[], dest="materials", choices=MATERIAL_KEYS)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def build_filter_state(args: argparse.Namespace) -> FilterState:
    return FilterState(
        start=parse_iso_date(args.start),
        end=parse_iso_date(args.end),
        groups=frozenset(args.groups),
        households=frozenset(args.households),
        materials=frozenset(args.materials),
    )


def execute_stage(
    stage: str,
    cleaning: CleaningResult,
    state: FilterState,
    bundle: ConfigBundle,
    translator: GroupNameTranslator,
    data_dir: Path,
    run_id: str,
) -> Path:
    records: list[CleanedRecord] = cleaning.records
    filtered = filter_records(records, state, translator)

    if stage == "clean":
        write_cleaned_records_csv(data_dir, records)
        payload = clean_payload(cleaning, bundle.dataset)
    elif stage == "summary":
        payload = summary_payload(filtered, bundle, translator, records, state)
    elif stage == "groups":
        write_group_ranking_csv(data_dir, compute_group_breakdown(filtered, translator))
        payload = groups_payload(filtered, translator)
    elif stage == "categories":
        payload = categories_payload(filtered)
    elif stage == "materials":
        payload = materials_payload(filtered, state)
    elif stage == "extrapolate":
        payload = extrapolate_payload(records, bundle)
    elif stage == "forecast":
        payload = forecast_payload(filtered, bundle)
    else:
        raise ValueError(f"Unknown stage: {stage}")

    return write_stage_output(data_dir, stage, payload, run_id=run_id)


def _log_stage_failure(logger, run_id: str, stage: str | None, exc: Exception) -> None:
    if isinstance(exc, PipelineError):
        message = f"stage failed: {exc}"
        error_code = exc.error_code
    else:
        message = "unexpected stage failure"
        error_code = "UNEXPECTED_ERROR"
    log_event(
        logger,
        message,
        run_id=run_id,
        stage=stage,
        event="STAGE_FAIL",
        status="error",
        error_code=error_code,
    )


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        bundle = load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)
        translator = GroupNameTranslator(bundle.dataset["groups"]["display_names"])
        state = build_filter_state(args)
        raw_rows = load_raw_records(args.source)
    except PipelineError as exc:
        log_event(
            logger,
            f"startup failed: {exc}",
            run_id=run_id,
            source=args.source,
            event="STAGE_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL
    except ValueError as exc:
        log_event(logger, f"invalid filter argument: {exc}", run_id=run_id, event="STAGE_FAIL", status="error", error_code="ARGUMENT_ERROR")
        return EXIT_HARD_FAIL

    log_event(logger, "asset loaded", run_id=run_id, source=args.source, event="ASSET_LOADED", status="ok", rows_in=len(raw_rows))

    # No stage can run without cleaned records.
    try:
        cleaning = clean_records(raw_rows, bundle.dataset)
    except Exception as exc:
        _log_stage_failure(logger, run_id, "clean", exc)
        return EXIT_HARD_FAIL

    if cleaning.rejected_count:
        log_event(
            logger,
            "records rejected during cleaning",
            run_id=run_id,
            stage="clean",
            event="RECORDS_REJECTED",
            status="ok",
            rows_in=cleaning.rows_in,
            rows_out=len(cleaning.records),
            details=cleaning.rejected_by_reason,
        )

    stages = STAGES if args.command == "all" else (args.command,)
    had_partial_failure = False

    for stage in stages:
        log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
        try:
            execute_stage(stage, cleaning, state, bundle, translator, data_dir, run_id)
        except Exception as exc:
            had_partial_failure = True
            _log_stage_failure(logger, run_id, stage, exc)
            if args.strict:
                return EXIT_HARD_FAIL
        log_event(logger, "stage end", run_id=run_id, stage=stage, event="STAGE_END", status="ok")

    if args.command == "all":
        try:
            write_dashboard_report(data_dir, build_dashboard_report(cleaning.records, state, bundle, translator), run_id=run_id)
        except Exception as exc:
            had_partial_failure = True
            _log_stage_failure(logger, run_id, "report", exc)
            if args.strict:
                return EXIT_HARD_FAIL

    if had_partial_failure:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
