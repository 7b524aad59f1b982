"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from crichow.common.constants import (
    CLASSIFIER_POLICIES,
    DATE_ORDERS,
    HOUSEHOLD_COUNT_POLICIES,
    QUANTITY_KEYS,
)
from crichow.common.errors import ConfigError

FIELD_KEYS = {"date", "group", "household_name", "location", *QUANTITY_KEYS}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_choice(value, choices: tuple[str, ...], ctx: str) -> None:
    if value not in choices:
        raise ConfigError(f"{ctx} must be one of {', '.join(choices)}; got {value!r}")


def _assert_positive_number(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_dataset_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"dataset", "fields", "date_order", "classifier", "groups", "kpis"}
    _assert_required_keys(cfg, top_required, "dataset config")
    _assert_no_unknown_keys(cfg, top_required, "dataset config", allow_unknown)

    _assert_required_keys(cfg["dataset"], {"name", "version"}, "dataset")
    _assert_required_keys(cfg["fields"], FIELD_KEYS, "fields")
    _assert_no_unknown_keys(cfg["fields"], FIELD_KEYS, "fields", allow_unknown)
    _assert_choice(cfg["date_order"], DATE_ORDERS, "date_order")

    classifier = cfg["classifier"]
    _assert_required_keys(classifier, {"policy", "business_households", "mixed_groups"}, "classifier")
    _assert_choice(classifier["policy"], CLASSIFIER_POLICIES, "classifier.policy")
    for key in ("business_households", "mixed_groups"):
        if not isinstance(classifier[key], list):
            raise ConfigError(f"classifier.{key} must be a list")

    _assert_required_keys(cfg["groups"], {"display_names"}, "groups")
    if not isinstance(cfg["groups"]["display_names"], dict):
        raise ConfigError("groups.display_names must be a mapping")

    kpis = cfg["kpis"]
    _assert_required_keys(kpis, {"household_count"}, "kpis")
    _assert_choice(kpis["household_count"], HOUSEHOLD_COUNT_POLICIES, "kpis.household_count")
    if kpis["household_count"] == "fixed":
        _assert_required_keys(kpis, {"fixed_households"}, "kpis")
        _assert_positive_number(kpis["fixed_households"], "kpis.fixed_households")

    return cfg


def validate_projections_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"targets", "weeks_per_month", "forecast"}
    _assert_required_keys(cfg, top_required, "projections config")
    _assert_no_unknown_keys(cfg, top_required, "projections config", allow_unknown)

    _assert_required_keys(cfg["targets"], {"groups", "households", "weeks"}, "targets")
    for key in ("groups", "households", "weeks"):
        _assert_positive_number(cfg["targets"][key], f"targets.{key}")
    _assert_positive_number(cfg["weeks_per_month"], "weeks_per_month")

    forecast = cfg["forecast"]
    _assert_required_keys(forecast, {"window_months", "horizon_months", "wet_share"}, "forecast")
    _assert_positive_number(forecast["window_months"], "forecast.window_months")
    _assert_positive_number(forecast["horizon_months"], "forecast.horizon_months")
    wet_share = forecast["wet_share"]
    if isinstance(wet_share, bool) or not isinstance(wet_share, (int, float)) or not 0 <= wet_share <= 1:
        raise ConfigError("forecast.wet_share must be between 0 and 1")

    return cfg
