"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from crichow.common.errors import ConfigError
from crichow.common.fs import read_yaml
from crichow.common.models import ProjectionTargets
from crichow.common.schema import validate_dataset_config, validate_projections_config

DATASET_FILE = "dataset.yml"
PROJECTIONS_FILE = "projections.yml"


@dataclass(frozen=True)
class ConfigBundle:
    dataset: dict
    projections: dict

    @property
    def fixed_household_count(self) -> int | None:
        kpis = self.dataset["kpis"]
        if kpis["household_count"] == "fixed":
            return int(kpis["fixed_households"])
        return None

    @property
    def targets(self) -> ProjectionTargets:
        targets = self.projections["targets"]
        return ProjectionTargets(
            groups=int(targets["groups"]),
            households=int(targets["households"]),
            weeks=int(targets["weeks"]),
        )

    @property
    def weeks_per_month(self) -> float:
        return float(self.projections["weeks_per_month"])


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    return _deep_merge(base, overlay)


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    def _overlay(name: str) -> Path | None:
        return (overlay_config_dir / name) if overlay_config_dir is not None else None

    dataset = validate_dataset_config(
        _load_yaml_with_overlay(config_dir / DATASET_FILE, _overlay(DATASET_FILE)),
        allow_unknown=allow_unknown,
    )
    projections = validate_projections_config(
        _load_yaml_with_overlay(config_dir / PROJECTIONS_FILE, _overlay(PROJECTIONS_FILE)),
        allow_unknown=allow_unknown,
    )
    return ConfigBundle(dataset=dataset, projections=projections)
