from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from stepcore.config.models import PlanConfig, RunConfig


# ConfigError is raised for invalid configuration; loading fails fast.
class ConfigError(ValueError):
    pass


# Environment variables that flip boolean run settings.
ENV_OVERRIDES: dict[str, str] = {
    "STEPCORE_FULL_BACKTRACE": "full_backtrace",
    "STEPCORE_TRUNCATE_OUTPUT": "truncate_output",
    "STEPCORE_STRICT": "strict",
    "STEPCORE_DRY_RUN": "dry_run",
}

_TRUTHY = {"1", "true", "yes", "on"}


def _read_mapping(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: root must be a mapping")
    return raw


def load_run_config(path: Path) -> RunConfig:
    raw = _read_mapping(path)
    try:
        return RunConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"{path}: invalid run config\n{exc}") from exc


def load_plan(path: Path) -> PlanConfig:
    raw = _read_mapping(path)
    if "scenarios" not in raw:
        raise ConfigError(f"{path}: missing required key 'scenarios'")
    try:
        return PlanConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"{path}: invalid plan\n{exc}") from exc


def apply_env_overrides(config: RunConfig, environ: Mapping[str, str]) -> RunConfig:
    # Only variables that are present override; an empty value counts as false.
    updates: dict[str, bool] = {}
    for variable, field_name in ENV_OVERRIDES.items():
        if variable in environ:
            updates[field_name] = environ[variable].strip().lower() in _TRUTHY
    return config.model_copy(update=updates) if updates else config
