from __future__ import annotations

from pathlib import Path

import yaml

from scenario_kernel.config.models import KernelConfig
from scenario_kernel.config.validator import ConfigError, validate_kernel_config


def load_yaml_config(path: Path) -> dict[str, object]:
    # YAML loader; returns a raw mapping for validation.
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file is not valid YAML: {path}") from exc
    if raw is None:
        # An empty file means "all defaults".
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw


def load_kernel_config(path: Path) -> KernelConfig:
    return validate_kernel_config(load_yaml_config(path))
