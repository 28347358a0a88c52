from __future__ import annotations

from pydantic import ValidationError

from scenario_kernel.config.models import KernelConfig

SUPPORTED_VERSIONS = {1}


class ConfigError(ValueError):
    # Raised for invalid kernel config (fail fast).
    pass


def validate_kernel_config(raw: object) -> KernelConfig:
    # Validate a raw mapping (usually loaded from YAML) into a KernelConfig.
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    try:
        cfg = KernelConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc
    if cfg.version not in SUPPORTED_VERSIONS:
        raise ConfigError(f"Unsupported config version {cfg.version}; expected one of {sorted(SUPPORTED_VERSIONS)}")
    return cfg


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "<root>"
        problems.append(f"{location}: {err['msg']}")
    return "Invalid kernel config: " + "; ".join(problems)
