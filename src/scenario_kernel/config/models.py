from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Config models map YAML sections of the kernel config onto typed structures.


class LoggingConfig(BaseModel):
    # Selects the structured log sink attached to scenario contexts.
    model_config = ConfigDict(extra="forbid")
    sink: Literal["none", "stdout", "jsonl"] = "none"
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    path: str | None = None

    @model_validator(mode="after")
    def _path_required_for_jsonl(self) -> LoggingConfig:
        if self.sink == "jsonl" and not self.path:
            raise ValueError("logging.path is required when logging.sink is 'jsonl'")
        return self


class ServiceDecl(BaseModel):
    # A service bound into the registry: contract and factory are "module:attr" references.
    model_config = ConfigDict(extra="forbid")
    contract: str
    factory: str
    settings: dict[str, Any] = Field(default_factory=dict)

    @field_validator("contract", "factory")
    @classmethod
    def _must_be_reference(cls, value: str) -> str:
        module, sep, attr = value.partition(":")
        if not module or not sep or not attr:
            raise ValueError(f"'{value}' must look like 'package.module:attribute'")
        return value


class KernelConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    version: int = 1
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    services: list[ServiceDecl] = Field(default_factory=list)
