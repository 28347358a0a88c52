from __future__ import annotations

from importlib import import_module
from typing import Any

# Most callers only need the kernel surface; the rest stays reachable through subpackages.
__all__ = [
    "CompositeStep",
    "CompositeStepBuilder",
    "ConfigurationError",
    "DeclarationError",
    "ExecutionPolicy",
    "InvalidStateError",
    "MissingVariableError",
    "Param",
    "STEP_ID",
    "Scenario",
    "ScenarioBuilder",
    "ScenarioContext",
    "ServiceRegistry",
    "Step",
    "StepBuilder",
    "TypeMismatchError",
    "UnresolvedParameterError",
    "compose_using",
]


def __getattr__(name: str) -> Any:
    # Lazy exports keep `import scenario_kernel.config` free of kernel imports.
    if name == "ServiceRegistry":
        return getattr(import_module("scenario_kernel.application_context"), name)
    if name in __all__:
        return getattr(import_module("scenario_kernel.kernel"), name)
    raise AttributeError(name)
