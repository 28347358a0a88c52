from .errors import (
    ConfigurationError,
    DeclarationError,
    InvalidStateError,
    MissingVariableError,
    TypeMismatchError,
    UnresolvedParameterError,
)
from .context import ScenarioContext
from .resolution import CONSTRUCTOR_ARGS, STEP_ID, Param, ResolutionScope, ServiceLookup
from .step import Step
from .execution import ExecutionPolicy, select_runnable
from .composition import (
    ID_SEPARATOR,
    ComposeUsing,
    CompositionDescriptor,
    CompositionRegistry,
    child_step_id,
    compose_using,
    descriptor_for,
    register_composition,
)
from .step_factory import StepFactory
from .step_builder import StepBuilder
from .builder_factory import BuilderFactory
from .composite import CompositeStep, CompositeStepBuilder
from .scenario import Scenario
from .scenario_builder import ScenarioBuilder

__all__ = [
    "ConfigurationError",
    "DeclarationError",
    "InvalidStateError",
    "MissingVariableError",
    "TypeMismatchError",
    "UnresolvedParameterError",
    "ScenarioContext",
    "CONSTRUCTOR_ARGS",
    "STEP_ID",
    "Param",
    "ResolutionScope",
    "ServiceLookup",
    "Step",
    "ExecutionPolicy",
    "select_runnable",
    "ID_SEPARATOR",
    "ComposeUsing",
    "CompositionDescriptor",
    "CompositionRegistry",
    "child_step_id",
    "compose_using",
    "descriptor_for",
    "register_composition",
    "StepFactory",
    "StepBuilder",
    "BuilderFactory",
    "CompositeStep",
    "CompositeStepBuilder",
    "Scenario",
    "ScenarioBuilder",
]
