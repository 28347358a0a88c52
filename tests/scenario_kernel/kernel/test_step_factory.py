from __future__ import annotations

from typing import ClassVar

import pytest

from harness.recording import Journal, PairStep, StepA, StepX
from scenario_kernel.application_context import ServiceRegistry
from scenario_kernel.kernel import (
    STEP_ID,
    ConfigurationError,
    ExecutionPolicy,
    Param,
    ScenarioContext,
    Step,
    StepFactory,
    UnresolvedParameterError,
)


class Greeting(Step):
    parameters: ClassVar[tuple[Param, ...]] = (Param("greeting", str), STEP_ID)

    def __init__(self, greeting: str, step_id: str) -> None:
        super().__init__(step_id)
        self.greeting = greeting

    async def execute(self, context: ScenarioContext) -> None:
        context.set(self.step_id, self.greeting)


class FactoryAware(Step):
    parameters: ClassVar[tuple[Param, ...]] = (Param("step_factory", StepFactory), STEP_ID)

    def __init__(self, step_factory: StepFactory, step_id: str) -> None:
        super().__init__(step_id)
        self.step_factory = step_factory

    async def execute(self, context: ScenarioContext) -> None:
        return None


def _factory_with_journal() -> tuple[StepFactory, Journal]:
    journal = Journal()
    services = ServiceRegistry()
    services.register_instance(Journal, journal)
    return StepFactory(services), journal


def test_create_step_resolves_services_and_id() -> None:
    # Declared parameters are filled from services and the step id.
    factory, journal = _factory_with_journal()
    step = factory.create_step(StepA, "A")
    assert isinstance(step, StepA)
    assert step.step_id == "A"
    assert step.journal is journal


def test_create_step_passes_explicit_args_first() -> None:
    # Constructor args cover leading parameters.
    step = StepFactory().create_step(Greeting, "hello", ("hi there",))
    assert step.greeting == "hi there"
    assert step.step_id == "hello"


def test_create_step_injects_itself() -> None:
    # The factory is a well-known value for its own type.
    factory = StepFactory()
    assert factory.create_step(FactoryAware, "f").step_factory is factory


def test_create_step_with_too_many_args_raises() -> None:
    # Extra explicit args are a configuration error.
    with pytest.raises(ConfigurationError):
        StepFactory().create_step(Greeting, "g", ("a", "b", "c"))


def test_create_step_without_service_raises() -> None:
    # Nothing provides the journal.
    with pytest.raises(UnresolvedParameterError) as exc:
        StepFactory().create_step(StepA, "A")
    assert exc.value.parameter == "journal"


def test_create_step_rejects_non_step_kinds() -> None:
    # Only Step subclasses can be created.
    with pytest.raises(ConfigurationError):
        StepFactory().create_step(int, "x")  # type: ignore[type-var]


def test_registered_constructor_replaces_declared_parameters() -> None:
    # Explicit constructor table entries are used instead of the parameter tuple.
    factory = StepFactory()
    journal = Journal(label="table")
    factory.register(StepA, lambda scope: StepA(journal, scope.step_id))
    step = factory.create_step(StepA, "A")
    assert step.journal is journal


def test_registered_constructor_must_return_the_kind() -> None:
    # A table entry returning another type fails fast.
    factory = StepFactory()
    factory.register(StepA, lambda scope: StepX(Journal(), scope.step_id))
    with pytest.raises(ConfigurationError, match="returned StepX"):
        factory.create_step(StepA, "A")


def test_create_composite_step_replays_configuration() -> None:
    # Policy and configured children are applied to the new composite.
    factory, _ = _factory_with_journal()
    composite = factory.create_composite_step(PairStep, "R", {"Y": None}, ExecutionPolicy.CONFIGURED_ONLY)
    assert composite.step_id == "R"
    assert composite.policy is ExecutionPolicy.CONFIGURED_ONLY
    assert dict(composite.configured) == {"Y": None}
    assert composite.runnable_step_ids() == ["Y"]


def test_create_composite_step_requires_composite_kind() -> None:
    # Leaf steps cannot be created as composites.
    factory, _ = _factory_with_journal()
    with pytest.raises(ConfigurationError):
        factory.create_composite_step(StepA, "A", {}, ExecutionPolicy.ALL)  # type: ignore[type-var]
