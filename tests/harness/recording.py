from __future__ import annotations

# Minimal steps that record their execution order in a shared journal service.

from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

from scenario_kernel.application_context import ServiceRegistry
from scenario_kernel.kernel import (
    STEP_ID,
    CompositeStep,
    CompositeStepBuilder,
    Param,
    Scenario,
    ScenarioBuilder,
    ScenarioContext,
    Step,
    StepBuilder,
    compose_using,
)

TScenario = TypeVar("TScenario", bound=Scenario)


@dataclass
class Journal:
    label: str = "default"
    entries: list[str] = field(default_factory=list)


def make_journal(label: str = "default") -> Journal:
    return Journal(label=label)


class RecordingStep(Step):
    parameters: ClassVar[tuple[Param, ...]] = (Param("journal", Journal), STEP_ID)

    def __init__(self, journal: Journal, step_id: str) -> None:
        super().__init__(step_id)
        self.journal = journal
        self.value: object = f"{step_id}-value"

    async def execute(self, context: ScenarioContext) -> None:
        self.journal.entries.append(self.step_id)
        context.set(self.step_id, self.value)


class StepA(RecordingStep):
    pass


class StepB(RecordingStep):
    pass


class StepX(RecordingStep):
    pass


class StepY(RecordingStep):
    pass


class FailingStep(RecordingStep):
    async def execute(self, context: ScenarioContext) -> None:
        self.journal.entries.append(self.step_id)
        raise RuntimeError(f"{self.step_id} failed")


class RecordingStepBuilder(StepBuilder[RecordingStep]):
    step_type = RecordingStep

    def with_value(self, value: object) -> RecordingStepBuilder:
        return self._override("value", value)


class StepABuilder(RecordingStepBuilder):
    step_type = StepA


class StepBBuilder(RecordingStepBuilder):
    step_type = StepB


class StepXBuilder(RecordingStepBuilder):
    step_type = StepX


class StepYBuilder(RecordingStepBuilder):
    step_type = StepY


@compose_using(0, "X", StepX)
@compose_using(1, "Y", StepY)
class PairStep(CompositeStep):
    pass


class PairStepBuilder(CompositeStepBuilder[PairStep]):
    step_type = PairStep


@compose_using(0, "A", StepA)
@compose_using(1, "B", StepB)
@dataclass
class TwoStepScenario(Scenario):
    A: object = None
    B: object = None


@compose_using(0, "A", StepA)
@compose_using(1, "B", StepB)
@compose_using(2, "R", PairStep)
@dataclass
class NestedScenario(Scenario):
    A: object = None
    B: object = None
    R_X: object = None
    R_Y: object = None


@compose_using(0, "A", StepA)
@compose_using(1, "F", FailingStep)
@compose_using(2, "B", StepB)
@dataclass
class FailingScenario(Scenario):
    A: object = None
    B: object = None


class JournalScenarioBuilder(ScenarioBuilder[TScenario]):
    # Binds a journal unless one was already provided through config or a registry.
    def initialize_services(self, registry: ServiceRegistry) -> ServiceRegistry:
        if Journal not in registry:
            registry.register_instance(Journal, Journal())
        return registry

    @property
    def journal(self) -> Journal:
        return self.services.require(Journal)  # type: ignore[return-value]


class TwoStepScenarioBuilder(JournalScenarioBuilder[TwoStepScenario]):
    scenario_type = TwoStepScenario

    def configure_a(self, configurator: Any = None) -> TwoStepScenarioBuilder:
        return self.configure_step("A", StepABuilder, configurator)

    def configure_b(self, configurator: Any = None) -> TwoStepScenarioBuilder:
        return self.configure_step("B", StepBBuilder, configurator)


class NestedScenarioBuilder(JournalScenarioBuilder[NestedScenario]):
    scenario_type = NestedScenario


class FailingScenarioBuilder(JournalScenarioBuilder[FailingScenario]):
    scenario_type = FailingScenario
