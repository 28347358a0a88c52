from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, ClassVar, Generic, Self, TypeVar

from scenario_kernel.application_context.service_registry import ServiceRegistry, register_declared_services
from scenario_kernel.config.models import KernelConfig
from scenario_kernel.kernel.builder_factory import BuilderFactory
from scenario_kernel.kernel.composition import CompositionDescriptor, descriptor_for
from scenario_kernel.kernel.errors import InvalidStateError
from scenario_kernel.kernel.execution import ExecutionPolicy, select_runnable
from scenario_kernel.kernel.scenario import Scenario
from scenario_kernel.kernel.step import Step
from scenario_kernel.kernel.step_builder import StepBuilder, require_builder_for
from scenario_kernel.kernel.step_factory import StepFactory
from scenario_kernel.observability.adapters.logging import LogSink, build_log_sink

TScenario = TypeVar("TScenario", bound=Scenario)
B = TypeVar("B", bound=StepBuilder[Any])


class ScenarioBuilder(Generic[TScenario]):
    """Composes and runs the root pipeline of a scenario type.

    Subclasses set ``scenario_type`` and add fluent methods that call
    ``configure_step``. Configuring any step switches the policy to "configured
    steps and everything before them"; ``only_configured_steps``,
    ``and_all_previous_steps`` and ``and_all_other_steps`` select a policy
    explicitly. Services needed by the steps are registered by overriding
    ``initialize_services`` or through ``config.services``.

    A builder is driven by one caller at a time. Every ``build`` replays the
    configuration held by the builder; passing a previous result extends it,
    with already fired steps skipped.

    ``close`` releases a log sink the builder created from ``config.logging``.
    """

    scenario_type: ClassVar[type[Scenario]]

    def __init__(
        self,
        *,
        services: ServiceRegistry | None = None,
        log_sink: LogSink | None = None,
        config: KernelConfig | None = None,
    ) -> None:
        self._composition: CompositionDescriptor = descriptor_for(self.scenario_type)
        self.scenario_type.projected_fields()
        self._config = config
        # A sink built from config belongs to the builder and is released by close().
        self._owned_sink: LogSink | None = None
        if log_sink is None and config is not None:
            log_sink = self._owned_sink = build_log_sink(config.logging)
        self._log_sink = log_sink
        self._given_services = services
        self._services: ServiceRegistry | None = None
        self._step_factory: StepFactory | None = None
        self._builder_factory: BuilderFactory | None = None
        self._configured: dict[str, StepBuilder[Any] | None] = {}
        self._cache: dict[str, Step] = {}
        self._policy = ExecutionPolicy.ALL

    @property
    def log_sink(self) -> LogSink | None:
        return self._log_sink

    def close(self) -> None:
        sink, self._owned_sink = self._owned_sink, None
        close = getattr(sink, "close", None)
        if close is not None:
            close()

    @property
    def services(self) -> ServiceRegistry:
        if self._services is None:
            registry = self._given_services if self._given_services is not None else ServiceRegistry()
            if self._config is not None:
                register_declared_services(registry, self._config.services)
            self._services = self.initialize_services(registry)
        return self._services

    @property
    def step_factory(self) -> StepFactory:
        if self._step_factory is None:
            self._step_factory = StepFactory(self.services)
        return self._step_factory

    @property
    def builder_factory(self) -> BuilderFactory:
        if self._builder_factory is None:
            self._builder_factory = BuilderFactory(self.step_factory)
        return self._builder_factory

    @property
    def composition(self) -> CompositionDescriptor:
        return self._composition

    @property
    def policy(self) -> ExecutionPolicy:
        return self._policy

    @property
    def configured(self) -> Mapping[str, StepBuilder[Any] | None]:
        return MappingProxyType(self._configured)

    def initialize_services(self, registry: ServiceRegistry) -> ServiceRegistry:
        # Hook for subclasses: bind whatever the scenario's steps need.
        return registry

    def only_configured_steps(self) -> Self:
        self._policy = ExecutionPolicy.CONFIGURED_ONLY
        return self

    def and_all_previous_steps(self) -> Self:
        self._policy = ExecutionPolicy.CONFIGURED_AND_PRECEDING
        return self

    def and_all_other_steps(self) -> Self:
        self._policy = ExecutionPolicy.ALL
        return self

    def configure_step(
        self,
        step_id: str,
        builder_type: type[B],
        configurator: Callable[[B], object] | None = None,
    ) -> Self:
        entry = self._composition.entry(step_id)
        require_builder_for(entry.step_type, builder_type, step_id)
        builder = self.builder_factory.create_builder(builder_type, step_id, entry.constructor_args)
        if configurator is not None:
            configurator(builder)
        self._configured[step_id] = builder
        self._cache.pop(step_id, None)
        self._policy = ExecutionPolicy.CONFIGURED_AND_PRECEDING
        return self

    def configure_step_defaults(self, step_id: str) -> Self:
        # Marks a step as configured without a builder; the id is not checked against the declaration.
        self._configured[step_id] = None
        self._cache.pop(step_id, None)
        self._policy = ExecutionPolicy.CONFIGURED_AND_PRECEDING
        return self

    def runnable_step_ids(self) -> list[str]:
        return select_runnable(self._composition.step_ids, self._policy, self._configured)

    async def build(self, scenario: TScenario | None = None) -> TScenario:
        if scenario is not None and scenario.context is None:
            raise InvalidStateError("The provided scenario does not have a context")
        if scenario is None:
            scenario = self.scenario_type()  # type: ignore[assignment]
        context = scenario.context
        if context is None:
            raise InvalidStateError(f"{type(scenario).__name__} was created without a context")
        if context.log_sink is None and self._log_sink is not None:
            context.log_sink = self._log_sink

        runnable = self.runnable_step_ids()
        context.emit_log(
            "INFO",
            "scenario.build.started",
            scenario=type(scenario).__name__,
            policy=self._policy.value,
            steps=runnable,
        )
        for step_id in runnable:
            await self._get_step(step_id).fire(context)

        projected = scenario.apply_variables(context.variables)
        context.emit_log(
            "INFO",
            "scenario.build.completed",
            scenario=type(scenario).__name__,
            history=list(context.history),
            projected=projected,
        )
        return scenario

    def _get_step(self, step_id: str) -> Step:
        cached = self._cache.get(step_id)
        if cached is not None:
            return cached

        builder = self._configured.get(step_id)
        if builder is not None:
            step = builder.build()
        else:
            entry = self._composition.entry(step_id)
            step = self.step_factory.create_step(entry.step_type, entry.step_id, entry.constructor_args)

        self._cache[step_id] = step
        return step
