from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Any, ClassVar, Self, TypeVar

from scenario_kernel.kernel.builder_factory import BuilderFactory
from scenario_kernel.kernel.composition import CompositionDescriptor, child_step_id, descriptor_for
from scenario_kernel.kernel.context import ScenarioContext
from scenario_kernel.kernel.execution import ExecutionPolicy, select_runnable
from scenario_kernel.kernel.resolution import STEP_ID, Param
from scenario_kernel.kernel.step import Step
from scenario_kernel.kernel.step_builder import StepBuilder, require_builder_for
from scenario_kernel.kernel.step_factory import StepFactory

C = TypeVar("C", bound="CompositeStep")
B = TypeVar("B", bound=StepBuilder[Any])


class CompositeStep(Step):
    """A step whose body fires its declared children.

    Children come from the ``@compose_using`` declarations on the concrete
    class. Which of them run is decided by the execution policy and the set of
    explicitly configured child ids. Each child instance is created once per
    composite instance; child ids are prefixed with this step's id.
    """

    parameters: ClassVar[tuple[Param, ...]] = (Param("step_factory", StepFactory), STEP_ID)

    def __init__(self, step_factory: StepFactory, step_id: str) -> None:
        super().__init__(step_id)
        if step_factory is None:
            raise ValueError("step_factory is required")
        self._step_factory = step_factory
        self._composition: CompositionDescriptor = descriptor_for(type(self))
        self._configured: dict[str, StepBuilder[Any] | None] = {}
        self._cache: dict[str, Step] = {}
        self._policy = ExecutionPolicy.ALL

    @property
    def composition(self) -> CompositionDescriptor:
        return self._composition

    @property
    def policy(self) -> ExecutionPolicy:
        return self._policy

    @property
    def configured(self) -> Mapping[str, StepBuilder[Any] | None]:
        return MappingProxyType(self._configured)

    def set_policy(self, policy: ExecutionPolicy) -> None:
        self._policy = policy

    def configure_step(self, step_id: str, builder: StepBuilder[Any] | None = None) -> None:
        # A None builder marks the child as configured while keeping its default construction.
        self._configured[step_id] = builder
        self._cache.pop(step_id, None)

    def runnable_step_ids(self) -> list[str]:
        return select_runnable(self._composition.step_ids, self._policy, self._configured)

    def get_step(self, step_id: str) -> Step:
        cached = self._cache.get(step_id)
        if cached is not None:
            return cached

        builder = self._configured.get(step_id)
        if builder is not None:
            step = builder.build()
        else:
            entry = self._composition.entry(step_id)
            step = self._step_factory.create_step(
                entry.step_type,
                child_step_id(self.step_id, entry.step_id),
                entry.constructor_args,
            )

        self._cache[step_id] = step
        return step

    async def execute(self, context: ScenarioContext) -> None:
        for step_id in self.runnable_step_ids():
            await self.get_step(step_id).fire(context)

    async def fire(self, context: ScenarioContext) -> None:
        # Composites always re-run their body and are never recorded; their children are.
        await self.execute(context)


class CompositeStepBuilder(StepBuilder[C]):
    # Builder for composite steps: collects child builders and the execution policy.
    parameters: ClassVar[tuple[Param, ...]] = (
        Param("builder_factory", BuilderFactory),
        Param("step_factory", StepFactory),
        STEP_ID,
    )

    def __init__(
        self,
        builder_factory: BuilderFactory,
        step_factory: StepFactory,
        step_id: str,
        constructor_args: Sequence[object] | None = None,
    ) -> None:
        super().__init__(step_factory, step_id, constructor_args)
        if builder_factory is None:
            raise ValueError("builder_factory is required")
        self._builder_factory = builder_factory
        self._composition = descriptor_for(self.step_type)
        self._configured: dict[str, StepBuilder[Any] | None] = {}
        self._policy = ExecutionPolicy.ALL

    @property
    def policy(self) -> ExecutionPolicy:
        return self._policy

    @property
    def configured(self) -> Mapping[str, StepBuilder[Any] | None]:
        return MappingProxyType(self._configured)

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
        builder = self._builder_factory.create_builder(
            builder_type,
            child_step_id(self.step_id, step_id),
            entry.constructor_args,
        )
        if configurator is not None:
            configurator(builder)
        self._configured[step_id] = builder
        self._policy = ExecutionPolicy.CONFIGURED_ONLY
        return self

    def configure_step_defaults(self, step_id: str) -> Self:
        self._configured[step_id] = None
        self._policy = ExecutionPolicy.CONFIGURED_ONLY
        return self

    def build(self) -> C:
        composite = self._step_factory.create_composite_step(
            self.step_type,
            self.step_id,
            self._configured,
            self._policy,
        )
        self.apply_overrides(composite)
        return composite  # type: ignore[return-value]

