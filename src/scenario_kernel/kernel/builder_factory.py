from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from scenario_kernel.kernel.errors import ConfigurationError
from scenario_kernel.kernel.resolution import CONSTRUCTOR_ARGS, STEP_ID, ResolutionScope, ServiceLookup
from scenario_kernel.kernel.step_builder import StepBuilder
from scenario_kernel.kernel.step_factory import StepFactory

B = TypeVar("B", bound=StepBuilder[Any])

BuilderConstructor = Callable[[ResolutionScope], StepBuilder[Any]]


class BuilderFactory:
    # Creates step builders now so they can be configured before any step exists.
    def __init__(self, step_factory: StepFactory, services: ServiceLookup | None = None) -> None:
        self._step_factory = step_factory
        self._services = services if services is not None else step_factory.services
        self._constructors: dict[type, BuilderConstructor] = {}

    @property
    def step_factory(self) -> StepFactory:
        return self._step_factory

    def register(self, builder_type: type[StepBuilder[Any]], constructor: BuilderConstructor) -> None:
        _require_builder_kind(builder_type)
        self._constructors[builder_type] = constructor

    def create_builder(
        self,
        builder_type: type[B],
        step_id: str,
        constructor_args: Sequence[object] | None = None,
    ) -> B:
        if not isinstance(step_id, str) or not step_id:
            raise ValueError("step_id cannot be empty")
        _require_builder_kind(builder_type)
        args = None if constructor_args is None else tuple(constructor_args)
        scope = ResolutionScope(
            owner=builder_type,
            step_id=step_id,
            well_known={
                BuilderFactory: self,
                type(self): self,
                StepFactory: self._step_factory,
                type(self._step_factory): self._step_factory,
            },
            named={STEP_ID: step_id, CONSTRUCTOR_ARGS: args},
            services=self._services,
        )
        constructor = self._constructors.get(builder_type)
        if constructor is None:
            builder = builder_type(*scope.resolve(builder_type.parameters))
        else:
            builder = constructor(scope)
        if not isinstance(builder, builder_type):
            raise ConfigurationError(
                f"Constructor registered for {builder_type.__name__} returned {type(builder).__name__}"
            )
        return builder


def _require_builder_kind(kind: object) -> None:
    if not isinstance(kind, type) or not issubclass(kind, StepBuilder):
        raise ConfigurationError(f"{kind!r} is not a subclass of StepBuilder")
