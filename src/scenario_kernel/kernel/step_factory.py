from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from scenario_kernel.kernel.errors import ConfigurationError
from scenario_kernel.kernel.execution import ExecutionPolicy
from scenario_kernel.kernel.resolution import STEP_ID, ResolutionScope, ServiceLookup
from scenario_kernel.kernel.step import Step

if TYPE_CHECKING:
    from scenario_kernel.kernel.composite import CompositeStep
    from scenario_kernel.kernel.step_builder import StepBuilder

S = TypeVar("S", bound=Step)
C = TypeVar("C", bound="CompositeStep")

# Constructors receive the resolution scope and return a ready step instance.
StepConstructor = Callable[[ResolutionScope], Step]


class StepFactory:
    # Creates steps from their declared parameters; explicit table entries win over declarations.
    def __init__(self, services: ServiceLookup | None = None) -> None:
        self._services = services
        self._constructors: dict[type, StepConstructor] = {}

    @property
    def services(self) -> ServiceLookup | None:
        return self._services

    def register(self, kind: type[Step], constructor: StepConstructor) -> None:
        # Later registrations replace earlier ones.
        _require_step_kind(kind)
        self._constructors[kind] = constructor

    def create_step(self, kind: type[S], step_id: str, constructor_args: Sequence[object] | None = None) -> S:
        scope = self._scope(kind, step_id, constructor_args)
        return self._construct(kind, scope)

    def create_composite_step(
        self,
        kind: type[C],
        step_id: str,
        configured: Mapping[str, StepBuilder[Any] | None],
        policy: ExecutionPolicy,
    ) -> C:
        # Construct first, then replay policy and per-child configuration onto the instance.
        from scenario_kernel.kernel.composite import CompositeStep

        if not isinstance(kind, type) or not issubclass(kind, CompositeStep):
            raise ConfigurationError(f"{kind!r} is not a subclass of CompositeStep")
        configured = dict(configured)
        scope = self._scope(kind, step_id, None, extras=(configured, policy))
        composite = self._construct(kind, scope)
        composite.set_policy(policy)
        for child_id, builder in configured.items():
            composite.configure_step(child_id, builder)
        return composite

    def _scope(
        self,
        kind: type[Step],
        step_id: str,
        constructor_args: Sequence[object] | None,
        *,
        extras: tuple[object, ...] = (),
    ) -> ResolutionScope:
        _require_step_kind(kind)
        return ResolutionScope(
            owner=kind,
            step_id=step_id,
            explicit_args=tuple(constructor_args or ()),
            well_known={StepFactory: self, type(self): self},
            named={STEP_ID: step_id},
            services=self._services,
            extras=extras,
        )

    def _construct(self, kind: type[S], scope: ResolutionScope) -> S:
        constructor = self._constructors.get(kind)
        if constructor is None:
            step = kind(*scope.resolve(kind.parameters))
        else:
            step = constructor(scope)
        if not isinstance(step, kind):
            raise ConfigurationError(
                f"Constructor registered for {kind.__name__} returned {type(step).__name__}"
            )
        return step


def _require_step_kind(kind: object) -> None:
    if not isinstance(kind, type) or not issubclass(kind, Step):
        raise ConfigurationError(f"{kind!r} is not a subclass of Step")
