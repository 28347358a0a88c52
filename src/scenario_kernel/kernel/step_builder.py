from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, ClassVar, Generic, Self, TypeVar

from scenario_kernel.kernel.errors import ConfigurationError
from scenario_kernel.kernel.resolution import CONSTRUCTOR_ARGS, STEP_ID, Param
from scenario_kernel.kernel.step import Step
from scenario_kernel.kernel.step_factory import StepFactory

S = TypeVar("S", bound=Step)


class StepBuilder(Generic[S]):
    """Deferred, fluent configuration for a single step.

    Subclasses set ``step_type`` and expose ``with_*`` style methods that call
    ``_override``. ``build`` constructs a fresh step through the factory and
    copies only the explicitly overridden fields onto it, so everything else
    keeps the step's own defaults. Override ``apply_overrides`` when a builder
    field does not map one-to-one onto a step attribute.
    """

    step_type: ClassVar[type[Step]]
    parameters: ClassVar[tuple[Param, ...]] = (
        Param("step_factory", StepFactory),
        STEP_ID,
        CONSTRUCTOR_ARGS,
    )

    def __init__(
        self,
        step_factory: StepFactory,
        step_id: str,
        constructor_args: Sequence[object] | None = None,
    ) -> None:
        if not isinstance(step_id, str) or not step_id:
            raise ValueError("step_id must be a non-empty string")
        self._step_factory = step_factory
        self._step_id = step_id
        self._constructor_args = None if constructor_args is None else tuple(constructor_args)
        self._overrides: dict[str, object] = {}

    @property
    def step_id(self) -> str:
        return self._step_id

    @property
    def constructor_args(self) -> tuple[object, ...] | None:
        return self._constructor_args

    @property
    def overrides(self) -> Mapping[str, object]:
        return MappingProxyType(self._overrides)

    def _override(self, field_name: str, value: object) -> Self:
        self._overrides[field_name] = value
        return self

    def build(self) -> S:
        step = self._step_factory.create_step(self.step_type, self._step_id, self._constructor_args)
        self.apply_overrides(step)  # type: ignore[arg-type]
        return step  # type: ignore[return-value]

    def apply_overrides(self, step: S) -> None:
        for name, value in self._overrides.items():
            if not hasattr(step, name):
                raise ConfigurationError(
                    f"{type(self).__name__} overrides '{name}' but {type(step).__name__} has no such field"
                )
            setattr(step, name, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(step_id={self._step_id!r}, overrides={sorted(self._overrides)})"


def require_builder_for(declared: type[Step], builder_type: type[StepBuilder[Any]], step_id: str) -> None:
    # A configured builder must build the kind declared for that step id (or a subclass of it).
    built = getattr(builder_type, "step_type", None)
    if not isinstance(built, type) or not issubclass(built, declared):
        raise ConfigurationError(
            f"{getattr(builder_type, '__name__', builder_type)} does not build {declared.__name__} "
            f"declared for step '{step_id}'"
        )
