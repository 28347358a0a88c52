from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType, UnionType
from typing import Any, TypeVar, Union, get_args, get_origin

from scenario_kernel.kernel.errors import MissingVariableError, TypeMismatchError
from scenario_kernel.observability.adapters.logging import LogSink
from scenario_kernel.observability.domain.logging import LogMessage

T = TypeVar("T")


@dataclass(slots=True)
class ScenarioContext:
    # Per-build state: named variables written by steps plus the ordered record of fired steps.
    log_sink: LogSink | None = None
    _variables: dict[str, object] = field(default_factory=dict, init=False, repr=False)
    _history: list[str] = field(default_factory=list, init=False)
    _fired: set[str] = field(default_factory=set, init=False, repr=False)

    def set(self, name: str, value: object) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError("ScenarioContext.set name must be a non-empty string")
        self._variables[name] = value

    def get(self, name: str, expected: type[T] = object) -> T:  # type: ignore[assignment]
        if name not in self._variables:
            raise MissingVariableError(name)
        value = self._variables[name]
        # None is a legitimate stored value for any expected type.
        if value is None or _matches(value, expected):
            return value  # type: ignore[return-value]
        raise TypeMismatchError(name, type(value), expected)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    @property
    def variables(self) -> Mapping[str, object]:
        return MappingProxyType(self._variables)

    @property
    def history(self) -> tuple[str, ...]:
        return tuple(self._history)

    def has_fired(self, step_id: str) -> bool:
        return step_id in self._fired

    def record_fired(self, step_id: str) -> None:
        # History is append-only; a step id appears at most once.
        if step_id in self._fired:
            return
        self._fired.add(step_id)
        self._history.append(step_id)

    def emit_log(self, level: str, message: str, **fields: Any) -> None:
        if self.log_sink is None:
            return
        self.log_sink.emit(LogMessage(level=level, message=message, fields=dict(fields)))


def _matches(value: object, expected: Any) -> bool:
    # isinstance for classes and unions; parameterized generics are checked by their origin only.
    if expected is Any:
        return True
    try:
        return isinstance(value, expected)
    except TypeError:
        pass
    origin = get_origin(expected)
    if origin is Union or origin is UnionType:
        return any(_matches(value, arg) for arg in get_args(expected))
    if isinstance(origin, type):
        return isinstance(value, origin)
    return False
