"""Constructor argument resolution shared by the step and builder factories.

Every step or builder kind declares its constructor as an ordered tuple of
``Param`` entries. A ``ResolutionScope`` walks that tuple and picks a value for
each slot using a fixed precedence:

1. an explicit positional argument at the same index,
2. a well-known value keyed by the parameter kind (the factories themselves),
3. a named slot (the step id, the pass-through constructor args),
4. a service from the registry,
5. a contextual extra that is an instance of the parameter kind.

Anything left over raises ``UnresolvedParameterError``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from scenario_kernel.kernel.errors import ConfigurationError, UnresolvedParameterError


@dataclass(frozen=True, slots=True)
class Param:
    # One declared constructor parameter: a name plus the type token used for lookup.
    name: str
    kind: Any

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Param.name must be a non-empty string")


STEP_ID = Param("step_id", str)
CONSTRUCTOR_ARGS = Param("constructor_args", tuple)


class ServiceLookup(Protocol):
    def lookup(self, contract: Any) -> object | None:
        raise NotImplementedError("ServiceLookup protocol has no implementation")


_MISSING = object()


@dataclass(frozen=True, slots=True)
class ResolutionScope:
    # Values available while constructing one step or builder.
    owner: type
    step_id: str
    explicit_args: tuple[object, ...] = ()
    well_known: Mapping[Any, object] = field(default_factory=dict)
    named: Mapping[Param, object] = field(default_factory=dict)
    services: ServiceLookup | None = None
    extras: tuple[object, ...] = ()

    def resolve(self, params: Sequence[Param]) -> list[object]:
        if len(self.explicit_args) > len(params):
            raise ConfigurationError(
                f"There are {len(params)} constructor parameters for {self.owner.__name__} "
                f"but {len(self.explicit_args)} explicit arguments were declared"
            )
        return [self._resolve_one(index, param) for index, param in enumerate(params)]

    def service(self, contract: Any) -> object:
        resolved = self._lookup_service(contract)
        if resolved is _MISSING:
            raise UnresolvedParameterError(getattr(contract, "__name__", repr(contract)), contract, self.owner)
        return resolved

    def _resolve_one(self, index: int, param: Param) -> object:
        if index < len(self.explicit_args):
            return self.explicit_args[index]

        known = self._well_known(param.kind)
        if known is not _MISSING:
            return known

        if param in self.named:
            return self.named[param]

        resolved = self._lookup_service(param.kind)
        if resolved is not _MISSING:
            return resolved

        for extra in self.extras:
            if isinstance(param.kind, type) and isinstance(extra, param.kind):
                return extra

        raise UnresolvedParameterError(param.name, param.kind, self.owner)

    def _well_known(self, kind: Any) -> object:
        try:
            return self.well_known.get(kind, _MISSING)
        except TypeError:
            return _MISSING

    def _lookup_service(self, contract: Any) -> object:
        if self.services is None:
            return _MISSING
        resolved = self.services.lookup(contract)
        return _MISSING if resolved is None else resolved
