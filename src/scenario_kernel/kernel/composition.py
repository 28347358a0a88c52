from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from scenario_kernel.kernel.errors import ConfigurationError, DeclarationError
from scenario_kernel.kernel.step import Step

T = TypeVar("T")

ID_SEPARATOR = "_"
_ENTRIES_ATTR = "__compose_using__"


@dataclass(frozen=True, slots=True)
class ComposeUsing:
    # One declared child of a composite step or scenario.
    order: int
    step_id: str
    step_type: type[Step]
    constructor_args: tuple[object, ...] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.order, int) or isinstance(self.order, bool):
            raise DeclarationError(f"order for '{self.step_id}' must be an integer")
        if not isinstance(self.step_id, str) or not self.step_id:
            raise DeclarationError("step_id must be a non-empty string")
        if not isinstance(self.step_type, type) or not issubclass(self.step_type, Step):
            raise DeclarationError(f"step_type for '{self.step_id}' must be a subclass of Step")
        if self.constructor_args is not None and not isinstance(self.constructor_args, tuple):
            object.__setattr__(self, "constructor_args", tuple(self.constructor_args))


@dataclass(frozen=True, slots=True)
class CompositionDescriptor:
    # Validated, order-sorted declaration for one type; shared read-only by all its instances.
    owner: type
    entries: tuple[ComposeUsing, ...]
    _by_id: dict[str, ComposeUsing] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        duplicate_orders = sorted(order for order, count in Counter(e.order for e in self.entries).items() if count > 1)
        if duplicate_orders:
            raise DeclarationError(
                f"Multiple steps of {self.owner.__name__} have the same order: "
                f"{', '.join(str(order) for order in duplicate_orders)}"
            )
        duplicate_ids = sorted(step_id for step_id, count in Counter(e.step_id for e in self.entries).items() if count > 1)
        if duplicate_ids:
            raise DeclarationError(f"Duplicate step ids declared on {self.owner.__name__}: {duplicate_ids}")
        ordered = tuple(sorted(self.entries, key=lambda e: e.order))
        object.__setattr__(self, "entries", ordered)
        object.__setattr__(self, "_by_id", {e.step_id: e for e in ordered})

    @property
    def step_ids(self) -> tuple[str, ...]:
        return tuple(e.step_id for e in self.entries)

    def entry(self, step_id: str) -> ComposeUsing:
        try:
            return self._by_id[step_id]
        except KeyError:
            raise ConfigurationError(
                f"{self.owner.__name__} is not composed of a step with id '{step_id}'"
            ) from None

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._by_id

    def __len__(self) -> int:
        return len(self.entries)


class CompositionRegistry:
    # One descriptor per type, validated on first use and cached for the type's lifetime.
    def __init__(self) -> None:
        self._descriptors: dict[type, CompositionDescriptor] = {}
        self._lock = threading.Lock()

    def register(self, owner: type, entries: Iterable[ComposeUsing]) -> CompositionDescriptor:
        # Explicit registration for types that do not use the decorator.
        with self._lock:
            if owner in self._descriptors:
                raise DeclarationError(f"Composition for {owner.__name__} is already registered")
            descriptor = CompositionDescriptor(owner=owner, entries=tuple(entries))
            self._descriptors[owner] = descriptor
            return descriptor

    def descriptor_for(self, owner: type) -> CompositionDescriptor:
        cached = self._descriptors.get(owner)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._descriptors.get(owner)
            if cached is None:
                # Declarations are per class; a subclass does not inherit its parent's children.
                declared = owner.__dict__.get(_ENTRIES_ATTR, ())
                cached = CompositionDescriptor(owner=owner, entries=tuple(declared))
                self._descriptors[owner] = cached
            return cached

    def __contains__(self, owner: object) -> bool:
        return owner in self._descriptors


_default_registry = CompositionRegistry()


def compose_using(
    order: int,
    step_id: str,
    step_type: type[Step],
    constructor_args: Sequence[object] | None = None,
) -> Callable[[T], T]:
    # Class decorator; stack one per child. Validation of the whole set happens on first use.
    entry = ComposeUsing(
        order=order,
        step_id=step_id,
        step_type=step_type,
        constructor_args=None if constructor_args is None else tuple(constructor_args),
    )

    def _decorate(target: T) -> T:
        existing = getattr(target, "__dict__", {}).get(_ENTRIES_ATTR, ())
        setattr(target, _ENTRIES_ATTR, (*existing, entry))
        return target

    return _decorate


def descriptor_for(owner: type) -> CompositionDescriptor:
    return _default_registry.descriptor_for(owner)


def register_composition(owner: type, entries: Iterable[ComposeUsing]) -> CompositionDescriptor:
    return _default_registry.register(owner, entries)


def child_step_id(parent_id: str, child_id: str) -> str:
    # Derived ids keep nested steps unique in a shared history.
    return f"{parent_id}{ID_SEPARATOR}{child_id}"
