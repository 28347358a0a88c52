from __future__ import annotations

import importlib
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from scenario_kernel.config.models import ServiceDecl


class ServiceRegistryError(RuntimeError):
    # Raised when bindings are missing, duplicated or cannot be imported.
    pass


Factory = Callable[[], object]


@dataclass(frozen=True, slots=True)
class _Binding:
    factory: Factory
    singleton: bool = True


@dataclass(slots=True)
class ServiceRegistry:
    # Registry of services keyed by contract type; the lookup side is what step factories consume.
    _bindings: dict[type[Any], _Binding] = field(default_factory=dict)
    _instances: dict[type[Any], object] = field(default_factory=dict)

    def register_instance(self, contract: type[Any], instance: object) -> None:
        self._ensure_unbound(contract)
        self._bindings[contract] = _Binding(factory=lambda: instance)
        self._instances[contract] = instance

    def register_factory(self, contract: type[Any], factory: Factory, *, singleton: bool = True) -> None:
        self._ensure_unbound(contract)
        self._bindings[contract] = _Binding(factory=factory, singleton=singleton)

    def register_service(self, instance: object) -> list[type[Any]]:
        # Bind by concrete class and by every base contract that is still free.
        concrete = type(instance)
        self.register_instance(concrete, instance)
        bound = [concrete]
        for contract in service_contract_types(concrete)[1:]:
            if contract in self._bindings:
                continue
            self.register_instance(contract, instance)
            bound.append(contract)
        return bound

    def lookup(self, contract: type[Any]) -> object | None:
        try:
            binding = self._bindings.get(contract)
        except TypeError:
            # Unhashable type tokens (e.g. some typing constructs) are never bound.
            return None
        if binding is None:
            return None
        if not binding.singleton:
            return binding.factory()
        if contract not in self._instances:
            self._instances[contract] = binding.factory()
        return self._instances[contract]

    def require(self, contract: type[Any]) -> object:
        resolved = self.lookup(contract)
        if resolved is None:
            raise ServiceRegistryError(f"Missing binding for service<{_name(contract)}>")
        return resolved

    def __contains__(self, contract: object) -> bool:
        return contract in self._bindings

    def _ensure_unbound(self, contract: type[Any]) -> None:
        if not isinstance(contract, type):
            raise ServiceRegistryError(f"service contract must be a class, got {contract!r}")
        if contract in self._bindings:
            raise ServiceRegistryError(f"Duplicate binding for service<{_name(contract)}>")


def service_contract_types(service_cls: type[object]) -> list[type[object]]:
    # Concrete class first, then its public base contracts.
    contracts: list[type[object]] = [service_cls]
    for base in service_cls.__mro__[1:]:
        if base is object:
            continue
        contracts.append(base)
    return contracts


def register_declared_services(registry: ServiceRegistry, declarations: Iterable[ServiceDecl]) -> None:
    # Bind services declared in config; factories are called lazily with their settings.
    for decl in declarations:
        contract = _import_reference(decl.contract)
        if not isinstance(contract, type):
            raise ServiceRegistryError(f"Service contract '{decl.contract}' is not a class")
        factory = _import_reference(decl.factory)
        if not callable(factory):
            raise ServiceRegistryError(f"Service factory '{decl.factory}' is not callable")
        settings = dict(decl.settings)
        registry.register_factory(contract, lambda _f=factory, _s=settings: _f(**_s))


def _import_reference(reference: str) -> object:
    module_name, _, attr = reference.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ServiceRegistryError(f"Failed to import module: {module_name}") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ServiceRegistryError(f"Module {module_name} has no attribute '{attr}'") from exc


def _name(contract: object) -> str:
    return getattr(contract, "__name__", repr(contract))
