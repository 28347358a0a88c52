from .service_registry import (
    ServiceRegistry,
    ServiceRegistryError,
    register_declared_services,
    service_contract_types,
)

__all__ = [
    "ServiceRegistry",
    "ServiceRegistryError",
    "register_declared_services",
    "service_contract_types",
]
