from .loader import load_kernel_config, load_yaml_config
from .models import KernelConfig, LoggingConfig, ServiceDecl
from .validator import ConfigError, validate_kernel_config

__all__ = [
    "ConfigError",
    "KernelConfig",
    "LoggingConfig",
    "ServiceDecl",
    "load_kernel_config",
    "load_yaml_config",
    "validate_kernel_config",
]
