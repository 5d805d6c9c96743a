"""Configuration management for the GhostScore sync."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_dict
from .models import (
    AdvancedConfig,
    AppConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    SyncConfig,
    TablesConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "validate_config_dict",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "TablesConfig",
    "SyncConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
