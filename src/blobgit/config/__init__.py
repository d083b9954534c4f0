"""blobgit configuration.

This module provides the public API for configuration management: layered
loading from defaults, TOML, and environment variables into typed, frozen
models.

Example:
    >>> from blobgit.config import load_config
    >>> config = load_config()
    >>> config.storage.backend
    <StorageBackend.MEMORY: 'memory'>
"""

from blobgit.exceptions import ConfigError, ConfigLoadError

from ._defaults import DEFAULT_CONFIG
from ._load import CONFIG_PATH_ENV, load_config
from ._loader import deep_merge, parse_env_vars, parse_string_value, read_toml_file
from ._models import (
    Config,
    LogFormat,
    LoggingConfig,
    LogLevel,
    RepositoryConfig,
    S3Config,
    StorageBackend,
    StorageConfig,
    WorkspaceConfig,
)

__all__ = [
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "RepositoryConfig",
    "S3Config",
    "StorageBackend",
    "StorageConfig",
    "WorkspaceConfig",
    "deep_merge",
    "load_config",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
]
