# pyright: reportAny=false
"""Configuration loading entry point."""

import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from blobgit.config._defaults import DEFAULT_CONFIG
from blobgit.config._loader import deep_merge, parse_env_vars, read_toml_file
from blobgit.config._models import Config
from blobgit.exceptions import ConfigError

CONFIG_PATH_ENV = "BLOBGIT_CONFIG"


def load_config(
    config_path: Path | None = None,
    *,
    environ: dict[str, str] | None = None,
    overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> Config:
    """Load configuration from defaults, a TOML file, and the environment.

    Precedence, lowest to highest: built-in defaults, the TOML file
    (`config_path`, else the BLOBGIT_CONFIG variable), BLOBGIT_* variables,
    then `overrides`.

    Args:
        config_path: Explicit TOML file to read.
        environ: Mapping to read instead of os.environ.
        overrides: Highest-precedence values, nested like the TOML file.

    Returns:
        The validated Config.

    Raises:
        ConfigLoadError: If the TOML file is missing or malformed.
        ConfigError: If the merged values fail validation.
    """
    env = dict(os.environ) if environ is None else environ

    data = deep_merge({}, DEFAULT_CONFIG)

    if config_path is None and env.get(CONFIG_PATH_ENV):
        config_path = Path(env[CONFIG_PATH_ENV])
    if config_path is not None:
        data = deep_merge(data, read_toml_file(config_path))

    data = deep_merge(data, parse_env_vars(environ=env))
    if overrides:
        data = deep_merge(data, overrides)

    try:
        return Config.model_validate(data)
    except PydanticValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigError(msg) from e
