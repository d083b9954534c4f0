# pyright: reportAny=false, reportExplicitAny=false
"""Raw configuration sources: TOML files and BLOBGIT_* variables.

Each source yields a plain nested dict shaped like the TOML file. The dicts
are layered with deep_merge before the result is validated into models.
"""

import json
import os
import tomllib
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from blobgit.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from pathlib import Path

ENV_PREFIX = "BLOBGIT_"
_NESTING = "__"


def read_toml_file(path: "Path") -> dict[str, Any]:
    """Parse one TOML configuration file.

    Raises:
        ConfigLoadError: If the file is missing or is not valid TOML. Parse
            errors carry the line and column tomllib reports.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        msg = f"Config file not found: {path}"
        raise ConfigLoadError(msg, path=path) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file {path}: {e}"
        raise ConfigLoadError(msg, path=path, line=e.lineno, column=e.colno) from e


def copy_value(value: Any) -> Any:  # noqa: ANN401
    """Copy nested dicts and lists so merged layers never share structure."""
    if isinstance(value, dict):
        return {k: copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [copy_value(v) for v in value]
    return value


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Layer `override` on top of `base` into a new dict.

    Tables merge key by key; any other value in `override` (lists included)
    replaces what `base` had. Neither argument is modified.
    """
    merged = copy_value(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy_value(value)
    return merged


def set_nested_key(data: dict[str, Any], dotted: str, value: Any) -> None:  # noqa: ANN401
    """Assign `value` at a dotted path, replacing non-table intermediates.

    Example:
        >>> data = {}
        >>> set_nested_key(data, "storage.s3.region", "eu-west-1")
        >>> data
        {'storage': {'s3': {'region': 'eu-west-1'}}}
    """
    *tables, leaf = dotted.split(".")
    node = data
    for table in tables:
        child = node.get(table)
        if not isinstance(child, dict):
            child = node[table] = {}
        node = child
    node[leaf] = value


def parse_string_value(value: str) -> Any:  # noqa: ANN401
    """Infer a typed value from an environment string.

    "true"/"false" become bools, integral and decimal literals become numbers,
    bracketed or braced JSON becomes a list or dict; anything else stays str.

    Examples:
        >>> parse_string_value("5")
        5
        >>> parse_string_value("us-east-1")
        'us-east-1'
    """
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"

    for number in (int, float):
        try:
            return number(value)
        except ValueError:
            continue

    if value[:1] + value[-1:] in {"[]", "{}"}:
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    return value


def parse_env_vars(
    prefix: str = ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Collect configuration keys from environment variables.

    `BLOBGIT_STORAGE__S3__REGION=eu-west-1` sets `storage.s3.region`. Names
    without the `__` separator (BLOBGIT_DEBUG, BLOBGIT_CONFIG) are process
    switches and are skipped.

    Args:
        prefix: Variable name prefix.
        environ: Variables to read. Defaults to os.environ.
    """
    source = os.environ if environ is None else environ
    result: dict[str, Any] = {}
    for name, raw in source.items():
        if not name.startswith(prefix):
            continue
        key = name.removeprefix(prefix)
        if _NESTING not in key:
            continue
        set_nested_key(result, key.replace(_NESTING, ".").lower(), parse_string_value(raw))
    return result
