"""Default configuration values.

This module defines the built-in default configuration values that are used
when no other configuration sources provide values.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "storage": {
        "backend": "memory",
        "root": "",
        "s3": {
            "region": "",
            "endpoint_url": "",
            "request_timeout_s": 30.0,
            "max_attempts": 5,
        },
    },
    "workspace": {
        "root": "",
        "prefix": "git-",
    },
    "repository": {
        "history_limit": 50,
        "initial_commit_message": "Initial commit",
    },
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
}
