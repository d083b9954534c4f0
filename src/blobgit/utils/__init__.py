"""Shared utilities for blobgit."""

from blobgit.utils._git import branch_from_ref, decode_bytes
from blobgit.utils._logging import LogFormatType, create_logger, create_null_logger

__all__ = [
    "LogFormatType",
    "branch_from_ref",
    "create_logger",
    "create_null_logger",
    "decode_bytes",
]
