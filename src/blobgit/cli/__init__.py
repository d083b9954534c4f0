"""The blobgit command-line interface."""

from ._app import create_app, main
from ._context import CLIContext
from ._shared import ExitCode, OutputFormat

__all__ = ["CLIContext", "ExitCode", "OutputFormat", "create_app", "main"]
