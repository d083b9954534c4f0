# pyright: reportExplicitAny=false
"""Exit codes and output helpers shared by the blobgit commands."""

from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING, Any, Final, Never

import orjson
from rich.console import Console
from rich.markup import escape

from blobgit.exceptions import RepositorySyncError, SyncErrorKind

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "ExitCode",
    "OutputFormat",
    "exit_code_for",
    "exit_with_error",
    "exit_with_sync_error",
    "format_json",
    "print_json",
]


class ExitCode(IntEnum):
    """Process exit codes of the blobgit CLI."""

    SUCCESS = 0
    LOAD_ERROR = 1
    VALIDATION_ERROR = 2
    NOTHING_TO_COMMIT = 3
    IO_ERROR = 4
    INTERNAL_ERROR = 5


class OutputFormat(StrEnum):
    """Output formats of the read commands."""

    TEXT = "text"
    JSON = "json"


_EXIT_CODES: Final[dict[SyncErrorKind, ExitCode]] = {
    SyncErrorKind.VALIDATION: ExitCode.VALIDATION_ERROR,
    SyncErrorKind.NOTHING_TO_COMMIT: ExitCode.NOTHING_TO_COMMIT,
    SyncErrorKind.NOT_INITIALIZED: ExitCode.IO_ERROR,
    SyncErrorKind.DOWNLOAD: ExitCode.IO_ERROR,
    SyncErrorKind.UPLOAD: ExitCode.IO_ERROR,
    SyncErrorKind.VERSION_CONTROL: ExitCode.INTERNAL_ERROR,
}


def exit_code_for(kind: SyncErrorKind) -> ExitCode:
    return _EXIT_CODES.get(kind, ExitCode.INTERNAL_ERROR)


def format_json(data: "Mapping[str, Any]", *, indent: bool = True) -> str:
    """Serialize command output with orjson, indented by default."""
    return orjson.dumps(data, option=orjson.OPT_INDENT_2 if indent else 0).decode()


def print_json(console: Console, data: "Mapping[str, Any]") -> None:
    """Write JSON to the console without markup, highlighting, or wrapping."""
    console.out(format_json(data), highlight=False)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Print `Error: <message>` and exit.

    Args:
        message: Error text. Printed without markup interpretation.
        code: Process exit code.
        console: Where to print. Defaults to a stderr console.

    Raises:
        SystemExit: Always, with `code`.
    """
    target = console if console is not None else Console(stderr=True)
    target.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    raise SystemExit(code)


def exit_with_sync_error(
    error: RepositorySyncError, *, console: Console, error_console: Console
) -> Never:
    """Exit with the code for a failed repository operation.

    Nothing-to-commit is an expected outcome, so it is reported on the
    regular console rather than as an error.
    """
    if error.nothing_to_commit:
        console.print("[dim]Nothing to commit[/dim]")
        raise SystemExit(ExitCode.NOTHING_TO_COMMIT)
    exit_with_error(str(error), exit_code_for(error.kind), console=error_console)
