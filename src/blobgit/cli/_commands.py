# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
# ruff: noqa: D415, TC003  # Path needed at runtime for cyclopts parameter parsing
"""Repository commands: init, commit, log, branch."""

from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Annotated

from cyclopts import Parameter

from blobgit.exceptions import RepositorySyncError
from blobgit.repository import Author, BranchInfo, CommitRecord, RepositoryHandle

from ._context import CLIContext
from ._shared import ExitCode, OutputFormat, exit_with_error, exit_with_sync_error, print_json

if TYPE_CHECKING:
    from cyclopts import App

__all__ = ["register_commands"]


def _read_change_set(ctx: CLIContext, root: Path, files: tuple[str, ...]) -> dict[str, bytes]:
    """Read local files into a change set keyed by their path under root."""
    changes: dict[str, bytes] = {}
    for name in files:
        local = root / name
        try:
            changes[PurePath(name).as_posix()] = local.read_bytes()
        except OSError as e:
            exit_with_error(
                f"Failed to read {local}: {e.strerror or e}",
                ExitCode.IO_ERROR,
                console=ctx.error_console,
            )
    return changes


def _print_commit(ctx: CLIContext, commit: CommitRecord) -> None:
    ctx.console.print(
        f"[yellow]{commit.sha[:8]}[/yellow] {commit.message}", highlight=False
    )
    ctx.console.print(
        f"  [dim]{commit.author.name} <{commit.author.email}> "
        f"{commit.date.isoformat()}[/dim]",
        highlight=False,
    )
    for path in commit.files:
        ctx.console.print(f"    {path}", markup=False, highlight=False)


def _init(
    path: Annotated[str, Parameter(help="Object storage path, e.g. /bucket/apps/a1")],
    *,
    app_id: Annotated[str, Parameter(name="--app-id", help="Application identifier")],
    name: Annotated[str, Parameter(name="--name", help="Author name")],
    email: Annotated[str, Parameter(name="--email", help="Author email")],
) -> None:
    """Create a repository with a starter commit

    Args:
        path: Object storage path of the new repository.
        app_id: Application identifier written into README.md.
        name: Author and committer name.
        email: Author and committer email.
    """
    ctx = CLIContext.get_current()
    handle = RepositoryHandle(app_id=app_id, object_storage_path=path)

    try:
        sha = ctx.service().initialize_repository(handle, Author(name, email))
    except RepositorySyncError as e:
        exit_with_sync_error(e, console=ctx.console, error_console=ctx.error_console)

    ctx.console.print(f"[green]Initialized repository at {path}[/green]")
    ctx.console.print(f"[dim]SHA: {sha}[/dim]")


def _commit(
    path: Annotated[str, Parameter(help="Object storage path of the repository")],
    files: Annotated[
        tuple[str, ...],
        Parameter(help="Files to commit, relative to --root"),
    ],
    *,
    message: Annotated[str, Parameter(name=["--message", "-m"], help="Commit message")],
    name: Annotated[str, Parameter(name="--name", help="Author name")],
    email: Annotated[str, Parameter(name="--email", help="Author email")],
    root: Annotated[
        Path | None,
        Parameter(name="--root", help="Directory the files are read from"),
    ] = None,
) -> None:
    """Commit local files to a repository

    Each file is read from --root (the current directory by default) and
    committed under the same relative path.

    Args:
        path: Object storage path of the repository.
        files: Relative paths of the files to commit.
        message: Commit message.
        name: Author and committer name.
        email: Author and committer email.
        root: Directory the files are read from.
    """
    ctx = CLIContext.get_current()
    changes = _read_change_set(ctx, root if root is not None else Path.cwd(), files)
    handle = RepositoryHandle(app_id="", object_storage_path=path)

    try:
        sha = ctx.service().commit_changes(handle, changes, Author(name, email), message)
    except RepositorySyncError as e:
        exit_with_sync_error(e, console=ctx.console, error_console=ctx.error_console)

    ctx.console.print(f"[green]Committed {len(changes)} file(s)[/green]")
    ctx.console.print(f"[dim]SHA: {sha}[/dim]")


def _log(
    path: Annotated[str, Parameter(help="Object storage path of the repository")],
    *,
    limit: Annotated[
        int | None,
        Parameter(name=["--limit", "-n"], help="Maximum number of commits"),
    ] = None,
    format: Annotated[  # noqa: A002
        OutputFormat,
        Parameter(name=["--format", "-f"], help="Output format (text, json)"),
    ] = OutputFormat.TEXT,
) -> None:
    """Show commit history, newest first

    Args:
        path: Object storage path of the repository.
        limit: Maximum number of commits to show.
        format: Output format.
    """
    ctx = CLIContext.get_current()
    handle = RepositoryHandle(app_id="", object_storage_path=path)

    try:
        commits = ctx.service().get_commit_history(handle, limit)
    except RepositorySyncError as e:
        exit_with_sync_error(e, console=ctx.console, error_console=ctx.error_console)

    if format == OutputFormat.JSON:
        print_json(ctx.console, {"commits": [c.to_dict() for c in commits]})
        return

    if not commits:
        ctx.console.print("[dim]No commits[/dim]")
        return

    for commit in commits:
        _print_commit(ctx, commit)


def _branch(
    path: Annotated[str, Parameter(help="Object storage path of the repository")],
    *,
    format: Annotated[  # noqa: A002
        OutputFormat,
        Parameter(name=["--format", "-f"], help="Output format (text, json)"),
    ] = OutputFormat.TEXT,
) -> None:
    """Show the current branch and its last commit

    Args:
        path: Object storage path of the repository.
        format: Output format.
    """
    ctx = CLIContext.get_current()
    handle = RepositoryHandle(app_id="", object_storage_path=path)

    try:
        info: BranchInfo = ctx.service().get_branch_info(handle)
    except RepositorySyncError as e:
        exit_with_sync_error(e, console=ctx.console, error_console=ctx.error_console)

    if format == OutputFormat.JSON:
        print_json(ctx.console, info.to_dict())
        return

    ctx.console.print(f"[bold]On branch {info.current_branch}[/bold]", highlight=False)
    if info.last_commit is None:
        ctx.console.print("[dim]No commits yet[/dim]")
    else:
        _print_commit(ctx, info.last_commit)


def register_commands(app: "App") -> None:
    """Register repository commands on the given app."""
    app.command(_init, name="init")
    app.command(_commit, name="commit")
    app.command(_log, name="log")
    app.command(_branch, name="branch")
