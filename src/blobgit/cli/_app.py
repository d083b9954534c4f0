"""Entry point wiring for the blobgit CLI."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter
from rich.console import Console

from blobgit.config import Config, ConfigError, LogLevel, StorageBackend, load_config
from blobgit.utils import create_logger

from ._commands import register_commands
from ._context import CLIContext
from ._shared import ExitCode, exit_with_error

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


def _load(config_path: Path | None, log_level: LogLevel | None, console: Console) -> Config:
    overrides = {"logging": {"level": log_level.value}} if log_level else None
    try:
        config = load_config(config_path, overrides=overrides)
    except ConfigError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR, console=console)

    # Each CLI run is a separate process; a memory store would be discarded on exit
    if config.storage.backend is StorageBackend.MEMORY:
        exit_with_error(
            'storage.backend "memory" does not persist between commands; '
            "configure the filesystem or s3 backend",
            ExitCode.LOAD_ERROR,
            console=console,
        )
    return config


def _cli_logger(config: Config) -> "FilteringBoundLogger":
    return create_logger(
        level=config.logging.level.value,
        log_format=config.logging.format.value,  # type: ignore[arg-type]
        log_file=config.logging.file,
        component="cli",
    )


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Build the CLI app.

    Call `app.meta(tokens)`: the meta layer parses the global options and
    loads configuration, then dispatches the remaining tokens to a command.
    """
    out = console if console is not None else Console()
    err = error_console if error_console is not None else Console(stderr=True)
    app = App(
        name="blobgit",
        help="Git repositories persisted in object storage.",
        help_on_error=True,
        console=out,
        error_console=err,
        exit_on_error=exit_on_error,
    )
    register_commands(app)

    @app.meta.default
    def _run(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        config: Annotated[
            Path | None, Parameter(name="--config", help="TOML config file")
        ] = None,
        log_level: Annotated[
            LogLevel | None,
            Parameter(name="--log-level", help="Override logging.level"),
        ] = None,
    ) -> None:
        """Run a blobgit command.

        Args:
            tokens: Command and its arguments.
            config: TOML config file. Falls back to BLOBGIT_CONFIG.
            log_level: Log threshold for this run.
        """
        loaded = _load(config, log_level, err)
        CLIContext.set_current(
            CLIContext(
                config=loaded, console=out, error_console=err, logger=_cli_logger(loaded)
            )
        )
        try:
            app(tokens)
        finally:
            CLIContext.reset()

    return app


def main() -> None:
    """`blobgit` console script."""
    create_app().meta()
