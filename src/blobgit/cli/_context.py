"""CLI context for global state management.

The CLIContext is set once by the meta command after configuration is loaded
and made available to all commands via contextvars.
"""

import contextvars
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.console import Console

from blobgit.config import Config
from blobgit.repository import RepositoryService

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

_current_cli_context: "contextvars.ContextVar[CLIContext | None]" = (
    contextvars.ContextVar("cli_context", default=None)
)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI context with configuration and consoles.

    Attributes:
        config: Loaded configuration object.
        console: Console for command output.
        error_console: Console for error output.
        logger: Structured logger for CLI commands.
    """

    config: Config = field(repr=False)
    console: Console = field(default_factory=Console, repr=False)
    error_console: Console = field(
        default_factory=lambda: Console(stderr=True), repr=False
    )
    logger: "FilteringBoundLogger | None" = field(default=None, repr=False)

    @classmethod
    def get_current(cls) -> "CLIContext":
        """Get current active CLIContext, or create a default if not set."""
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx
        return cls(config=Config())

    @classmethod
    def set_current(cls, ctx: "CLIContext") -> None:
        _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Reset to default context."""
        _current_cli_context.set(None)

    def service(self) -> RepositoryService:
        """Build a repository service from the loaded configuration."""
        return RepositoryService.from_config(self.config, logger=self.logger)
