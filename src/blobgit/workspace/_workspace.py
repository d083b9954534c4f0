"""Scoped workspace directories for version-control operations.

A workspace is a process-private directory that lives for exactly one
operation. Callers acquire one, do their work, and release it on every exit
path; `scoped()` packages that as a context manager.
"""

import shutil
import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from blobgit.exceptions import WorkspaceError
from blobgit.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.typing import FilteringBoundLogger


class WorkspaceManager:
    """Allocates and removes scoped workspace directories.

    Attributes:
        root: Parent directory for workspaces.
        prefix: Name prefix for each workspace directory.
    """

    __slots__ = ("_logger", "_prefix", "_root")

    def __init__(
        self,
        root: Path | None = None,
        *,
        prefix: str = "git-",
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the manager.

        Args:
            root: Parent directory for workspaces. Defaults to the system
                temporary directory.
            prefix: Name prefix for each workspace directory.
            logger: Logger for cleanup failures.
        """
        self._root = root
        self._prefix = prefix
        self._logger = logger if logger is not None else create_null_logger()

    @property
    def root(self) -> Path:
        return self._root if self._root is not None else Path(tempfile.gettempdir())

    @property
    def prefix(self) -> str:
        return self._prefix

    def acquire(self) -> Path:
        """Create a new, uniquely named workspace directory.

        Returns:
            The resolved absolute path of the new directory.

        Raises:
            WorkspaceError: If the directory cannot be created.
        """
        path = self.root / f"{self._prefix}{uuid.uuid4().hex}"
        try:
            path.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            msg = f"Failed to create workspace {path}: {e}"
            raise WorkspaceError(msg, path=path) from e
        return path.resolve()

    def release(self, path: Path) -> None:
        """Remove a workspace directory and everything in it.

        Failures are logged and swallowed so they never mask the outcome of
        the operation that used the workspace.

        Args:
            path: A directory previously returned by acquire().
        """
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            return
        except OSError as e:
            self._logger.warning(
                "Failed to clean up workspace",
                path=str(path),
                error=str(e),
            )

    @contextmanager
    def scoped(self) -> "Iterator[Path]":
        """Acquire a workspace for the duration of a with block.

        Example:
            >>> manager = WorkspaceManager()
            >>> with manager.scoped() as workdir:
            ...     (workdir / "file.txt").write_text("scratch")
        """
        path = self.acquire()
        try:
            yield path
        finally:
            self.release(path)
