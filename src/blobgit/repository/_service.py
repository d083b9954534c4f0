"""Repository lifecycle operations against object storage.

Each public operation runs in its own scoped workspace:

1. acquire a workspace,
2. download the durable `.git` tree into it (all operations but initialize),
3. do the version-control work locally with GitEngine,
4. upload the `.git` tree back (initialize and commit only),
5. release the workspace on every exit path.

Nothing is cached between calls; object storage is the only durable state.
Concurrent commits against the same repository are not serialized: the last
upload wins.
"""

from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final, Self

from blobgit.config import RepositoryConfig
from blobgit.exceptions import (
    InvalidFilePathError,
    RepositorySyncError,
    SyncError,
    SyncErrorKind,
    ValidationError,
)
from blobgit.repository._engine import GIT_DIR, GitEngine, validate_author
from blobgit.repository._models import BranchInfo
from blobgit.storage import create_object_store
from blobgit.sync import DirectorySynchronizer
from blobgit.utils import create_logger, create_null_logger
from blobgit.workspace import WorkspaceManager

if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.typing import FilteringBoundLogger

    from blobgit.config import Config
    from blobgit.repository._models import (
        Author,
        CommitRecord,
        FileChangeSet,
        RepositoryHandle,
    )
    from blobgit.storage import CredentialCache, ObjectLocation, ObjectStore

_GITIGNORE: Final = "node_modules/\n.env\n*.log\n.DS_Store\n"


def starter_files(app_id: str) -> dict[str, bytes]:
    """Files committed by initialize_repository."""
    return {
        "README.md": f"# {app_id}\n\nThis project was created in Replit.\n".encode(),
        ".gitignore": _GITIGNORE.encode(),
    }


def validate_file_path(path: str) -> str:
    """Validate a repository-relative path from a change set.

    Args:
        path: POSIX path relative to the repository root.

    Returns:
        The normalized path ("./" segments and duplicate separators removed).

    Raises:
        InvalidFilePathError: If the path is empty, absolute, contains a ".."
            segment, a backslash or NUL, or points into the .git directory.
    """
    if not path or "\x00" in path or "\\" in path:
        msg = f"Invalid file path: {path!r}"
        raise InvalidFilePathError(msg, path=path)

    pure = PurePosixPath(path)
    if pure.is_absolute():
        msg = f"File path must be relative to the repository root: {path!r}"
        raise InvalidFilePathError(msg, path=path)
    if ".." in pure.parts:
        msg = f"File path escapes the repository root: {path!r}"
        raise InvalidFilePathError(msg, path=path)
    if not pure.parts:
        msg = f"Invalid file path: {path!r}"
        raise InvalidFilePathError(msg, path=path)
    if any(part.lower() == GIT_DIR for part in pure.parts):
        msg = f"File path points into the {GIT_DIR} directory: {path!r}"
        raise InvalidFilePathError(msg, path=path)

    return pure.as_posix()


def validate_change_set(files: "FileChangeSet") -> dict[str, bytes]:
    """Validate every path of a change set and encode its contents.

    Returns:
        Normalized path -> content bytes (str content is UTF-8 encoded).

    Raises:
        InvalidFilePathError: If any path is rejected, or two paths normalize
            to the same file.
    """
    normalized: dict[str, bytes] = {}
    for raw_path, content in files.items():
        path = validate_file_path(raw_path)
        if path in normalized:
            msg = f"Duplicate file path in change set: {raw_path!r}"
            raise InvalidFilePathError(msg, path=raw_path)
        normalized[path] = content.encode() if isinstance(content, str) else bytes(content)
    return normalized


class RepositoryService:
    """Initialize, commit to, and read repositories stored in object storage.

    Every method raises RepositorySyncError on failure; its `kind` names the
    condition. The scoped workspace is removed before the error escapes.

    Example:
        >>> service = RepositoryService(MemoryObjectStore())
        >>> handle = RepositoryHandle("a1", "/bucket/apps/a1")
        >>> author = Author("Ada", "ada@x.io")
        >>> s0 = service.initialize_repository(handle, author)
        >>> s1 = service.commit_changes(handle, {"notes.txt": "hello"}, author, "add notes")
        >>> [c.sha for c in service.get_commit_history(handle)] == [s1, s0]
        True
    """

    __slots__ = ("_config", "_logger", "_sync", "_workspaces")

    def __init__(
        self,
        store: "ObjectStore",
        *,
        workspaces: WorkspaceManager | None = None,
        config: RepositoryConfig | None = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Object store holding repository metadata.
            workspaces: Workspace manager. Defaults to the system temp dir.
            config: Repository settings. Defaults to RepositoryConfig().
            logger: Logger for operation events.
        """
        self._logger = logger if logger is not None else create_null_logger()
        self._sync = DirectorySynchronizer(store, logger=self._logger)
        self._workspaces = (
            workspaces
            if workspaces is not None
            else WorkspaceManager(logger=self._logger)
        )
        self._config = config if config is not None else RepositoryConfig()

    @classmethod
    def from_config(
        cls,
        config: "Config",
        *,
        credentials: "CredentialCache | None" = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> Self:
        """Build a service with the store, workspaces, and logger a Config names.

        Args:
            config: Loaded configuration.
            credentials: Credential cache for the S3 backend.
            logger: Logger override. Defaults to one built from config.logging.
        """
        if logger is None:
            logger = create_logger(
                level=config.logging.level.value,
                log_format=config.logging.format.value,  # type: ignore[arg-type]
                log_file=config.logging.file,
                component="repository",
            )
        workspace_root = Path(config.workspace.root) if config.workspace.root else None
        return cls(
            create_object_store(config.storage, credentials=credentials),
            workspaces=WorkspaceManager(
                workspace_root, prefix=config.workspace.prefix, logger=logger
            ),
            config=config.repository,
            logger=logger,
        )

    @property
    def workspaces(self) -> WorkspaceManager:
        return self._workspaces

    # =========================================================================
    # Operations
    # =========================================================================

    def initialize_repository(self, handle: "RepositoryHandle", author: "Author") -> str:
        """Create a repository with a starter commit and persist it.

        Args:
            handle: The repository to create.
            author: Author and committer of the initial commit.

        Returns:
            SHA of the initial commit.

        Raises:
            RepositorySyncError: If any local step or the upload fails.
        """
        action = "initialize repository"
        with self._operation(action, handle) as log:
            validate_author(author)
            location = handle.location
            with self._workspaces.scoped() as workdir:
                files = starter_files(handle.app_id)
                with GitEngine.init(workdir) as engine:
                    engine.configure_identity(author)
                    _ = engine.write_files(files)
                    _ = engine.stage(files)
                    sha = engine.commit(self._config.initial_commit_message, author)
                self._push(action, location, workdir)

            log.info("Initialized repository", sha=sha)
            return sha

    def commit_changes(
        self,
        handle: "RepositoryHandle",
        files: "FileChangeSet",
        author: "Author",
        message: str,
    ) -> str:
        """Write a batch of files, commit them, and persist the result.

        Args:
            handle: The repository to commit to.
            files: Repository-relative path -> full new content.
            author: Author and committer of the new commit.
            message: Commit message.

        Returns:
            SHA of the new commit.

        Raises:
            RepositorySyncError: With kind NOTHING_TO_COMMIT if the files match
                what is already committed; VALIDATION if a path is rejected
                (before anything is written); otherwise on any download,
                commit, or upload failure.
        """
        action = "commit changes"
        with self._operation(action, handle) as log:
            changes = validate_change_set(files)
            validate_author(author)
            if not message.strip():
                msg = "Commit message must not be empty"
                raise ValidationError(msg)
            location = handle.location
            if not changes:
                raise _nothing_to_commit(action)

            with self._workspaces.scoped() as workdir:
                self._pull(action, handle, location, workdir)
                with GitEngine.open(workdir) as engine:
                    engine.configure_identity(author)
                    _ = engine.write_files(changes)
                    staged = engine.stage(changes)
                    if not staged:
                        raise _nothing_to_commit(action)
                    sha = engine.commit(message, author)
                self._push(action, location, workdir)

            log.info("Committed changes", sha=sha, files=sorted(staged))
            return sha

    def get_commit_history(
        self, handle: "RepositoryHandle", limit: int | None = None
    ) -> list["CommitRecord"]:
        """Read commit history, newest first.

        Args:
            handle: The repository to read.
            limit: Maximum number of commits. Defaults to the configured
                history limit.

        Returns:
            CommitRecords newest first. Empty for a repository without commits.

        Raises:
            RepositorySyncError: If the download or history read fails.
        """
        action = "get commit history"
        with self._operation(action, handle) as log:
            effective_limit = self._config.history_limit if limit is None else limit
            if effective_limit < 1:
                msg = f"History limit must be at least 1, got {effective_limit}"
                raise ValidationError(msg)
            location = handle.location

            with self._workspaces.scoped() as workdir:
                self._pull(action, handle, location, workdir)
                with GitEngine.open(workdir) as engine:
                    commits = engine.history(effective_limit)

            log.info("Read commit history", commits=len(commits))
            return commits

    def get_branch_info(self, handle: "RepositoryHandle") -> "BranchInfo":
        """Read the current branch and its last commit.

        Args:
            handle: The repository to read.

        Returns:
            BranchInfo; last_commit is None for a repository without commits.

        Raises:
            RepositorySyncError: If the download or branch read fails.
        """
        action = "get branch info"
        with self._operation(action, handle) as log:
            location = handle.location

            with self._workspaces.scoped() as workdir:
                self._pull(action, handle, location, workdir)
                with GitEngine.open(workdir) as engine:
                    info = BranchInfo(
                        current_branch=engine.current_branch(),
                        last_commit=engine.last_commit(),
                    )

            log.info("Read branch info", branch=info.current_branch)
            return info

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    @contextmanager
    def _operation(
        self, action: str, handle: "RepositoryHandle"
    ) -> "Iterator[FilteringBoundLogger]":
        """Bind operation context to the logger and translate failures.

        RepositorySyncError passes through unchanged. ValidationError becomes
        kind VALIDATION; anything else becomes kind VERSION_CONTROL.
        """
        log = self._logger.bind(
            operation=action,
            app_id=handle.app_id,
            object_storage_path=handle.object_storage_path,
        )
        try:
            location = handle.location
            log.info(
                "Starting repository operation",
                container=location.container,
                prefix=location.key_prefix,
            )
            yield log
        except RepositorySyncError as e:
            if e.nothing_to_commit:
                log.info("Nothing to commit")
            else:
                log.error("Repository operation failed", kind=e.kind.value, error=str(e))
            raise
        except ValidationError as e:
            log.error("Repository operation rejected", error=str(e))
            msg = f"Failed to {action}: {e}"
            raise RepositorySyncError(msg, kind=SyncErrorKind.VALIDATION, cause=e) from e
        except Exception as e:
            log.error("Repository operation failed", error=str(e), error_type=type(e).__name__)
            msg = f"Failed to {action}: {e}"
            raise RepositorySyncError(
                msg, kind=SyncErrorKind.VERSION_CONTROL, cause=e
            ) from e

    def _pull(
        self,
        action: str,
        handle: "RepositoryHandle",
        location: "ObjectLocation",
        workdir: Path,
    ) -> None:
        try:
            count = self._sync.download(
                location.container, location.join(GIT_DIR), workdir / GIT_DIR
            )
        except SyncError as e:
            msg = f"Failed to {action}: {e}"
            raise RepositorySyncError(msg, kind=SyncErrorKind.DOWNLOAD, cause=e) from e

        if count == 0:
            msg = (
                f"Failed to {action}: no repository found at "
                f"{handle.object_storage_path}"
            )
            raise RepositorySyncError(msg, kind=SyncErrorKind.NOT_INITIALIZED)

    def _push(self, action: str, location: "ObjectLocation", workdir: Path) -> None:
        try:
            _ = self._sync.upload(
                workdir / GIT_DIR, location.container, location.join(GIT_DIR)
            )
        except SyncError as e:
            msg = f"Failed to {action}: {e}"
            raise RepositorySyncError(msg, kind=SyncErrorKind.UPLOAD, cause=e) from e


def _nothing_to_commit(action: str) -> RepositorySyncError:
    msg = f"Failed to {action}: nothing to commit"
    return RepositorySyncError(msg, kind=SyncErrorKind.NOTHING_TO_COMMIT)
