"""blobgit exceptions."""

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class BlobGitError(Exception):
    """Base exception for blobgit errors."""


# =============================================================================
# Validation Exceptions
# =============================================================================


class ValidationError(BlobGitError, ValueError):
    """Raised when caller-supplied input is rejected."""


class ObjectPathError(ValidationError):
    """Raised when an object storage path cannot be resolved.

    Attributes:
        object_path: The path that failed to resolve.
    """

    def __init__(self, message: str, *, object_path: str | None = None) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            object_path: The path that failed to resolve.
        """
        super().__init__(message)
        self.object_path: str | None = object_path


class InvalidFilePathError(ValidationError):
    """Raised when a change set path escapes the repository root.

    Attributes:
        path: The rejected repository-relative path.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The rejected repository-relative path.
        """
        super().__init__(message)
        self.path: str | None = path


class InvalidAuthorError(ValidationError):
    """Raised when an author identity cannot be written into a commit."""


# =============================================================================
# Storage Exceptions
# =============================================================================


class StorageError(BlobGitError):
    """Raised when an object storage call fails.

    Attributes:
        container: The container the call addressed.
        key: The object key, if the call addressed a single object.
    """

    def __init__(
        self,
        message: str,
        *,
        container: str | None = None,
        key: str | None = None,
    ) -> None:
        """Initialize with error message and object context.

        Args:
            message: Human-readable error message.
            container: The container the call addressed.
            key: The object key, if any.
        """
        super().__init__(message)
        self.container: str | None = container
        self.key: str | None = key


class ObjectNotFoundError(StorageError, KeyError):
    """Raised when a container or object does not exist."""

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ""


# =============================================================================
# Synchronization Exceptions
# =============================================================================


class SyncError(BlobGitError):
    """Raised when a directory cannot be mirrored to or from object storage.

    Attributes:
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        """Initialize with error message and underlying cause."""
        super().__init__(message)
        self.cause: Exception | None = cause


class WorkspaceError(BlobGitError, OSError):
    """Raised when a scoped workspace directory cannot be created.

    Attributes:
        path: The directory that could not be created.
    """

    def __init__(self, message: str, *, path: "Path | None" = None) -> None:
        """Initialize with error message and path context."""
        super().__init__(message)
        self.path: Path | None = path


# =============================================================================
# Repository Exceptions
# =============================================================================


class SyncErrorKind(StrEnum):
    """Conditions distinguished on RepositorySyncError."""

    VALIDATION = "validation"
    NOTHING_TO_COMMIT = "nothing_to_commit"
    NOT_INITIALIZED = "not_initialized"
    DOWNLOAD = "download"
    UPLOAD = "upload"
    VERSION_CONTROL = "version_control"


class RepositorySyncError(BlobGitError):
    """Raised by every repository operation when it does not complete.

    Attributes:
        kind: The condition that stopped the operation.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: SyncErrorKind = SyncErrorKind.VERSION_CONTROL,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message, condition, and underlying cause.

        Args:
            message: Human-readable error message.
            kind: The condition that stopped the operation.
            cause: The underlying exception, if any.
        """
        super().__init__(message)
        self.kind: SyncErrorKind = kind
        self.cause: Exception | None = cause

    @property
    def nothing_to_commit(self) -> bool:
        """True when a commit was refused because nothing changed."""
        return self.kind is SyncErrorKind.NOTHING_TO_COMMIT


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(BlobGitError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: "Path | None" = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column
