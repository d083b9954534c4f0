# ruff: noqa: TC003  # datetime and Mapping needed at runtime for dataclass fields
"""Repository models.

This module defines the data structures passed in and out of repository
operations.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import TypeAlias

from blobgit.storage import ObjectLocation, resolve_object_path

# Repository-relative POSIX path -> full new file content
FileChangeSet: TypeAlias = Mapping[str, str | bytes]


@dataclass(frozen=True, slots=True)
class RepositoryHandle:
    """Identifies one logical repository.

    Attributes:
        app_id: Opaque application-level identifier.
        object_storage_path: Durable root in object storage, such as
            "/bucket/apps/a1". Fixed for the repository's lifetime.
    """

    app_id: str
    object_storage_path: str

    @property
    def location(self) -> ObjectLocation:
        """The resolved container and key prefix.

        Raises:
            ObjectPathError: If the object storage path has no container.
        """
        return resolve_object_path(self.object_storage_path)


@dataclass(frozen=True, slots=True)
class Author:
    """Identity recorded as author and committer of a commit.

    Attributes:
        name: Display name.
        email: Email address.
    """

    name: str
    email: str


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """Information about a single commit.

    Attributes:
        sha: Full 40-character commit SHA hex string.
        message: Subject line of the commit message.
        author: Author identity from the commit.
        date: Author timestamp (timezone-aware).
        files: Paths changed relative to the first parent, or every tracked
            path for a commit without a parent.
    """

    sha: str
    message: str
    author: Author
    date: datetime
    files: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "sha": self.sha,
            "message": self.message,
            "author": {"name": self.author.name, "email": self.author.email},
            "date": self.date.isoformat(),
            "files": list(self.files),
        }


@dataclass(frozen=True, slots=True)
class BranchInfo:
    """Current branch state of a repository.

    Attributes:
        current_branch: Branch HEAD points to, or "HEAD" when detached.
        last_commit: Most recent commit, None for a repository without commits.
    """

    current_branch: str
    last_commit: CommitRecord | None

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "current_branch": self.current_branch,
            "last_commit": self.last_commit.to_dict() if self.last_commit else None,
        }
