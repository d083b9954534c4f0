"""Repositories whose durable state lives in object storage.

This package provides the repository lifecycle service and the local git
engine it drives inside scoped workspaces.

Classes:
    RepositoryService: initialize, commit, history, and branch operations.
    GitEngine: dulwich operations against one local working directory.

Models:
    RepositoryHandle: App identifier plus object storage path.
    Author: Identity recorded on commits.
    CommitRecord: Metadata about a single commit.
    BranchInfo: Current branch and last commit.
    FileChangeSet: Type alias for path -> content mappings.

Example:
    >>> from blobgit.repository import Author, RepositoryHandle, RepositoryService
    >>> from blobgit.storage import MemoryObjectStore
    >>> service = RepositoryService(MemoryObjectStore())
    >>> handle = RepositoryHandle("a1", "/bucket/apps/a1")
    >>> sha = service.initialize_repository(handle, Author("Ada", "ada@x.io"))
"""

from blobgit.repository._engine import GIT_DIR, GitEngine, format_identity, validate_author
from blobgit.repository._history import changed_files, read_history
from blobgit.repository._models import (
    Author,
    BranchInfo,
    CommitRecord,
    FileChangeSet,
    RepositoryHandle,
)
from blobgit.repository._service import (
    RepositoryService,
    starter_files,
    validate_change_set,
    validate_file_path,
)

__all__ = [
    "GIT_DIR",
    "Author",
    "BranchInfo",
    "CommitRecord",
    "FileChangeSet",
    "GitEngine",
    "RepositoryHandle",
    "RepositoryService",
    "changed_files",
    "format_identity",
    "read_history",
    "starter_files",
    "validate_author",
    "validate_change_set",
    "validate_file_path",
]
