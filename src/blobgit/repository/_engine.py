"""Local git engine over dulwich.

GitEngine binds dulwich to one working directory inside a scoped workspace.
It knows nothing about object storage; the repository service moves the
metadata directory in and out around it.
"""

import os
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final, Self

from dulwich import porcelain
from dulwich.errors import NotGitRepository
from dulwich.index import blob_from_path_and_stat, index_entry_from_stat
from dulwich.refs import SYMREF
from dulwich.repo import Repo

from blobgit.exceptions import InvalidAuthorError, InvalidFilePathError
from blobgit.repository._history import read_history
from blobgit.utils import branch_from_ref, decode_bytes

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from types import TracebackType

    from blobgit.repository._models import Author, CommitRecord

GIT_DIR: Final = ".git"
DETACHED_HEAD: Final = "HEAD"

# Directories git expects even when empty; object storage keeps only files
_CONTROL_DIRS: Final = ("objects/info", "objects/pack", "refs/heads", "refs/tags")
_FORBIDDEN_IDENTITY_CHARS: Final = frozenset("<>\n\r\x00")


def validate_author(author: "Author") -> None:
    """Check that an author can be written into an identity line.

    Raises:
        InvalidAuthorError: If name or email is empty or contains characters
            that would corrupt the identity line.
    """
    for label, value in (("name", author.name), ("email", author.email)):
        if not value.strip():
            msg = f"Author {label} must not be empty"
            raise InvalidAuthorError(msg)
        if _FORBIDDEN_IDENTITY_CHARS.intersection(value):
            msg = f"Author {label} contains invalid characters: {value!r}"
            raise InvalidAuthorError(msg)


def format_identity(author: "Author") -> bytes:
    """Build a validated "Name <email>" identity line."""
    validate_author(author)
    return f"{author.name.strip()} <{author.email.strip()}>".encode()


class GitEngine:
    """Version-control operations against one local working directory.

    The class implements the context manager protocol; the underlying dulwich
    Repo is closed on exit.

    Example:
        >>> with GitEngine.init(workdir) as engine:
        ...     engine.write_files({"README.md": b"# demo\\n"})
        ...     engine.stage(["README.md"])
        ...     sha = engine.commit("Initial commit", author)
    """

    __slots__ = ("_repo", "_root")

    def __init__(self, repo: Repo, root: Path) -> None:
        self._repo = repo
        self._root = root

    @classmethod
    def init(cls, path: Path) -> Self:
        """Create a new repository in an existing, empty directory."""
        return cls(Repo.init(str(path)), path)

    @classmethod
    def open(cls, path: Path) -> Self:
        """Open the repository whose metadata directory is path/.git.

        Raises:
            NotGitRepository: If path/.git is missing or unusable.
        """
        git_dir = path / GIT_DIR
        if not git_dir.is_dir():
            msg = f"No git repository at {path}"
            raise NotGitRepository(msg)
        for control_dir in _CONTROL_DIRS:
            (git_dir / control_dir).mkdir(parents=True, exist_ok=True)
        return cls(Repo(str(path)), path)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: "TracebackType | None",
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release file handles held by the dulwich Repo."""
        self._repo.close()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def repo(self) -> Repo:
        return self._repo

    # =========================================================================
    # Working tree and index
    # =========================================================================

    def configure_identity(self, author: "Author") -> None:
        """Record the author as user.name/user.email in the repository config."""
        validate_author(author)
        config = self._repo.get_config()
        config.set((b"user",), b"name", author.name.strip().encode())
        config.set((b"user",), b"email", author.email.strip().encode())
        config.set((b"commit",), b"gpgsign", b"false")
        config.write_to_path()

    def write_files(self, files: "Mapping[str, bytes]") -> list[Path]:
        """Write file contents into the working tree, creating parent dirs.

        Args:
            files: Repository-relative POSIX path -> content.

        Returns:
            Absolute paths written.

        Raises:
            InvalidFilePathError: If a path resolves outside the working tree.
        """
        written: list[Path] = []
        for relative, content in files.items():
            target = self._to_absolute(relative)
            target.parent.mkdir(parents=True, exist_ok=True)
            _ = target.write_bytes(content)
            written.append(target)
        return written

    def stage(self, paths: "Iterable[str]") -> frozenset[str]:
        """Stage paths and report what now differs from HEAD.

        Entries are written into the index directly, so ignore rules never
        drop a path. Index entries that conflict with a staged path (a tracked
        directory now written as a file, or a tracked file now a directory)
        are removed.

        Args:
            paths: Repository-relative POSIX paths to stage.

        Returns:
            Every staged path that differs from HEAD (empty when the index
            already matches HEAD).
        """
        index = self._repo.open_index()
        for relative in paths:
            name = relative.encode()
            # A file replaces a tracked directory of the same name, and the reverse
            for stale in [
                p for p in index if p.startswith(name + b"/") or name.startswith(p + b"/")
            ]:
                del index[stale]

            target = self._to_absolute(relative)
            st = target.lstat()
            blob = blob_from_path_and_stat(os.fsencode(target), st)
            self._repo.object_store.add_object(blob)
            index[name] = index_entry_from_stat(st, blob.id)
        index.write()
        return self.staged_changes()

    def staged_changes(self) -> frozenset[str]:
        """Paths whose index entry differs from HEAD."""
        changes = porcelain.get_tree_changes(self._repo)
        staged: set[str] = set()
        for change_type in ("add", "delete", "modify"):
            for f in changes.get(change_type, []):
                staged.add(decode_bytes(f))
        return frozenset(staged)

    def commit(self, message: str, author: "Author") -> str:
        """Commit the index with author as both author and committer.

        Returns:
            The new commit's 40-character SHA.
        """
        identity = format_identity(author)
        sha: bytes = porcelain.commit(
            self._repo,
            message=message.encode(),
            author=identity,
            committer=identity,
        )
        return decode_bytes(sha)

    # =========================================================================
    # Queries
    # =========================================================================

    def current_branch(self) -> str:
        """Branch HEAD points to, or "HEAD" when HEAD is detached."""
        head = self._repo.refs.read_ref(b"HEAD")
        if head is None or not head.startswith(SYMREF):
            return DETACHED_HEAD
        return branch_from_ref(head[len(SYMREF) :].strip()) or DETACHED_HEAD

    def history(self, limit: int) -> list["CommitRecord"]:
        """Up to `limit` commits from HEAD, newest first."""
        return read_history(self._repo, limit)

    def last_commit(self) -> "CommitRecord | None":
        """Most recent commit, or None if no commits exist."""
        commits = read_history(self._repo, 1)
        return commits[0] if commits else None

    def _to_absolute(self, relative: str) -> Path:
        target = self._root.joinpath(*PurePosixPath(relative).parts)
        if not target.resolve().is_relative_to(self._root.resolve()):
            msg = f"Path is outside repository root: {relative}"
            raise InvalidFilePathError(msg, path=relative)
        return target
