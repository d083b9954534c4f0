"""Commit history and per-commit changed-file lists.

The changed files of a commit are its diff against the first parent. A
commit without a reachable parent (the root commit, or any commit whose
parent is missing from a shallow or rewritten history) has nothing to diff
against, so its changed files are every path tracked at that commit. The
fallback is decided per commit.
"""

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, cast

from dulwich.diff_tree import tree_changes
from dulwich.objects import Commit

from blobgit.repository._models import Author, CommitRecord
from blobgit.utils import decode_bytes

if TYPE_CHECKING:
    from dulwich.repo import Repo


class _ParentUnavailableError(LookupError):
    """The commit has no first parent to diff against."""


def _parent_diff(repo: "Repo", commit: Commit) -> tuple[str, ...]:
    parents = cast("list[bytes]", commit.parents)
    if not parents:
        msg = f"Commit {decode_bytes(commit.id)} has no parent"
        raise _ParentUnavailableError(msg)

    try:
        parent = repo[parents[0]]
    except KeyError as e:
        msg = f"Parent of {decode_bytes(commit.id)} is not in the object store"
        raise _ParentUnavailableError(msg) from e

    parent_tree = cast("bytes", getattr(parent, "tree", None))
    paths: list[str] = []
    for change in tree_changes(repo.object_store, parent_tree, commit.tree):
        # Deletions carry only the old entry
        entry = change.new if change.new is not None and change.new.path else change.old
        if entry is None or entry.path is None:
            continue
        path = decode_bytes(entry.path, errors="replace")
        if path not in paths:
            paths.append(path)
    return tuple(paths)


def _tracked_files(repo: "Repo", commit: Commit) -> tuple[str, ...]:
    return tuple(
        decode_bytes(entry.path, errors="replace")
        for entry in repo.object_store.iter_tree_contents(commit.tree)
        if entry.path is not None
    )


def changed_files(repo: "Repo", commit: Commit) -> tuple[str, ...]:
    """List the paths a commit changed.

    Args:
        repo: Repository holding the commit.
        commit: The commit to inspect.

    Returns:
        Paths changed against the first parent, or every tracked path when
        the commit has no reachable parent.
    """
    try:
        return _parent_diff(repo, commit)
    except _ParentUnavailableError:
        return _tracked_files(repo, commit)


def parse_author_line(
    author: bytes, author_time: int, author_tz: int
) -> tuple[Author, datetime]:
    """Parse an author line into identity and timestamp.

    Args:
        author: Author bytes in "Name <email>" format.
        author_time: Unix timestamp.
        author_tz: Offset from UTC in seconds, as dulwich reports it.

    Returns:
        Tuple of (Author, datetime with the commit's timezone).
    """
    author_str = author.decode("utf-8", errors="replace")
    if "<" in author_str and author_str.endswith(">"):
        name_part = author_str.rsplit("<", 1)[0].strip()
        email_part = author_str.rsplit("<", 1)[1].rstrip(">")
    else:
        name_part = author_str
        email_part = ""

    tz = timezone(timedelta(seconds=author_tz))
    return Author(name=name_part, email=email_part), datetime.fromtimestamp(
        author_time, tz=tz
    )


def to_commit_record(repo: "Repo", commit: Commit) -> CommitRecord:
    """Build a CommitRecord from a dulwich commit."""
    author, date = parse_author_line(
        cast("bytes", commit.author),
        cast("int", commit.author_time),
        cast("int", commit.author_timezone),
    )
    message = cast("bytes", commit.message).decode("utf-8", errors="replace")
    subject = message.splitlines()[0] if message else ""

    return CommitRecord(
        sha=decode_bytes(commit.id),
        message=subject,
        author=author,
        date=date,
        files=changed_files(repo, commit),
    )


def read_history(repo: "Repo", limit: int) -> list[CommitRecord]:
    """Walk history from HEAD, newest first.

    Args:
        repo: The repository to read.
        limit: Maximum number of commits to return.

    Returns:
        Up to `limit` CommitRecords. Empty if the repository has no commits.
    """
    try:
        head = repo.head()
    except KeyError:
        return []

    walker = repo.get_walker(include=[head], max_entries=limit)
    return [to_commit_record(repo, entry.commit) for entry in walker]
