"""Whole-tree mirroring between a local directory and object storage.

Every upload writes every regular file under the local directory; every
download restores every object under the remote prefix. The cost is moving
the entire tree per call; the benefit is that each side always holds a
complete, self-consistent snapshot.
"""

from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final

from blobgit.exceptions import ObjectNotFoundError, StorageError, SyncError
from blobgit.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from blobgit.storage import ObjectStore

_SEPARATOR: Final = "/"


def _join_key(prefix: str, relative: str) -> str:
    prefix = prefix.strip(_SEPARATOR)
    return f"{prefix}{_SEPARATOR}{relative}" if prefix else relative


class DirectorySynchronizer:
    """Mirrors a local directory subtree against a key-prefixed region of storage."""

    __slots__ = ("_logger", "_store")

    def __init__(
        self,
        store: "ObjectStore",
        *,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            store: The object store to read from and write to.
            logger: Logger for transfer diagnostics.
        """
        self._store = store
        self._logger = logger if logger is not None else create_null_logger()

    def upload(self, local_dir: Path, container: str, remote_prefix: str) -> int:
        """Write every regular file under local_dir to storage.

        Each file lands at `remote_prefix/<path relative to local_dir>`.
        Directories are not stored as objects. A failure partway through
        leaves storage partially updated.

        Args:
            local_dir: Directory to upload.
            container: Destination container.
            remote_prefix: Key prefix the tree is written under.

        Returns:
            Number of objects written.

        Raises:
            SyncError: If local_dir is missing or any read or write fails.
        """
        if not local_dir.is_dir():
            msg = f"Failed to upload directory {local_dir}: not a directory"
            raise SyncError(msg)

        count = 0
        try:
            for path in sorted(local_dir.rglob("*")):
                if path.is_symlink() or not path.is_file():
                    continue
                relative = path.relative_to(local_dir).as_posix()
                self._store.write_object(
                    container, _join_key(remote_prefix, relative), path.read_bytes()
                )
                count += 1
        except (OSError, StorageError) as e:
            msg = f"Failed to upload directory {local_dir}: {e}"
            raise SyncError(msg, cause=e) from e

        self._logger.debug(
            "Uploaded directory",
            local_dir=str(local_dir),
            container=container,
            prefix=remote_prefix,
            objects=count,
        )
        return count

    def download(self, container: str, remote_prefix: str, local_dir: Path) -> int:
        """Restore every object under remote_prefix into local_dir.

        A prefix with no objects, or a container that does not exist yet, is
        not an error: nothing is written and 0 is returned. Keys ending in a
        separator and the prefix's own directory marker are skipped.

        Args:
            container: Source container.
            remote_prefix: Key prefix to restore from.
            local_dir: Directory to write into (created if missing).

        Returns:
            Number of files written.

        Raises:
            SyncError: If a key escapes local_dir or any read or write fails.
        """
        base = remote_prefix.strip(_SEPARATOR)
        list_prefix = f"{base}{_SEPARATOR}" if base else ""

        try:
            local_dir.mkdir(parents=True, exist_ok=True)
            try:
                keys = self._store.list_keys(container, list_prefix)
            except ObjectNotFoundError:
                keys = []

            count = 0
            for key in keys:
                if key.endswith(_SEPARATOR):
                    continue
                relative = key[len(list_prefix) :]
                if not relative:
                    continue

                target = self._local_target(local_dir, relative)
                target.parent.mkdir(parents=True, exist_ok=True)
                _ = target.write_bytes(self._store.read_object(container, key))
                count += 1
        except SyncError:
            raise
        except (OSError, StorageError) as e:
            msg = f"Failed to download directory {remote_prefix}: {e}"
            raise SyncError(msg, cause=e) from e

        self._logger.debug(
            "Downloaded directory",
            local_dir=str(local_dir),
            container=container,
            prefix=remote_prefix,
            objects=count,
        )
        return count

    def _local_target(self, local_dir: Path, relative: str) -> Path:
        parts = PurePosixPath(relative).parts
        if not parts or ".." in parts or parts[0] == _SEPARATOR:
            msg = f"Refusing to download key outside target directory: {relative!r}"
            raise SyncError(msg)
        return local_dir.joinpath(*parts)
