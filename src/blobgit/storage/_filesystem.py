"""Object store backed by a local directory tree.

Each container is a directory under the store root and each key is a
relative file path inside it. Useful for development and single-host
deployments where a mounted volume stands in for a bucket.
"""

from pathlib import Path, PurePosixPath

from blobgit.exceptions import ObjectNotFoundError, StorageError


class FilesystemObjectStore:
    """Object store mapping containers to directories under a root.

    Attributes:
        root: The resolved directory holding one subdirectory per container.
    """

    __slots__ = ("_root",)

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def list_keys(self, container: str, prefix: str) -> list[str]:
        container_dir = self._container_dir(container)
        if not container_dir.is_dir():
            msg = f"No such container: {container}"
            raise ObjectNotFoundError(msg, container=container)

        try:
            keys = [
                p.relative_to(container_dir).as_posix()
                for p in container_dir.rglob("*")
                if p.is_file()
            ]
        except OSError as e:
            msg = f"Failed to list {container}/{prefix}: {e}"
            raise StorageError(msg, container=container) from e
        return sorted(k for k in keys if k.startswith(prefix))

    def read_object(self, container: str, key: str) -> bytes:
        path = self._object_path(container, key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            msg = f"No such object: {container}/{key}"
            raise ObjectNotFoundError(msg, container=container, key=key) from None
        except OSError as e:
            msg = f"Failed to read {container}/{key}: {e}"
            raise StorageError(msg, container=container, key=key) from e

    def write_object(self, container: str, key: str, data: bytes) -> None:
        path = self._object_path(container, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _ = path.write_bytes(data)
        except OSError as e:
            msg = f"Failed to write {container}/{key}: {e}"
            raise StorageError(msg, container=container, key=key) from e

    def _container_dir(self, container: str) -> Path:
        if not container or container in {".", ".."} or "/" in container:
            msg = f"Invalid container name: {container!r}"
            raise StorageError(msg, container=container)
        return self._root / container

    def _object_path(self, container: str, key: str) -> Path:
        container_dir = self._container_dir(container)
        relative = PurePosixPath(key)
        if (
            not key
            or key.endswith("/")
            or relative.is_absolute()
            or ".." in relative.parts
        ):
            msg = f"Invalid object key: {key!r}"
            raise StorageError(msg, container=container, key=key)
        return container_dir.joinpath(*relative.parts)
