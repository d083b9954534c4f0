"""In-memory object store."""

import threading
from dataclasses import dataclass, field

from blobgit.exceptions import ObjectNotFoundError


@dataclass(slots=True)
class MemoryObjectStore:
    """Object store held entirely in process memory.

    Containers are created on first write. Safe to share between threads;
    each call takes a lock for its duration.

    Example:
        >>> store = MemoryObjectStore()
        >>> store.write_object("bucket", "a/b.txt", b"hello")
        >>> store.list_keys("bucket", "a/")
        ['a/b.txt']
    """

    containers: dict[str, dict[str, bytes]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def create_container(self, container: str) -> None:
        """Create an empty container if it does not already exist."""
        with self._lock:
            _ = self.containers.setdefault(container, {})

    def list_keys(self, container: str, prefix: str) -> list[str]:
        with self._lock:
            objects = self._container(container)
            return sorted(k for k in objects if k.startswith(prefix))

    def read_object(self, container: str, key: str) -> bytes:
        with self._lock:
            objects = self._container(container)
            try:
                return objects[key]
            except KeyError:
                msg = f"No such object: {container}/{key}"
                raise ObjectNotFoundError(msg, container=container, key=key) from None

    def write_object(self, container: str, key: str, data: bytes) -> None:
        with self._lock:
            self.containers.setdefault(container, {})[key] = bytes(data)

    def _container(self, container: str) -> dict[str, bytes]:
        try:
            return self.containers[container]
        except KeyError:
            msg = f"No such container: {container}"
            raise ObjectNotFoundError(msg, container=container) from None
