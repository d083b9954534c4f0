"""Object storage protocol for type-safe dependency injection.

This module defines the narrow capability interface every storage backend
implements. Repository synchronization talks to object storage only through
these three calls, so backends are chosen at construction time and swapped
freely in tests.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol for flat, prefix-addressed blob storage.

    Example:
        >>> def copy_object(store: ObjectStore, src: str, dst: str) -> None:
        ...     store.write_object("bucket", dst, store.read_object("bucket", src))
    """

    def list_keys(self, container: str, prefix: str) -> list[str]:
        """List every key in a container that starts with prefix.

        Args:
            container: The container (bucket) name.
            prefix: Key prefix to match. An empty prefix lists everything.

        Returns:
            Matching keys in lexicographic order.

        Raises:
            ObjectNotFoundError: If the container does not exist.
            StorageError: If the listing fails.
        """
        ...

    def read_object(self, container: str, key: str) -> bytes:
        """Read the full contents of one object.

        Args:
            container: The container (bucket) name.
            key: The object key.

        Returns:
            The object bytes.

        Raises:
            ObjectNotFoundError: If the container or key does not exist.
            StorageError: If the read fails.
        """
        ...

    def write_object(self, container: str, key: str, data: bytes) -> None:
        """Create or replace one object.

        Args:
            container: The container (bucket) name.
            key: The object key.
            data: The new object contents.

        Raises:
            StorageError: If the write fails.
        """
        ...
