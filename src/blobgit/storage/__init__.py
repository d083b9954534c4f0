"""Object storage access for blobgit.

This package provides the narrow ObjectStore capability interface, one
adapter per storage backend, and object storage path resolution.

Classes:
    ObjectStore: Runtime-checkable protocol implemented by every backend.
    MemoryObjectStore: In-process store for tests and ephemeral use.
    FilesystemObjectStore: Containers as directories under a root.
    S3ObjectStore: S3-compatible storage over boto3.
    CredentialCache: Expiring credential holder injected into S3ObjectStore.
    ObjectLocation: Container plus key prefix.

Example:
    >>> from blobgit.storage import MemoryObjectStore, resolve_object_path
    >>> location = resolve_object_path("/bucket/apps/a1")
    >>> store = MemoryObjectStore()
    >>> store.write_object(location.container, location.join("x"), b"data")
"""

from blobgit.storage._credentials import (
    CredentialCache,
    CredentialProvider,
    StorageCredentials,
)
from blobgit.storage._factory import create_object_store
from blobgit.storage._filesystem import FilesystemObjectStore
from blobgit.storage._memory import MemoryObjectStore
from blobgit.storage._path import ObjectLocation, resolve_object_path
from blobgit.storage._protocol import ObjectStore
from blobgit.storage._s3 import S3ObjectStore

__all__ = [
    "CredentialCache",
    "CredentialProvider",
    "FilesystemObjectStore",
    "MemoryObjectStore",
    "ObjectLocation",
    "ObjectStore",
    "S3ObjectStore",
    "StorageCredentials",
    "create_object_store",
    "resolve_object_path",
]
