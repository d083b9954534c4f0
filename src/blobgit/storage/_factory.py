"""Storage backend selection."""

from typing import TYPE_CHECKING, assert_never

from blobgit.config import StorageBackend
from blobgit.storage._filesystem import FilesystemObjectStore
from blobgit.storage._memory import MemoryObjectStore
from blobgit.storage._s3 import S3ObjectStore

if TYPE_CHECKING:
    from blobgit.config import StorageConfig
    from blobgit.storage._credentials import CredentialCache
    from blobgit.storage._protocol import ObjectStore


def create_object_store(
    config: "StorageConfig",
    *,
    credentials: "CredentialCache | None" = None,
) -> "ObjectStore":
    """Build the object store named by the storage configuration.

    Args:
        config: The storage configuration section.
        credentials: Credential cache for backends that use one (S3 only).

    Returns:
        A concrete ObjectStore for the configured backend.
    """
    match config.backend:
        case StorageBackend.MEMORY:
            return MemoryObjectStore()
        case StorageBackend.FILESYSTEM:
            return FilesystemObjectStore(config.root)
        case StorageBackend.S3:
            return S3ObjectStore(
                region=config.s3.region or None,
                endpoint_url=config.s3.endpoint_url or None,
                request_timeout_s=config.s3.request_timeout_s,
                max_attempts=config.s3.max_attempts,
                credentials=credentials,
            )
        case _:  # pragma: no cover
            assert_never(config.backend)
