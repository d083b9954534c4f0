"""Directory synchronization against object storage."""

from blobgit.sync._synchronizer import DirectorySynchronizer

__all__ = ["DirectorySynchronizer"]
