"""Scoped workspace management."""

from blobgit.workspace._workspace import WorkspaceManager

__all__ = ["WorkspaceManager"]
