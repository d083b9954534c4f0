"""Shared test fixtures for blobgit tests."""

import os
from pathlib import Path

import pytest
from rich.console import Console

from blobgit.repository import Author, RepositoryHandle, RepositoryService
from blobgit.storage import MemoryObjectStore
from blobgit.workspace import WorkspaceManager


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:  # pyright: ignore[reportUnusedFunction]
    """Keep BLOBGIT_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.startswith("BLOBGIT_"):
            monkeypatch.delenv(key)


@pytest.fixture
def store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Parent directory for scoped workspaces, empty between operations."""
    root = tmp_path / "workspaces"
    root.mkdir()
    return root


@pytest.fixture
def workspaces(workspace_root: Path) -> WorkspaceManager:
    return WorkspaceManager(workspace_root)


@pytest.fixture
def service(store: MemoryObjectStore, workspaces: WorkspaceManager) -> RepositoryService:
    return RepositoryService(store, workspaces=workspaces)


@pytest.fixture
def author() -> Author:
    return Author(name="Ada", email="ada@x.io")


@pytest.fixture
def handle() -> RepositoryHandle:
    return RepositoryHandle(app_id="a1", object_storage_path="/bucket/apps/a1")


@pytest.fixture
def console() -> Console:
    return Console(
        width=100,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )
