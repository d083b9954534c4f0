"""Unit tests for RepositoryService validation and error translation."""

from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from blobgit.config import Config, StorageBackend, load_config
from blobgit.exceptions import (
    InvalidFilePathError,
    RepositorySyncError,
    StorageError,
    SyncErrorKind,
)
from blobgit.repository import (
    Author,
    RepositoryHandle,
    RepositoryService,
    starter_files,
    validate_change_set,
    validate_file_path,
)
from blobgit.storage import FilesystemObjectStore, MemoryObjectStore
from blobgit.workspace import WorkspaceManager

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


class TestStarterFiles:
    def test_readme_names_the_app(self) -> None:
        assert starter_files("a1")["README.md"] == (
            b"# a1\n\nThis project was created in Replit.\n"
        )

    def test_gitignore_content(self) -> None:
        assert starter_files("a1")[".gitignore"] == b"node_modules/\n.env\n*.log\n.DS_Store\n"


class TestValidateFilePath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("notes.txt", "notes.txt"),
            ("src/app/main.py", "src/app/main.py"),
            ("./src//main.py", "src/main.py"),
            (".gitignore", ".gitignore"),
            ("docs/.github/x", "docs/.github/x"),
        ],
    )
    def test_accepts_and_normalizes(self, path: str, expected: str) -> None:
        assert validate_file_path(path) == expected

    @pytest.mark.parametrize(
        "path",
        [
            "",
            ".",
            "/etc/passwd",
            "../outside",
            "a/../../b",
            "a/..",
            "dir\\file",
            "nul\x00byte",
            ".git/config",
            "sub/.git/hooks/pre-commit",
            ".GIT/HEAD",
        ],
    )
    def test_rejects(self, path: str) -> None:
        with pytest.raises(InvalidFilePathError) as exc_info:
            _ = validate_file_path(path)

        assert exc_info.value.path == path


class TestValidateChangeSet:
    def test_encodes_text_as_utf8(self) -> None:
        assert validate_change_set({"a.txt": "héllo"}) == {"a.txt": "héllo".encode()}

    def test_keeps_bytes(self) -> None:
        assert validate_change_set({"a.bin": b"\x00\xff"}) == {"a.bin": b"\x00\xff"}

    def test_rejects_paths_normalizing_to_same_file(self) -> None:
        with pytest.raises(InvalidFilePathError, match="Duplicate"):
            _ = validate_change_set({"a.txt": "1", "./a.txt": "2"})


class TestFromConfig:
    def test_builds_configured_store_and_workspaces(self, tmp_path: Path) -> None:
        config = load_config(
            environ={},
            overrides={
                "storage": {"backend": "filesystem", "root": str(tmp_path / "objects")},
                "workspace": {"root": str(tmp_path / "ws"), "prefix": "repo-"},
                "repository": {"initial_commit_message": "Scaffold"},
            },
        )

        service = RepositoryService.from_config(config, logger=MagicMock())

        assert service.workspaces.root == tmp_path / "ws"
        assert service.workspaces.prefix == "repo-"

    def test_defaults_to_memory_backend(self) -> None:
        config = Config()

        assert config.storage.backend is StorageBackend.MEMORY
        _ = RepositoryService.from_config(config)


class TestErrorTranslation:
    def test_invalid_object_path_is_validation(
        self, service: RepositoryService, author: Author
    ) -> None:
        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.initialize_repository(RepositoryHandle("a1", "/"), author)

        assert exc_info.value.kind is SyncErrorKind.VALIDATION
        assert str(exc_info.value).startswith("Failed to initialize repository:")

    def test_invalid_author_is_validation_and_cleans_up(
        self,
        service: RepositoryService,
        handle: RepositoryHandle,
        workspace_root: Path,
    ) -> None:
        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.initialize_repository(handle, Author("", "ada@x.io"))

        assert exc_info.value.kind is SyncErrorKind.VALIDATION
        assert list(workspace_root.iterdir()) == []

    def test_upload_failure_is_upload(
        self, workspaces: WorkspaceManager, handle: RepositoryHandle, author: Author
    ) -> None:
        store = MagicMock()
        store.write_object.side_effect = StorageError("denied", container="bucket")
        service = RepositoryService(store, workspaces=workspaces)

        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.initialize_repository(handle, author)

        assert exc_info.value.kind is SyncErrorKind.UPLOAD
        assert isinstance(exc_info.value.cause, Exception)

    def test_download_failure_is_download(
        self,
        workspaces: WorkspaceManager,
        handle: RepositoryHandle,
        workspace_root: Path,
    ) -> None:
        store = MagicMock()
        store.list_keys.side_effect = StorageError("timeout", container="bucket")
        service = RepositoryService(store, workspaces=workspaces)

        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.get_commit_history(handle)

        assert exc_info.value.kind is SyncErrorKind.DOWNLOAD
        assert str(exc_info.value).startswith("Failed to get commit history:")
        assert list(workspace_root.iterdir()) == []

    def test_uninitialized_repository(
        self, service: RepositoryService, handle: RepositoryHandle
    ) -> None:
        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.get_branch_info(handle)

        assert exc_info.value.kind is SyncErrorKind.NOT_INITIALIZED
        assert "/bucket/apps/a1" in str(exc_info.value)

    def test_version_control_failure_cleans_up(
        self,
        service: RepositoryService,
        handle: RepositoryHandle,
        author: Author,
        workspace_root: Path,
        mocker: "MockerFixture",
    ) -> None:
        _ = service.initialize_repository(handle, author)
        _ = mocker.patch(
            "blobgit.repository._engine.porcelain.commit",
            side_effect=RuntimeError("index locked"),
        )

        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.commit_changes(handle, {"a.txt": "a"}, author, "add a")

        assert exc_info.value.kind is SyncErrorKind.VERSION_CONTROL
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert "index locked" in str(exc_info.value)
        assert list(workspace_root.iterdir()) == []

    def test_failed_commit_leaves_stored_repository_unchanged(
        self,
        service: RepositoryService,
        store: MemoryObjectStore,
        handle: RepositoryHandle,
        author: Author,
        mocker: "MockerFixture",
    ) -> None:
        _ = service.initialize_repository(handle, author)
        before = dict(store.containers["bucket"])
        _ = mocker.patch(
            "blobgit.repository._engine.porcelain.commit",
            side_effect=RuntimeError("boom"),
        )

        with pytest.raises(RepositorySyncError):
            _ = service.commit_changes(handle, {"a.txt": "a"}, author, "add a")

        assert store.containers["bucket"] == before


class TestCommitValidation:
    def test_rejected_path_writes_nothing(
        self,
        workspaces: WorkspaceManager,
        handle: RepositoryHandle,
        author: Author,
    ) -> None:
        store = MagicMock()
        service = RepositoryService(store, workspaces=workspaces)

        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.commit_changes(handle, {"../x": "x"}, author, "escape")

        assert exc_info.value.kind is SyncErrorKind.VALIDATION
        store.list_keys.assert_not_called()
        store.write_object.assert_not_called()

    def test_blank_message_is_validation(
        self, service: RepositoryService, handle: RepositoryHandle, author: Author
    ) -> None:
        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.commit_changes(handle, {"a.txt": "a"}, author, "   ")

        assert exc_info.value.kind is SyncErrorKind.VALIDATION

    def test_empty_change_set_is_nothing_to_commit(
        self, service: RepositoryService, handle: RepositoryHandle, author: Author
    ) -> None:
        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.commit_changes(handle, {}, author, "nothing")

        assert exc_info.value.nothing_to_commit

    def test_history_limit_below_one_is_validation(
        self, service: RepositoryService, handle: RepositoryHandle
    ) -> None:
        with pytest.raises(RepositorySyncError) as exc_info:
            _ = service.get_commit_history(handle, limit=0)

        assert exc_info.value.kind is SyncErrorKind.VALIDATION


class TestLogging:
    def test_logs_successful_initialize(
        self,
        store: MemoryObjectStore,
        workspaces: WorkspaceManager,
        handle: RepositoryHandle,
        author: Author,
    ) -> None:
        logger = MagicMock()
        bound = logger.bind.return_value
        service = RepositoryService(store, workspaces=workspaces, logger=logger)

        sha = service.initialize_repository(handle, author)

        logger.bind.assert_any_call(
            operation="initialize repository",
            app_id="a1",
            object_storage_path="/bucket/apps/a1",
        )
        bound.info.assert_any_call(
            "Starting repository operation", container="bucket", prefix="apps/a1"
        )
        bound.info.assert_any_call("Initialized repository", sha=sha)

    def test_logs_failure_with_kind(
        self,
        store: MemoryObjectStore,
        workspaces: WorkspaceManager,
        handle: RepositoryHandle,
    ) -> None:
        logger = MagicMock()
        bound = logger.bind.return_value
        service = RepositoryService(store, workspaces=workspaces, logger=logger)

        with pytest.raises(RepositorySyncError):
            _ = service.get_commit_history(handle)

        assert bound.error.call_args.kwargs["kind"] == "not_initialized"


class TestFilesystemBackend:
    def test_initialize_writes_git_tree_under_prefix(
        self, tmp_path: Path, workspaces: WorkspaceManager, handle: RepositoryHandle, author: Author
    ) -> None:
        store = FilesystemObjectStore(tmp_path / "objects")
        service = RepositoryService(store, workspaces=workspaces)

        _ = service.initialize_repository(handle, author)

        git_dir = tmp_path / "objects" / "bucket" / "apps" / "a1" / ".git"
        assert (git_dir / "HEAD").is_file()
        assert not (tmp_path / "objects" / "bucket" / "apps" / "a1" / "README.md").exists()
