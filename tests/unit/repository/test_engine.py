"""Unit tests for GitEngine against real dulwich repositories."""

import shutil
from pathlib import Path

import pytest
from dulwich.errors import NotGitRepository

from blobgit.exceptions import InvalidAuthorError, InvalidFilePathError
from blobgit.repository import Author, GitEngine, format_identity, validate_author


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def engine(workdir: Path) -> GitEngine:
    return GitEngine.init(workdir)


def _commit_files(engine: GitEngine, files: dict[str, bytes], author: Author) -> str:
    _ = engine.write_files(files)
    _ = engine.stage(files)
    return engine.commit("change", author)


class TestFormatIdentity:
    def test_formats_name_and_email(self) -> None:
        assert format_identity(Author("Ada", "ada@x.io")) == b"Ada <ada@x.io>"

    def test_strips_surrounding_whitespace(self) -> None:
        assert format_identity(Author("  Ada ", " ada@x.io ")) == b"Ada <ada@x.io>"

    @pytest.mark.parametrize(
        "author",
        [
            Author("", "ada@x.io"),
            Author("Ada", "   "),
            Author("Ada <evil>", "ada@x.io"),
            Author("Ada", "ada@x.io>\ncommitter x"),
            Author("Ada\x00", "ada@x.io"),
        ],
    )
    def test_rejects_unusable_identities(self, author: Author) -> None:
        with pytest.raises(InvalidAuthorError):
            validate_author(author)
        with pytest.raises(InvalidAuthorError):
            _ = format_identity(author)


class TestOpen:
    def test_missing_git_dir_raises(self, workdir: Path) -> None:
        with pytest.raises(NotGitRepository):
            _ = GitEngine.open(workdir)

    def test_recreates_empty_control_directories(
        self, engine: GitEngine, workdir: Path, author: Author
    ) -> None:
        _ = _commit_files(engine, {"a.txt": b"a"}, author)
        engine.close()
        for empty in ("objects/info", "objects/pack", "refs/tags"):
            shutil.rmtree(workdir / ".git" / empty)

        with GitEngine.open(workdir) as reopened:
            assert reopened.last_commit() is not None
            assert (workdir / ".git" / "refs" / "tags").is_dir()


class TestWriteAndStage:
    def test_write_creates_parent_directories(self, engine: GitEngine, workdir: Path) -> None:
        written = engine.write_files({"src/app/main.py": b"print()"})

        assert written == [workdir / "src" / "app" / "main.py"]
        assert written[0].read_bytes() == b"print()"

    def test_write_rejects_paths_outside_root(self, engine: GitEngine) -> None:
        with pytest.raises(InvalidFilePathError):
            _ = engine.write_files({"../outside.txt": b"x"})

    def test_stage_reports_new_files(self, engine: GitEngine) -> None:
        files = {"a.txt": b"a", "dir/b.txt": b"b"}
        _ = engine.write_files(files)

        assert engine.stage(files) == frozenset({"a.txt", "dir/b.txt"})

    def test_stage_unchanged_content_reports_nothing(
        self, engine: GitEngine, author: Author
    ) -> None:
        files = {"a.txt": b"a"}
        _ = _commit_files(engine, files, author)

        _ = engine.write_files(files)

        assert engine.stage(files) == frozenset()

    def test_stage_reports_modified_files_only(
        self, engine: GitEngine, author: Author
    ) -> None:
        _ = _commit_files(engine, {"a.txt": b"a", "b.txt": b"b"}, author)
        files = {"a.txt": b"a", "b.txt": b"changed"}
        _ = engine.write_files(files)

        assert engine.stage(files) == frozenset({"b.txt"})

    def test_stage_ignores_gitignore_rules(self, engine: GitEngine) -> None:
        files = {".gitignore": b"*.log\n", "debug.log": b"x"}
        _ = engine.write_files(files)

        assert engine.stage(files) == frozenset({".gitignore", "debug.log"})

    def test_stage_file_over_tracked_directory(
        self, engine: GitEngine, workdir: Path, author: Author
    ) -> None:
        _ = _commit_files(engine, {"docs/x.md": b"# x", "keep.txt": b"k"}, author)
        shutil.rmtree(workdir / "docs")
        _ = engine.write_files({"docs": b"now a file"})

        staged = engine.stage(["docs"])

        assert staged == frozenset({"docs", "docs/x.md"})
        assert b"docs/x.md" not in list(engine.repo.open_index())
        assert b"keep.txt" in list(engine.repo.open_index())

    def test_stage_directory_over_tracked_file(
        self, engine: GitEngine, workdir: Path, author: Author
    ) -> None:
        _ = _commit_files(engine, {"docs": b"a file"}, author)
        (workdir / "docs").unlink()
        _ = engine.write_files({"docs/x.md": b"# x"})

        staged = engine.stage(["docs/x.md"])

        assert staged == frozenset({"docs", "docs/x.md"})
        assert b"docs" not in list(engine.repo.open_index())


class TestCommit:
    def test_returns_full_hex_sha(self, engine: GitEngine, author: Author) -> None:
        sha = _commit_files(engine, {"a.txt": b"a"}, author)

        assert len(sha) == 40
        assert all(c in "0123456789abcdef" for c in sha)
        assert engine.repo.head().decode() == sha

    def test_records_author_and_committer(self, engine: GitEngine, author: Author) -> None:
        sha = _commit_files(engine, {"a.txt": b"a"}, author)

        commit = engine.repo[sha.encode()]
        assert commit.author == b"Ada <ada@x.io>"  # pyright: ignore[reportAttributeAccessIssue]
        assert commit.committer == b"Ada <ada@x.io>"  # pyright: ignore[reportAttributeAccessIssue]

    def test_configure_identity_writes_repo_config(
        self, engine: GitEngine, author: Author
    ) -> None:
        engine.configure_identity(author)

        config = engine.repo.get_config()
        assert config.get((b"user",), b"name") == b"Ada"
        assert config.get((b"user",), b"email") == b"ada@x.io"


class TestQueries:
    def test_empty_repository(self, engine: GitEngine) -> None:
        assert engine.last_commit() is None
        assert engine.history(10) == []

    def test_current_branch_of_fresh_repository(
        self, engine: GitEngine, workdir: Path
    ) -> None:
        head = (workdir / ".git" / "HEAD").read_text().strip()

        assert engine.current_branch() == head.removeprefix("ref: refs/heads/")

    def test_current_branch_follows_symbolic_head(
        self, engine: GitEngine, author: Author
    ) -> None:
        _ = _commit_files(engine, {"a.txt": b"a"}, author)
        engine.repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")

        assert engine.current_branch() == "main"

    def test_detached_head(
        self, engine: GitEngine, workdir: Path, author: Author
    ) -> None:
        sha = _commit_files(engine, {"a.txt": b"a"}, author)
        _ = (workdir / ".git" / "HEAD").write_text(f"{sha}\n")

        assert engine.current_branch() == "HEAD"

    def test_last_commit_is_newest(self, engine: GitEngine, author: Author) -> None:
        _ = _commit_files(engine, {"a.txt": b"a"}, author)
        second = _commit_files(engine, {"b.txt": b"b"}, author)

        last = engine.last_commit()

        assert last is not None
        assert last.sha == second
        assert last.files == ("b.txt",)
