from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from rich.console import Console

from blobgit.cli import CLIContext, create_app


@pytest.fixture
def cli_config(tmp_path: Path) -> Generator[Path]:
    """Write a config file pointing at a filesystem store under tmp_path.

    Creates:
        tmp_path/
            blobgit.toml
            objects/      # object store root
            workspaces/   # scoped workspaces
            blobgit.log
    """
    (tmp_path / "workspaces").mkdir(exist_ok=True)
    config_file = tmp_path / "blobgit.toml"
    config_file.write_text(f"""[storage]
backend = "filesystem"
root = "{(tmp_path / "objects").as_posix()}"

[workspace]
root = "{(tmp_path / "workspaces").as_posix()}"

[logging]
level = "debug"
file = "{(tmp_path / "blobgit.log").as_posix()}"
""")

    yield config_file

    CLIContext.reset()


@pytest.fixture
def blobgit_cli_with_exit_code(console: Console) -> Callable[..., int]:
    """Create the CLI app for testing and return the exit code of each run."""

    app = create_app(console=console, error_console=console)

    def _run(*args: str) -> int:
        """Run CLI app and return exit code (0 if no SystemExit)."""

        try:
            app.meta(list(args))
        except SystemExit as e:
            return e.code if isinstance(e.code, int) else 1
        else:
            return 0

    return _run
