"""Pytest fixtures for treesync tests."""

import io
import os
import platform
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator, Optional

import pytest
from rich.console import Console

from treesync.models import SyncTask
from treesync.scanning import canonicalize
from treesync.ui import SyncTUI


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: end-to-end synchronization runs")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    """Empty source directory ``a``."""
    source = temp_dir / "a"
    source.mkdir()
    return source


@pytest.fixture
def destination_dir(temp_dir: Path) -> Path:
    """Empty destination directory ``b``."""
    destination = temp_dir / "b"
    destination.mkdir()
    return destination


@pytest.fixture
def scenario_trees(source_dir: Path, destination_dir: Path) -> Dict[str, Path]:
    """Create the two-tree layout used by the copy and delete scenarios.

    Creates:
        temp_dir/
        ├── a/
        │   ├── a.txt ("hello")
        │   └── aa/
        │       └── aa.txt ("world")
        └── b/   (empty)

    Returns:
        Dictionary with the "source" and "destination" roots.
    """
    (source_dir / "a.txt").write_text("hello")
    (source_dir / "aa").mkdir()
    (source_dir / "aa" / "aa.txt").write_text("world")
    return {"source": source_dir, "destination": destination_dir}


@pytest.fixture
def make_task() -> Callable[[Path, Path], SyncTask]:
    """Factory building a SyncTask with canonical roots from two Paths."""
    def factory(source: Path, destination: Path) -> SyncTask:
        return SyncTask(
            source=canonicalize(str(source), environ={}),
            destination=canonicalize(str(destination), environ={}),
        )
    return factory


@pytest.fixture
def unreadable_file(source_dir: Path) -> Generator[Optional[Path], None, None]:
    """Create a source file with no read permissions.

    Yields None where permissions cannot be enforced (Windows, root).
    """
    if platform.system() == "Windows" or (hasattr(os, "geteuid") and os.geteuid() == 0):
        yield None
        return

    restricted = source_dir / "secret.txt"
    restricted.write_text("secret content")
    original_mode = restricted.stat().st_mode
    os.chmod(restricted, 0o000)

    try:
        yield restricted
    finally:
        os.chmod(restricted, original_mode)


@pytest.fixture
def tui_with_captured_output() -> SyncTUI:
    """Create a SyncTUI instance with Console output captured to StringIO.

    Access captured output via: tui.console.file.getvalue()
    """
    output = io.StringIO()
    console = Console(file=output, force_terminal=False, width=200)
    return SyncTUI(console=console)


def tree_snapshot(root: Path) -> Dict[str, int]:
    """Map every file's relative POSIX path under ``root`` to its size."""
    return {
        path.relative_to(root).as_posix(): path.stat().st_size
        for path in root.rglob("*")
        if path.is_file()
    }


@pytest.fixture
def snapshot() -> Callable[[Path], Dict[str, int]]:
    """Expose tree_snapshot to tests."""
    return tree_snapshot
