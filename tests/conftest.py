"""Root pytest fixtures for shellpipe tests."""

from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

from shellpipe.telemetry import LogLevel, PipeLogger


@pytest.fixture
def testdata(tmp_path: Path) -> Path:
    """Create a small file tree.

    Layout:
        hello.txt                      "hello world"
        empty.txt                      ""
        multiple_files/                1.txt 2.txt 3.tar.zip
        multiple_files_with_subdirectory/
            1.txt 2.txt 3.tar.zip dir/.hidden dir/1.txt dir/2.txt
    """
    (tmp_path / "hello.txt").write_bytes(b"hello world")
    (tmp_path / "empty.txt").write_bytes(b"")

    flat = tmp_path / "multiple_files"
    flat.mkdir()
    for name in ("1.txt", "2.txt", "3.tar.zip"):
        (flat / name).write_text(f"{name}\n")

    nested = tmp_path / "multiple_files_with_subdirectory"
    (nested / "dir").mkdir(parents=True)
    for name in ("1.txt", "2.txt", "3.tar.zip", "dir/.hidden", "dir/1.txt", "dir/2.txt"):
        (nested / name).write_text(f"{name}\n")

    return tmp_path


@pytest.fixture
def capture() -> io.BytesIO:
    """A writer to pass to with_stdout/with_stderr/tee."""
    return io.BytesIO()


@pytest.fixture
def log_stream():
    """Route shellpipe logging at DEBUG level into a buffer."""
    stream = io.StringIO()
    PipeLogger.configure(level=LogLevel.DEBUG, format="text", stream=stream)
    yield stream
    PipeLogger.configure(level=LogLevel.INFO, format="text", stream=sys.stderr)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "posix: mark test as requiring a POSIX shell and coreutils",
    )
