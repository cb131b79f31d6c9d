"""Tests for temporary-file output capture."""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

import pytest

from legacymod.runtime.capture import CapturedOutput, OutputCapture

if TYPE_CHECKING:
    from pathlib import Path


def test_capture_collects_python_streams(tmp_path: Path) -> None:
    """Text printed while capturing is returned on release."""
    original_stdout, original_stderr = sys.stdout, sys.stderr
    capture = OutputCapture(directory=tmp_path, redirect_fds=False)

    capture.begin()
    print("to stdout")
    print("to stderr", file=sys.stderr)
    result = capture.release()

    assert result == CapturedOutput(stdout="to stdout\n", stderr="to stderr\n")
    assert sys.stdout is original_stdout
    assert sys.stderr is original_stderr


def test_capture_begin_failure_leaves_streams_alone(tmp_path: Path) -> None:
    """A directory that does not exist fails begin without redirecting anything."""
    original_stdout, original_stderr = sys.stdout, sys.stderr
    capture = OutputCapture(directory=tmp_path / "missing", redirect_fds=False)

    with pytest.raises(OSError):
        capture.begin()

    assert not capture.active
    assert sys.stdout is original_stdout
    assert sys.stderr is original_stderr


def test_capture_files_are_unique_and_deleted(tmp_path: Path) -> None:
    """Capture files carry the process id and disappear after release."""
    capture = OutputCapture(directory=tmp_path, redirect_fds=False)

    capture.begin()
    paths = capture.paths
    assert paths is not None
    stdout_path, stderr_path = paths
    assert stdout_path.exists()
    assert stderr_path.exists()
    assert str(os.getpid()) in stdout_path.name
    assert stdout_path != stderr_path
    capture.release()

    assert not stdout_path.exists()
    assert not stderr_path.exists()
    assert list(tmp_path.iterdir()) == []


def test_release_is_idempotent(tmp_path: Path) -> None:
    """Releasing twice returns the same captured text."""
    capture = OutputCapture(directory=tmp_path, redirect_fds=False)
    capture.begin()
    sys.stdout.write("once")

    first = capture.release()
    second = capture.release()

    assert first == second == CapturedOutput(stdout="once", stderr="")
    assert not capture.active


def test_release_without_begin_is_empty() -> None:
    """Releasing a capture that never started yields nothing."""
    assert OutputCapture(redirect_fds=False).release() == CapturedOutput()


def test_capture_cannot_restart(tmp_path: Path) -> None:
    """A capture object covers exactly one session."""
    capture = OutputCapture(directory=tmp_path, redirect_fds=False)
    capture.begin()
    try:
        with pytest.raises(RuntimeError):
            capture.begin()
    finally:
        capture.release()

    with pytest.raises(RuntimeError):
        capture.begin()


def test_descriptor_redirect_captures_raw_writes(
    tmp_path: Path, capfd: pytest.CaptureFixture[str],
) -> None:
    """With descriptor redirection, writes straight to fd 1 and 2 are captured."""
    capture = OutputCapture(directory=tmp_path, redirect_fds=True)

    capture.begin()
    os.write(1, b"raw out\n")
    os.write(2, b"raw err\n")
    result = capture.release()

    assert result.stdout == "raw out\n"
    assert result.stderr == "raw err\n"
    captured = capfd.readouterr()
    assert "raw out" not in captured.out
    assert "raw err" not in captured.err
