"""Temporary-file capture of stdout and stderr while a plugin runs."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TextIO

_LOGGER = logging.getLogger(__name__)

_STDOUT_FD = 1
_STDERR_FD = 2


@dataclass(frozen=True)
class CapturedOutput:
    """Text written to the side channels during a capture session."""

    stdout: str = ""
    stderr: str = ""


class OutputCapture:
    """Redirect stdout and stderr into two per-process temporary files.

    The Python-level ``sys.stdout``/``sys.stderr`` objects are always swapped.
    With ``redirect_fds`` the underlying descriptors 1 and 2 are redirected as
    well so that child processes are captured too. :meth:`release` restores
    everything, deletes the files and may be called any number of times.
    """

    def __init__(self, *, directory: Path | None = None, redirect_fds: bool = True) -> None:
        self._directory = directory
        self._redirect_fds = redirect_fds
        self._files: tuple[IO[str], IO[str]] | None = None
        self._saved_streams: tuple[TextIO, TextIO] | None = None
        self._saved_fds: tuple[int, int] | None = None
        self._result: CapturedOutput | None = None

    @property
    def active(self) -> bool:
        """Return ``True`` while output is being redirected."""
        return self._files is not None

    @property
    def paths(self) -> tuple[Path, Path] | None:
        """Return the stdout and stderr capture file paths while active."""
        if self._files is None:
            return None
        return Path(self._files[0].name), Path(self._files[1].name)

    def begin(self) -> None:
        """Create the capture files and start redirecting output into them."""
        if self._files is not None or self._result is not None:
            message = "Output capture can only be started once"
            raise RuntimeError(message)

        prefix = f"legacymod-{os.getpid()}-"
        stdout_file = self._create_file(prefix, ".stdout")
        try:
            stderr_file = self._create_file(prefix, ".stderr")
        except OSError:
            _discard(stdout_file)
            raise

        _flush(sys.stdout)
        _flush(sys.stderr)
        if self._redirect_fds:
            try:
                self._saved_fds = _redirect_descriptors(stdout_file, stderr_file)
            except OSError:
                _discard(stdout_file)
                _discard(stderr_file)
                raise
        self._saved_streams = (sys.stdout, sys.stderr)
        self._files = (stdout_file, stderr_file)
        sys.stdout = stdout_file
        sys.stderr = stderr_file
        _LOGGER.debug(
            "Started output capture",
            extra={"stdout_path": stdout_file.name, "stderr_path": stderr_file.name},
        )

    def release(self) -> CapturedOutput:
        """Stop redirecting, read back the captured text and delete the files."""
        if self._files is None:
            return self._result if self._result is not None else CapturedOutput()

        stdout_file, stderr_file = self._files
        self._files = None
        try:
            _flush(stdout_file)
            _flush(stderr_file)
            if self._saved_fds is not None:
                _restore_descriptors(self._saved_fds)
                self._saved_fds = None
            if self._saved_streams is not None:
                sys.stdout, sys.stderr = self._saved_streams
                self._saved_streams = None
            stdout_file.close()
            stderr_file.close()
            self._result = CapturedOutput(
                stdout=_read_text(stdout_file.name),
                stderr=_read_text(stderr_file.name),
            )
        finally:
            _discard(stdout_file)
            _discard(stderr_file)
        _LOGGER.debug(
            "Released output capture",
            extra={
                "stdout_chars": len(self._result.stdout),
                "stderr_chars": len(self._result.stderr),
            },
        )
        return self._result

    def _create_file(self, prefix: str, suffix: str) -> IO[str]:
        return tempfile.NamedTemporaryFile(
            "w+",
            encoding="utf-8",
            buffering=1,
            prefix=prefix,
            suffix=suffix,
            dir=self._directory,
            delete=False,
        )


def _redirect_descriptors(stdout_file: IO[str], stderr_file: IO[str]) -> tuple[int, int] | None:
    try:
        saved = (os.dup(_STDOUT_FD), os.dup(_STDERR_FD))
    except OSError:
        _LOGGER.debug("Standard descriptors unavailable; capturing Python streams only")
        return None
    try:
        os.dup2(stdout_file.fileno(), _STDOUT_FD)
        os.dup2(stderr_file.fileno(), _STDERR_FD)
    except OSError:
        _restore_descriptors(saved)
        raise
    return saved


def _restore_descriptors(saved: tuple[int, int]) -> None:
    saved_stdout, saved_stderr = saved
    try:
        os.dup2(saved_stdout, _STDOUT_FD)
        os.dup2(saved_stderr, _STDERR_FD)
    finally:
        os.close(saved_stdout)
        os.close(saved_stderr)


def _flush(stream: IO[str] | TextIO | None) -> None:
    if stream is not None and not stream.closed:
        stream.flush()


def _read_text(name: str) -> str:
    return Path(name).read_text(encoding="utf-8", errors="replace")


def _discard(handle: IO[str]) -> None:
    if not handle.closed:
        handle.close()
    Path(handle.name).unlink(missing_ok=True)


__all__ = ["CapturedOutput", "OutputCapture"]
