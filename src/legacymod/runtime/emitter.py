"""Single-shot emission of the JSON response for a plugin invocation."""

from __future__ import annotations

import logging
import sys
import traceback
from dataclasses import dataclass, field
from types import TracebackType
from typing import TYPE_CHECKING, TextIO

from legacymod.core.errors import ResponseAlreadyEmittedError
from legacymod.core.formatting import FieldSpec, Raw, StringLiteral, format_object, parse_field

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .capture import OutputCapture

_LOGGER = logging.getLogger(__name__)

_CAPTURE_CHANNELS = ("stdout", "stderr")


def _empty_variables() -> dict[str, str]:
    return {}


@dataclass
class InvocationContext:
    """Mutable state owned by exactly one plugin invocation."""

    variables: dict[str, str] = field(default_factory=_empty_variables)
    capture: OutputCapture | None = None
    emitted: bool = False


@dataclass(frozen=True)
class SourceLocation:
    """Where an uncaught failure was raised."""

    path: str
    line: int
    function: str
    source: str | None = None

    @classmethod
    def from_traceback(cls, tb: TracebackType | None) -> SourceLocation | None:
        """Return the innermost frame of *tb*, if there is one."""
        if tb is None:
            return None
        frames = traceback.extract_tb(tb)
        if not frames:
            return None
        frame = frames[-1]
        return cls(
            path=frame.filename,
            line=frame.lineno or 0,
            function=frame.name,
            source=frame.line or None,
        )


def describe_failure(
    reason: str,
    *,
    location: SourceLocation | None = None,
    operation: str | None = None,
) -> str:
    """Build the human readable ``msg`` of a failure response."""
    parts: list[str] = []
    if location is not None:
        parts.append(f"{location.path}: line {location.line}: in {location.function}")
    if operation:
        parts.append(f"'{operation}' failed")
    parts.append(reason)
    return ": ".join(parts)


class ResponseEmitter:
    """Write exactly one JSON object to the real stdout for an invocation."""

    def __init__(
        self,
        context: InvocationContext | None = None,
        *,
        stream: TextIO | None = None,
    ) -> None:
        self._context = context if context is not None else InvocationContext()
        self._stream = stream

    @property
    def context(self) -> InvocationContext:
        """Return the invocation state this emitter writes for."""
        return self._context

    @property
    def emitted(self) -> bool:
        """Return ``True`` once the response has been written."""
        return self._context.emitted

    def emit(self, fields: Sequence[FieldSpec], extra_var_names: Sequence[str] = ()) -> str:
        """Finalize capture, format *fields* and write the response line."""
        if self._context.emitted:
            message = "A response has already been emitted for this invocation"
            raise ResponseAlreadyEmittedError(message)
        self._context.emitted = True

        extra = list(extra_var_names)
        taken = {parse_field(item).name if isinstance(item, str) else item.name for item in fields}
        taken.update(extra)
        extra.extend(self._finalize_capture(taken))

        line = format_object(fields, extra, self._context.variables)
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(line + "\n")
        stream.flush()
        _LOGGER.debug("Emitted plugin response", extra={"response_chars": len(line)})
        return line

    def emit_failure(
        self,
        reason: str,
        rc: int = 1,
        *,
        location: SourceLocation | None = None,
        operation: str | None = None,
    ) -> str:
        """Emit a ``failed: true`` response describing *reason*."""
        message = describe_failure(reason, location=location, operation=operation)
        _LOGGER.info("Emitting failure response", extra={"rc": rc})
        return self.emit(
            [
                Raw("failed", "true"),
                Raw("rc", str(int(rc))),
                StringLiteral("msg", message),
            ],
        )

    def _finalize_capture(self, taken: set[str]) -> list[str]:
        """Release the capture and return the channels to append.

        A channel whose name the caller already uses keeps the caller's value;
        the captured text for it is dropped.
        """
        capture = self._context.capture
        if capture is None:
            return []
        captured = capture.release()
        attached: list[str] = []
        for channel, text in zip(_CAPTURE_CHANNELS, (captured.stdout, captured.stderr), strict=True):
            if not text:
                continue
            if channel in taken:
                _LOGGER.debug(
                    "Captured output shadowed by response field",
                    extra={"channel": channel},
                )
                continue
            self._context.variables[channel] = text
            attached.append(channel)
        return attached


__all__ = [
    "InvocationContext",
    "ResponseEmitter",
    "SourceLocation",
    "describe_failure",
]
