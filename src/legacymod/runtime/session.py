"""Guarded lifecycle of one legacy plugin invocation."""

from __future__ import annotations

import logging
import math
import shlex
import subprocess
import sys
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any, NoReturn, TextIO

from legacymod.args.lexer import ArgumentToken, lex_arguments
from legacymod.args.validator import AllowList, ParsedArguments, bind_arguments
from legacymod.core.config import RuntimeSettings, load_settings
from legacymod.core.errors import (
    ConfigurationError,
    InvalidInvocationError,
    LegacyModError,
    MalformedArgumentLineError,
    ResponseAlreadyEmittedError,
)
from legacymod.core.formatting import FieldSpec, Raw, ResponseField, StringLiteral, format_array

from .capture import OutputCapture
from .emitter import InvocationContext, ResponseEmitter, SourceLocation
from .invocation import parse_invocation

if TYPE_CHECKING:
    from types import TracebackType

_LOGGER = logging.getLogger(__name__)

NO_RESPONSE_MESSAGE = "Module exited without emitting a response"
INTERRUPTED_EXIT_CODE = 130


class ModuleSession:
    """Context manager owning the response channel of one invocation.

    Leaving the ``with`` block without a response, or through an uncaught
    exception, emits a ``failed: true`` response instead. Exceptions are not
    propagated in that case since the response already reports them.
    """

    def __init__(
        self,
        *,
        emitter: ResponseEmitter | None = None,
        capture: OutputCapture | None = None,
        arguments: ParsedArguments | None = None,
    ) -> None:
        self._emitter = emitter if emitter is not None else ResponseEmitter(InvocationContext())
        self._context = self._emitter.context
        self._context.capture = capture
        self._arguments = ParsedArguments()
        if arguments is not None:
            self._apply(arguments)

    @property
    def args(self) -> ParsedArguments:
        """Return the validated arguments of this invocation."""
        return self._arguments

    @property
    def variables(self) -> dict[str, str]:
        """Return the names ``VariableRef`` fields resolve against."""
        return self._context.variables

    @property
    def emitted(self) -> bool:
        return self._emitter.emitted

    def bind(self, tokens: Iterable[ArgumentToken], allow_list: AllowList) -> ParsedArguments:
        """Validate *tokens* and expose the bindings as variables."""
        arguments = bind_arguments(tokens, allow_list)
        self._apply(arguments)
        return arguments

    def set(self, name: str, value: object) -> None:
        """Store *value* as text under *name* for later ``VariableRef`` lookups."""
        self._context.variables[name] = value if isinstance(value, str) else str(value)

    def emit(self, *fields: FieldSpec, extra: Sequence[str] = ()) -> str:
        """Write the response without ending the invocation."""
        return self._emitter.emit(list(fields), extra)

    def exit_json(self, *fields: FieldSpec, **values: Any) -> NoReturn:
        """Emit a response built from *fields* and *values*, then exit with status 0."""
        self.emit(*fields, *(response_field(name, value) for name, value in values.items()))
        raise SystemExit(0)

    def fail_json(self, msg: str, rc: int = 1, **values: Any) -> NoReturn:
        """Emit a ``failed: true`` response, then exit with status 0."""
        self.exit_json(
            Raw("failed", "true"),
            Raw("rc", str(int(rc))),
            StringLiteral("msg", msg),
            **values,
        )

    def __enter__(self) -> ModuleSession:
        """Start capturing output; if that fails, report it and exit with status 0."""
        capture = self._context.capture
        if capture is not None and not capture.active:
            try:
                capture.begin()
            except OSError as error:
                _LOGGER.warning("Output capture could not start", exc_info=error)
                self._context.capture = None
                self._emitter.emit_failure(f"Cannot capture plugin output: {error}", rc=1)
                raise SystemExit(0) from error
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        try:
            if self._emitter.emitted:
                if exc is None or isinstance(exc, (SystemExit, ResponseAlreadyEmittedError)):
                    return False
                _LOGGER.warning("Plugin failed after emitting its response", exc_info=exc)
                return True
            if exc is None:
                self._emitter.emit_failure(NO_RESPONSE_MESSAGE, rc=0)
                return True
            reason, rc, operation = _describe_exception(exc)
            location = (
                None
                if rc == 0 or isinstance(exc, LegacyModError)
                else SourceLocation.from_traceback(tb)
            )
            if location is not None and operation is None:
                operation = location.source
            if rc != 0:
                _LOGGER.warning("Plugin failed with an uncaught exception", exc_info=exc)
            self._emitter.emit_failure(reason, rc, location=location, operation=operation)
            return True
        finally:
            if self._context.capture is not None:
                self._context.capture.release()

    def _apply(self, arguments: ParsedArguments) -> None:
        self._arguments = arguments
        self._context.variables.update(arguments.bindings)


def response_field(name: str, value: object) -> ResponseField:
    """Convert a Python value into the matching response field form."""
    if isinstance(value, bool):
        return Raw(name, "true" if value else "false")
    if isinstance(value, int):
        return Raw(name, str(value))
    if isinstance(value, float) and math.isfinite(value):
        return Raw(name, repr(value))
    if isinstance(value, (list, tuple)):
        items = [item if isinstance(item, str) else str(item) for item in value]
        return Raw(name, format_array(items))
    if isinstance(value, str):
        return StringLiteral(name, value)
    return StringLiteral(name, str(value))


def _describe_exception(exc: BaseException) -> tuple[str, int, str | None]:
    """Return the reason, exit code and failing operation for *exc*."""
    if isinstance(exc, subprocess.CalledProcessError):
        command = exc.cmd
        operation = (
            shlex.join(str(part) for part in command)
            if isinstance(command, Sequence) and not isinstance(command, (str, bytes))
            else str(command)
        )
        return f"returned non-zero exit status {exc.returncode}", exc.returncode, operation
    if isinstance(exc, SystemExit):
        code = exc.code
        if code is None or code == 0:
            return NO_RESPONSE_MESSAGE, 0, None
        if isinstance(code, int):
            return f"exited with status {code}", code, None
        return str(code), 1, None
    if isinstance(exc, KeyboardInterrupt):
        return "Interrupted", INTERRUPTED_EXIT_CODE, None
    if isinstance(exc, LegacyModError):
        return str(exc), 1, None
    detail = str(exc)
    reason = f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__
    return reason, 1, None


def run_module(
    main: Callable[[ModuleSession], object],
    declaration: Iterable[str] | AllowList,
    argv: Sequence[str] | None = None,
    *,
    settings: RuntimeSettings | None = None,
    stream: TextIO | None = None,
) -> int:
    """Run *main* as a legacy plugin and return the process exit status.

    *declaration* lists the accepted keyword names; include ``"*"`` to accept
    positional arguments. Scripts typically end with
    ``raise SystemExit(run_module(main, ["path", "mode"]))``.
    """
    arguments = sys.argv[1:] if argv is None else argv
    allow_list = (
        declaration if isinstance(declaration, AllowList) else AllowList.from_declaration(declaration)
    )
    emitter = ResponseEmitter(InvocationContext(), stream=stream)

    try:
        resolved = settings if settings is not None else load_settings()
        source = parse_invocation(arguments)
    except (InvalidInvocationError, ConfigurationError) as error:
        emitter.emit_failure(str(error), rc=1)
        return 0
    logging.getLogger("legacymod").setLevel(resolved.log_level)

    try:
        tokens = list(lex_arguments(source.line))
    except MalformedArgumentLineError as error:
        sys.stderr.write(f"{error}\n")
        sys.stderr.flush()
        return 1

    capture = (
        OutputCapture(directory=resolved.capture_dir, redirect_fds=resolved.redirect_fds)
        if source.captures_output
        else None
    )
    session = ModuleSession(emitter=emitter, capture=capture)
    try:
        with session:
            session.bind(tokens, allow_list)
            main(session)
    except SystemExit:
        # Only reachable after a response was written; its fields carry the outcome.
        return 0
    return 0


__all__ = [
    "INTERRUPTED_EXIT_CODE",
    "NO_RESPONSE_MESSAGE",
    "ModuleSession",
    "response_field",
    "run_module",
]
