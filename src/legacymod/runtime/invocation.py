"""Setup-time handling of how a plugin was invoked."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from legacymod.core.errors import InvalidInvocationError

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True)
class InvocationSource:
    """The argument line of one invocation and where it came from."""

    line: str
    path: Path | None = None

    @property
    def captures_output(self) -> bool:
        """Return ``True`` for the file form, which reserves stdout for the response."""
        return self.path is not None


class _InvocationParser(argparse.ArgumentParser):
    """Argument parser that reports problems instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise InvalidInvocationError(f"invalid plugin invocation: {message}")


def _build_parser(prog: str | None) -> argparse.ArgumentParser:
    parser = _InvocationParser(prog=prog, add_help=False, allow_abbrev=False)
    parser.add_argument(
        "args_path",
        nargs="?",
        help="File containing the argument line written by the orchestrator.",
    )
    parser.add_argument(
        "-a",
        "--args",
        dest="args_line",
        help="Argument line given inline; output is not captured (local testing).",
    )
    return parser


def parse_invocation(argv: Sequence[str], *, prog: str | None = None) -> InvocationSource:
    """Resolve *argv* (without the program name) into an :class:`InvocationSource`."""
    namespace = _build_parser(prog).parse_args(list(argv))
    args_path: str | None = namespace.args_path
    args_line: str | None = namespace.args_line

    if args_path is not None and args_line is not None:
        message = "invalid plugin invocation: pass either an arguments file or --args, not both"
        raise InvalidInvocationError(message)
    if args_line is not None:
        return InvocationSource(line=args_line)
    if args_path is None:
        message = "invalid plugin invocation: an arguments file or --args is required"
        raise InvalidInvocationError(message)

    path = Path(args_path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as error:
        message = f"Arguments file not found: {path}"
        raise InvalidInvocationError(message) from error
    except OSError as error:
        message = f"Unable to read arguments file {path}: {error}"
        raise InvalidInvocationError(message) from error
    return InvocationSource(line=text.rstrip("\n"), path=path)


__all__ = ["InvocationSource", "parse_invocation"]
