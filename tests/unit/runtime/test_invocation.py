"""Tests for resolving how a plugin was invoked."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from legacymod.core.errors import InvalidInvocationError
from legacymod.runtime.invocation import InvocationSource, parse_invocation

if TYPE_CHECKING:
    from pathlib import Path


def test_file_form_reads_line_and_enables_capture(tmp_path: Path) -> None:
    """The file form strips trailing newlines and captures output."""
    args_file = tmp_path / "args"
    args_file.write_text('path=/etc/hosts owner="root"\n\n', encoding="utf-8")

    source = parse_invocation([str(args_file)])

    assert source == InvocationSource(line='path=/etc/hosts owner="root"', path=args_file)
    assert source.captures_output


@pytest.mark.parametrize("flag", ["--args", "-a"])
def test_literal_form_skips_capture(flag: str) -> None:
    """The inline form is used verbatim and passes output through."""
    source = parse_invocation([flag, "a=1 b=2"])

    assert source.line == "a=1 b=2"
    assert source.path is None
    assert not source.captures_output


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--verbose"],
        ["args.txt", "--force"],
        ["--args"],
        ["args.txt", "--args", "a=1"],
        ["one.txt", "two.txt"],
    ],
)
def test_invalid_invocations(argv: list[str]) -> None:
    """Unrecognised or conflicting setup options raise InvalidInvocationError."""
    with pytest.raises(InvalidInvocationError):
        parse_invocation(argv)


def test_missing_arguments_file(tmp_path: Path) -> None:
    """A path that does not exist is reported as an invalid invocation."""
    with pytest.raises(InvalidInvocationError, match="not found"):
        parse_invocation([str(tmp_path / "missing")])
