"""Tests for allow-list validation of argument tokens."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from legacymod.args import (
    POSITIONAL_MARKER,
    AllowList,
    ArgumentToken,
    bind_arguments,
    parse_arguments,
)
from legacymod.core.errors import (
    MalformedArgumentLineError,
    UnsupportedArgumentError,
    UnsupportedPositionalError,
)


def test_named_arguments_bind_decoded_values() -> None:
    """All allowed names are bound to their decoded values."""
    parsed = parse_arguments(
        'file=/tmp/a.txt mode=0644 owner="jane doe"',
        AllowList.from_declaration(["file", "mode", "owner"]),
    )

    assert dict(parsed.bindings) == {"file": "/tmp/a.txt", "mode": "0644", "owner": "jane doe"}
    assert parsed.positionals == ()


def test_positionals_accepted_with_marker() -> None:
    """The reserved marker switches on positional arguments."""
    parsed = parse_arguments("a b c", [POSITIONAL_MARKER])

    assert parsed.positionals == ("a", "b", "c")
    assert dict(parsed.bindings) == {}


def test_positional_rejected_without_marker() -> None:
    """Positionals without the marker fail with UnsupportedPositionalError."""
    with pytest.raises(UnsupportedPositionalError):
        parse_arguments("name=x stray", ["name"])


def test_unknown_name_fails() -> None:
    """Names outside the allow-list fail with the offending name."""
    with pytest.raises(UnsupportedArgumentError) as excinfo:
        parse_arguments("foo=bar", ["baz"])

    assert excinfo.value.name == "foo"


def test_failure_stops_before_later_tokens() -> None:
    """Tokens after an unknown name are never consumed."""
    consumed: list[ArgumentToken] = []

    def tokens() -> Iterator[ArgumentToken]:
        for token in (
            ArgumentToken("ok", "1"),
            ArgumentToken("nope", "2"),
            ArgumentToken("ok", "3"),
        ):
            consumed.append(token)
            yield token

    with pytest.raises(UnsupportedArgumentError):
        bind_arguments(tokens(), AllowList.from_declaration(["ok"]))

    assert [token.raw_value for token in consumed] == ["1", "2"]


def test_values_are_unescaped_once() -> None:
    """Escapes in raw values are decoded exactly once."""
    parsed = parse_arguments(
        'msg="say \\"hi\\"" path="C:\\\\temp" lit=a\\\\nb',
        ["msg", "path", "lit"],
    )

    assert parsed.bindings["msg"] == 'say "hi"'
    assert parsed.bindings["path"] == "C:\\temp"
    assert parsed.bindings["lit"] == "a\\nb"


def test_repeated_name_last_writer_wins() -> None:
    """A repeated name keeps its last value while both tokens stay recorded."""
    parsed = parse_arguments("mode=0600 mode=0644", ["mode"])

    assert parsed.bindings["mode"] == "0644"
    assert [token.raw_value for token in parsed.tokens] == ["0600", "0644"]


def test_positionals_mixed_with_names_keep_order() -> None:
    """Positional order follows the line even with names in between."""
    parsed = parse_arguments('first k=v "second one" third', ["k", POSITIONAL_MARKER])

    assert parsed.positionals == ("first", "second one", "third")
    assert parsed.get("k") == "v"
    assert parsed.get("missing", "dflt") == "dflt"


def test_unterminated_quote_propagates() -> None:
    """Malformed lines surface from parse_arguments unchanged."""
    with pytest.raises(MalformedArgumentLineError):
        parse_arguments('owner="jane', ["owner"])


def test_allow_list_from_declaration() -> None:
    """Declarations split into names and the positional flag."""
    allow_list = AllowList.from_declaration(["a", POSITIONAL_MARKER, "", "b"])

    assert allow_list.names == frozenset({"a", "b"})
    assert allow_list.accepts_positional is True
    assert allow_list.allows("a")
    assert not allow_list.allows(POSITIONAL_MARKER)


@pytest.mark.parametrize(
    "line",
    [
        "a=1",
        "b=two c=three",
        'a="x y" b= c=\\"q\\"',
        "c=1 a=2 b=3 a=4",
    ],
)
def test_lines_with_allowed_names_always_succeed(line: str) -> None:
    """Any line built only from allowed names parses successfully."""
    allow_list = AllowList.from_declaration(["a", "b", "c"])

    parsed = parse_arguments(line, allow_list)

    assert set(parsed.bindings) <= allow_list.names
    assert parsed.positionals == ()
