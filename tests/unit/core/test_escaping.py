"""Tests for JSON string escaping helpers."""

from __future__ import annotations

import json

import pytest

from legacymod.core.escaping import escape, quote, unescape


def test_escape_covers_every_short_escape() -> None:
    """Each special character maps to its two-character JSON escape."""
    text = 'a\\b"c/d\be\nf\tg\fh\ri'

    assert escape(text) == 'a\\\\b\\"c\\/d\\be\\nf\\tg\\fh\\ri'


def test_escape_keeps_multiline_text_on_one_line() -> None:
    """Newlines become ``\\n`` so the response stays a single physical line."""
    escaped = escape("first\nsecond\n")

    assert "\n" not in escaped
    assert escaped == "first\\nsecond\\n"


def test_escape_passes_non_ascii_through() -> None:
    """Non-ASCII characters are left untouched."""
    assert escape("café ✓") == "café ✓"


def test_escape_encodes_other_control_characters() -> None:
    """Control characters without a short form still produce valid JSON."""
    escaped = escape("\x1b[31mred\x1b[0m")

    assert escaped == "\\u001b[31mred\\u001b[0m"
    assert json.loads(quote("\x1b[31mred\x1b[0m")) == "\x1b[31mred\x1b[0m"


def test_unescape_does_not_expand_twice() -> None:
    """An escaped backslash followed by ``n`` is not read as a newline."""
    assert unescape("\\\\n") == "\\n"
    assert unescape("\\\\\\n") == "\\\n"


def test_unescape_keeps_unknown_sequences() -> None:
    """Backslash sequences the escaper never produces survive decoding."""
    assert unescape("C:\\x\\y") == "C:\\x\\y"
    assert unescape("trailing\\") == "trailing\\"
    assert unescape("\\u0041") == "\\u0041"


def test_embedded_quotes_decode_and_reencode() -> None:
    """A raw value with escaped quotes decodes and re-encodes symmetrically."""
    decoded = unescape('say \\"hi\\"')

    assert decoded == 'say "hi"'
    assert escape(decoded) == 'say \\"hi\\"'


@pytest.mark.parametrize(
    "text",
    [
        "",
        "plain",
        "back\\slash",
        "\\\\double",
        'quote " inside',
        "path/with/slashes",
        "tab\tnew\nline\rfeed\fbell\b",
        "\\n literal backslash-n",
        "ends with backslash \\",
        "\x01\x02\x1f control",
        "\\u0001 looks escaped",
        "unicode ünïcødé",
    ],
)
def test_round_trip(text: str) -> None:
    """Unescaping an escaped string yields the original text."""
    assert unescape(escape(text)) == text


@pytest.mark.parametrize("text", ["x", 'he said "hi"', "a\\b/c", "line\nbreak\ttab"])
def test_quote_is_valid_json(text: str) -> None:
    """Quoted output is parsed back by the standard JSON decoder."""
    assert json.loads(quote(text)) == text
