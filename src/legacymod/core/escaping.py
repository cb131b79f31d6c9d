"""Conversion between raw text and the body of a JSON string literal."""

from __future__ import annotations

import re

# Applied in order; the backslash must go first so later escapes are not doubled.
_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("/", "\\/"),
    ("\b", "\\b"),
    ("\n", "\\n"),
    ("\t", "\\t"),
    ("\f", "\\f"),
    ("\r", "\\r"),
)

_UNESCAPES: dict[str, str] = {
    "b": "\b",
    "n": "\n",
    "t": "\t",
    "f": "\f",
    "r": "\r",
    "/": "/",
    '"': '"',
    "\\": "\\",
}

# C0 control characters without a short escape are not allowed raw in JSON.
_CONTROL_PATTERN = re.compile(r"[\x00-\x07\x0b\x0e-\x1f]")
_CONTROL_ESCAPE_PATTERN = re.compile(r"00[01][0-9a-fA-F]")


def escape(text: str) -> str:
    """Return *text* as the body of a JSON string literal, without quotes."""
    escaped = text
    for raw, replacement in _ESCAPES:
        escaped = escaped.replace(raw, replacement)
    return _CONTROL_PATTERN.sub(lambda match: f"\\u{ord(match.group()):04x}", escaped)


def unescape(body: str) -> str:
    """Reverse :func:`escape`.

    The input is scanned once from left to right, so the output of one escape
    is never re-read as the start of another. Backslash sequences that
    :func:`escape` never produces are kept verbatim.
    """
    decoded: list[str] = []
    index = 0
    length = len(body)
    while index < length:
        char = body[index]
        if char == "\\" and index + 1 < length:
            marker = body[index + 1]
            replacement = _UNESCAPES.get(marker)
            if replacement is not None:
                decoded.append(replacement)
                index += 2
                continue
            if marker == "u" and _CONTROL_ESCAPE_PATTERN.fullmatch(body, index + 2, index + 6):
                decoded.append(chr(int(body[index + 2 : index + 6], 16)))
                index += 6
                continue
        decoded.append(char)
        index += 1
    return "".join(decoded)


def quote(text: str) -> str:
    """Return *text* as a complete JSON string literal."""
    return f'"{escape(text)}"'


__all__ = ["escape", "quote", "unescape"]
