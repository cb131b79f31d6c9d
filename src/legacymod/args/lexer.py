"""Character-level tokenizer for legacy plugin argument lines."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from legacymod.core.errors import MalformedArgumentLineError

_LOGGER = logging.getLogger(__name__)

_SPACE = " "
_QUOTE = '"'
_BACKSLASH = "\\"
_EQUALS = "="


@dataclass(frozen=True)
class ArgumentToken:
    """One ``name=value`` or positional fragment of an argument line.

    ``raw_value`` still carries backslash escapes; decoding happens during
    validation.
    """

    name: str | None
    raw_value: str

    @property
    def is_positional(self) -> bool:
        """Return ``True`` when the token has no ``name=`` prefix."""
        return self.name is None


def lex_arguments(line: str) -> Iterator[ArgumentToken]:
    """Yield the tokens of *line* in the order they appear.

    Raises :class:`MalformedArgumentLineError` when a quoted value is left open.
    """
    scanner = _Scanner(line)
    while True:
        scanner.skip_spaces()
        if scanner.at_end():
            return
        name = scanner.read_name()
        raw_value = scanner.read_value(name)
        _LOGGER.debug("Lexed argument token", extra={"argument": name, "positional": name is None})
        yield ArgumentToken(name=name, raw_value=raw_value)


class _Scanner:
    """Cursor over the unconsumed suffix of an argument line."""

    def __init__(self, line: str) -> None:
        self._line = line
        self._pos = 0

    def at_end(self) -> bool:
        return self._pos >= len(self._line)

    def remainder(self) -> str:
        return self._line[self._pos :]

    def skip_spaces(self) -> None:
        while not self.at_end() and self._line[self._pos] == _SPACE:
            self._pos += 1

    def read_name(self) -> str | None:
        """Consume ``name=`` if the remainder starts with one."""
        end = self._pos
        while end < len(self._line) and self._line[end] not in (_SPACE, _EQUALS, _QUOTE):
            end += 1
        if end == self._pos or end >= len(self._line) or self._line[end] != _EQUALS:
            return None
        name = self._line[self._pos : end]
        self._pos = end + 1
        return name

    def read_value(self, name: str | None) -> str:
        if not self.at_end() and self._line[self._pos] == _QUOTE:
            return self._read_quoted(name)
        return self._read_bare()

    def _read_quoted(self, name: str | None) -> str:
        start = self._pos
        self._pos += 1
        collected: list[str] = []
        escaped = False
        while not self.at_end():
            char = self._line[self._pos]
            self._pos += 1
            if escaped:
                collected.append(char)
                escaped = False
            elif char == _BACKSLASH:
                collected.append(char)
                escaped = True
            elif char == _QUOTE:
                return "".join(collected)
            else:
                collected.append(char)
        raise MalformedArgumentLineError(name, self._line[start:])

    def _read_bare(self) -> str:
        collected: list[str] = []
        escaped = False
        while not self.at_end():
            char = self._line[self._pos]
            if char == _SPACE and not escaped:
                break
            collected.append(char)
            escaped = char == _BACKSLASH and not escaped
            self._pos += 1
        return "".join(collected)


__all__ = ["ArgumentToken", "lex_arguments"]
