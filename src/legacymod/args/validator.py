"""Allow-list validation and decoding of lexed argument tokens."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from legacymod.core.errors import UnsupportedArgumentError, UnsupportedPositionalError
from legacymod.core.escaping import unescape
from legacymod.core.safety import redact_bindings

from .lexer import ArgumentToken, lex_arguments

_LOGGER = logging.getLogger(__name__)

POSITIONAL_MARKER = "*"


class AllowList(BaseModel):
    """Keyword names an invocation understands and whether positionals are allowed."""

    model_config = ConfigDict(frozen=True)

    names: frozenset[str] = frozenset()
    accepts_positional: bool = False

    @classmethod
    def from_declaration(cls, declaration: Iterable[str]) -> AllowList:
        """Build an allow-list from names, where ``"*"`` enables positionals."""
        names: set[str] = set()
        accepts_positional = False
        for entry in declaration:
            if entry == POSITIONAL_MARKER:
                accepts_positional = True
            elif entry:
                names.add(entry)
        return cls(names=frozenset(names), accepts_positional=accepts_positional)

    def allows(self, name: str) -> bool:
        """Return ``True`` when *name* may be supplied as a keyword argument."""
        return name in self.names


def _empty_bindings() -> dict[str, str]:
    return {}


@dataclass(frozen=True)
class ParsedArguments:
    """Decoded result of validating one argument line."""

    bindings: Mapping[str, str] = field(default_factory=_empty_bindings)
    positionals: tuple[str, ...] = ()
    tokens: tuple[ArgumentToken, ...] = ()

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return the decoded value bound to *name*, or *default*."""
        return self.bindings.get(name, default)


def bind_arguments(tokens: Iterable[ArgumentToken], allow_list: AllowList) -> ParsedArguments:
    """Validate *tokens* against *allow_list* and decode their values.

    Values are unescaped exactly once. A repeated name keeps its last value,
    while every accepted token stays in :attr:`ParsedArguments.tokens`.
    """
    bindings: dict[str, str] = {}
    positionals: list[str] = []
    accepted: list[ArgumentToken] = []
    for token in tokens:
        if token.name is None:
            if not allow_list.accepts_positional:
                raise UnsupportedPositionalError(token.raw_value)
            positionals.append(unescape(token.raw_value))
        else:
            if not allow_list.allows(token.name):
                raise UnsupportedArgumentError(token.name)
            bindings[token.name] = unescape(token.raw_value)
        accepted.append(token)

    _LOGGER.debug(
        "Validated plugin arguments",
        extra={"bindings": redact_bindings(bindings), "positional_count": len(positionals)},
    )
    return ParsedArguments(
        bindings=bindings,
        positionals=tuple(positionals),
        tokens=tuple(accepted),
    )


def parse_arguments(line: str, allow_list: AllowList | Sequence[str]) -> ParsedArguments:
    """Lex and validate *line* in one pass."""
    if not isinstance(allow_list, AllowList):
        allow_list = AllowList.from_declaration(allow_list)
    return bind_arguments(lex_arguments(line), allow_list)


__all__ = [
    "POSITIONAL_MARKER",
    "AllowList",
    "ParsedArguments",
    "bind_arguments",
    "parse_arguments",
]
